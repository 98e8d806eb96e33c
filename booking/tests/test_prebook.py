from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from booking.forms import PreBookingForm
from booking.models import PreBooking
from .helpers import make_admin, make_rider


def schedule(hours):
    when = timezone.localtime(timezone.now() + timedelta(hours=hours))
    return {'date': when.date().isoformat(), 'time': when.strftime('%H:%M')}


class PreBookingFormTest(TestCase):
    def test_builds_scheduled_datetime(self):
        form = PreBookingForm(data={'username': 'priya', 'pickup': 'Gate 1', 'drop': 'Library', **schedule(3)})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertIsNotNone(form.cleaned_data['scheduled_datetime'])

    def test_lead_time_enforced(self):
        form = PreBookingForm(data={'username': 'priya', 'pickup': 'Gate 1', 'drop': 'Library', **schedule(0.25)})
        self.assertFalse(form.is_valid())
        self.assertIn('scheduled_datetime', form.errors)

    def test_same_locations_rejected(self):
        form = PreBookingForm(data={'username': 'priya', 'pickup': 'Library', 'drop': 'Library', **schedule(3)})
        self.assertFalse(form.is_valid())


class PreBookingEndpointsTest(APITestCase):
    def setUp(self):
        self.rider = make_rider('priya')
        self.admin = make_admin()
        self.url = reverse('booking:prebookings')

    def _create(self, hours=3, **extra):
        self.client.force_authenticate(self.rider)
        return self.client.post(self.url, {'pickup': 'Gate 1', 'drop': 'Science Block', **schedule(hours), **extra},
                                format='json')

    def test_create_defaults_username(self):
        response = self._create()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['username'], 'priya')
        self.assertEqual(response.data['status'], 'pending')

    def test_create_too_soon(self):
        response = self._create(hours=0.25)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_list_is_admin_only_and_ordered(self):
        self._create(hours=5)
        self._create(hours=2)

        self.assertEqual(self.client.get(self.url).status_code, 403)

        self.client.force_authenticate(self.admin)
        rows = self.client.get(self.url).data['prebookings']
        self.assertEqual(len(rows), 2)
        self.assertLess(rows[0]['scheduledDateTime'], rows[1]['scheduledDateTime'])

    def test_status_update_and_delete(self):
        prebooking_id = self._create().data['id']
        self.client.force_authenticate(self.admin)

        url = reverse('booking:prebooking_status', args=[prebooking_id])
        self.assertEqual(self.client.put(url, {'status': 'confirmed'}, format='json').data['status'], 'confirmed')
        self.assertEqual(self.client.put(url, {'status': 'teleported'}, format='json').status_code, 400)

        response = self.client.delete(reverse('booking:prebooking_delete', args=[prebooking_id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(PreBooking.objects.exists())

    def test_missing_prebooking(self):
        self.client.force_authenticate(self.admin)
        response = self.client.delete(reverse('booking:prebooking_delete', args=[404]))
        self.assertEqual(response.status_code, 404)
