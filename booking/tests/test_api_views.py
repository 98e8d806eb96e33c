from datetime import timedelta
from unittest import mock

from django.db import OperationalError
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from booking import lifecycle
from booking.models import RideFeedback
from .helpers import age_ride, make_admin, make_driver, make_rider


class RiderEndpointsTest(APITestCase):
    def setUp(self):
        self.rider = make_rider()
        self.hero = make_driver('Meena', gender='F', username='meena')
        self.client.force_authenticate(self.rider)

    def test_config_is_public(self):
        self.client.force_authenticate(None)
        response = self.client.get(reverse('booking:booking_config'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data['locations']), 15)
        self.assertEqual(response.data['rideRequestTtl'], 180)
        self.assertEqual(response.data['driverPollInterval'], 5)

    def test_available_drivers_by_preference(self):
        url = reverse('booking:available_drivers')
        self.assertEqual(self.client.get(url, {'preference': 'F'}).data['count'], 1)
        self.assertEqual(self.client.get(url, {'preference': 'M'}).data['count'], 0)

    def test_unknown_preference_is_rejected(self):
        response = self.client.get(reverse('booking:available_drivers'), {'preference': 'X'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_create_ride(self):
        response = self.client.post(reverse('booking:create_ride'), {
            'fromLocation': 'Gate 1',
            'toLocation': 'Library',
            'driverPreference': 'F',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'requested')
        self.assertEqual(response.data['fare'], 30)
        self.assertIsNone(response.data['otp'])

    def test_create_ride_without_heroes(self):
        response = self.client.post(reverse('booking:create_ride'), {
            'pickup': 'Gate 1', 'drop': 'Library', 'preference': 'M',
        }, format='json')
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.data['code'], 'no_drivers_available')

    def test_create_ride_same_locations(self):
        response = self.client.post(reverse('booking:create_ride'), {
            'pickup': 'Library', 'drop': 'Library',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_anonymous_cannot_book(self):
        self.client.force_authenticate(None)
        response = self.client.post(reverse('booking:create_ride'), {
            'pickup': 'Gate 1', 'drop': 'Library',
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_unknown_ride_is_not_found(self):
        response = self.client.get(reverse('booking:ride_detail', args=[9999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'not_found')

    def test_rider_sees_otp_but_hero_does_not(self):
        ride = lifecycle.create_ride(self.rider, 'Gate 1', 'Library')
        ride = lifecycle.accept_ride(ride.id, self.hero.id)
        url = reverse('booking:ride_detail', args=[ride.id])

        self.assertEqual(self.client.get(url).data['otp'], ride.otp)

        self.client.force_authenticate(self.hero.user)
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('otp', response.data)
        self.assertEqual(response.data['driver']['id'], self.hero.id)

    def test_stranger_cannot_view_ride(self):
        ride = lifecycle.create_ride(self.rider, 'Gate 1', 'Library')
        self.client.force_authenticate(make_rider('stranger'))
        response = self.client.get(reverse('booking:ride_detail', args=[ride.id]))
        self.assertEqual(response.status_code, 403)

    def test_rider_current_ride(self):
        url = reverse('booking:rider_current_ride')
        self.assertIsNone(self.client.get(url).data['ride'])

        ride = lifecycle.create_ride(self.rider, 'Gate 1', 'Library')
        self.assertEqual(self.client.get(url).data['ride']['id'], ride.id)

        age_ride(ride, timezone.now() - timedelta(minutes=5))
        self.assertIsNone(self.client.get(url).data['ride'])

    def test_store_failure_is_reported_as_unavailable(self):
        with mock.patch('booking.lifecycle.current_ride_for_rider', side_effect=OperationalError('gone')):
            response = self.client.get(reverse('booking:rider_current_ride'))
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data['code'], 'store_unavailable')


class HeroEndpointsTest(APITestCase):
    def setUp(self):
        self.rider = make_rider()
        self.hero = make_driver('Arun', username='arun')
        self.rival = make_driver('Bala', username='bala')
        self.ride = lifecycle.create_ride(self.rider, 'Gate 1', 'Library')
        self.client.force_authenticate(self.hero.user)

    def _accept(self, driver):
        return self.client.post(reverse('booking:accept_ride'), {
            'rideId': self.ride.id, 'driverId': driver.id,
        }, format='json')

    def _set_status(self, status, otp=None):
        payload = {'status': status}
        if otp is not None:
            payload['otp'] = otp
        return self.client.put(reverse('booking:update_ride_status', args=[self.ride.id]), payload, format='json')

    def test_open_requests(self):
        response = self.client.get(reverse('booking:open_requests'), {'driverId': self.hero.id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 1)
        request = response.data['requests'][0]
        self.assertEqual(request['fromLocation'], 'Gate 1')
        self.assertLessEqual(request['timeRemaining'], 180)

    def test_expired_requests_are_hidden(self):
        age_ride(self.ride, timezone.now() - timedelta(seconds=181))
        response = self.client.get(reverse('booking:open_requests'))
        self.assertEqual(response.data['requests'], [])

    def test_second_hero_gets_conflict(self):
        self.assertEqual(self._accept(self.hero).status_code, 200)

        self.client.force_authenticate(self.rival.user)
        response = self._accept(self.rival)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'conflict')

    def test_cannot_accept_for_another_hero(self):
        self.assertEqual(self._accept(self.rival).status_code, 403)

    def test_accept_requires_ids(self):
        response = self.client.post(reverse('booking:accept_ride'), {'rideId': self.ride.id}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_wrong_otp(self):
        self._accept(self.hero)
        self.ride.refresh_from_db()
        wrong = '0000' if self.ride.otp != '0000' else '1111'
        response = self._set_status('otp_verified', wrong)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'invalid_otp')

    def test_start_before_otp_conflicts(self):
        self._accept(self.hero)
        self.assertEqual(self._set_status('in_progress').status_code, 409)

    def test_full_ride_updates_stats(self):
        self._accept(self.hero)
        self.ride.refresh_from_db()

        self.assertEqual(self._set_status('otp_verified', self.ride.otp).data['paymentStatus'], 'paid')
        self.assertEqual(self._set_status('in_progress').data['status'], 'in_progress')
        self.assertEqual(self._set_status('completed').data['status'], 'completed')
        self.assertEqual(self._set_status('completed').status_code, 409)

        stats = self.client.get(reverse('booking:driver_stats', args=[self.hero.id])).data
        self.assertEqual(stats, {'totalRides': 1, 'totalEarnings': 30, 'completedRides': 1})

    def test_rival_cannot_update_status(self):
        self._accept(self.hero)
        self.client.force_authenticate(self.rival.user)
        self.assertEqual(self._set_status('in_progress').status_code, 403)

    def test_decline(self):
        response = self.client.post(reverse('booking:decline_ride'), {
            'rideId': self.ride.id, 'driverId': self.hero.id,
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['cancellationReason'], 'declined')

        response = self.client.post(reverse('booking:decline_ride'), {'rideId': self.ride.id}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_driver_current_ride(self):
        url = reverse('booking:driver_current_ride', args=[self.hero.id])
        self.assertIsNone(self.client.get(url).data['ride'])
        self._accept(self.hero)
        self.assertEqual(self.client.get(url).data['ride']['id'], self.ride.id)

    def test_cannot_go_offline_mid_ride(self):
        url = reverse('booking:driver_status', args=[self.hero.id])
        self._accept(self.hero)
        response = self.client.put(url, {'isOnline': False}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_toggle_online(self):
        url = reverse('booking:driver_status', args=[self.hero.id])
        response = self.client.put(url, {'isOnline': False}, format='json')
        self.assertEqual(response.data, {'id': self.hero.id, 'isOnline': False})
        self.assertEqual(self.client.put(url, {}, format='json').status_code, 400)

    def test_unknown_driver(self):
        response = self.client.get(reverse('booking:driver_stats', args=[9999]))
        self.assertEqual(response.status_code, 404)


class AdminEndpointsTest(APITestCase):
    def setUp(self):
        self.admin = make_admin()
        self.rider = make_rider()
        self.hero = make_driver('Arun')
        make_driver('Bala')
        self.client.force_authenticate(self.admin)

    def _complete_ride(self, pickup='Gate 1', drop='Library', **kwargs):
        ride = lifecycle.create_ride(self.rider, pickup, drop, **kwargs)
        ride = lifecycle.accept_ride(ride.id, self.hero.id)
        lifecycle.verify_otp(ride.id, ride.otp)
        lifecycle.start_ride(ride.id)
        return lifecycle.end_ride(ride.id)

    def test_drivers_list_is_admin_only(self):
        self.client.force_authenticate(self.rider)
        self.assertEqual(self.client.get(reverse('booking:driver_list')).status_code, 403)

    def test_drivers_list_busiest_first_with_rating(self):
        ride = self._complete_ride()
        RideFeedback.objects.create(ride=ride, rider=self.rider, rating=4)

        drivers = self.client.get(reverse('booking:driver_list')).data['drivers']
        self.assertEqual(drivers[0]['id'], self.hero.id)
        self.assertEqual(drivers[0]['totalRides'], 1)
        self.assertEqual(drivers[0]['averageRating'], 4.0)
        self.assertIsNotNone(drivers[0]['lastRideAt'])
        self.assertEqual(drivers[1]['averageRating'], 0.0)

    def test_history_numbers_each_heroes_rides(self):
        self._complete_ride()
        self._complete_ride('Ponlait', 'Mass Media')

        response = self.client.get(reverse('booking:ride_history'), {'type': 'normal'})
        self.assertEqual(response.data['count'], 2)
        self.assertEqual([r['driverNthRide'] for r in response.data['rides']], [2, 1])

        response = self.client.get(reverse('booking:ride_history'), {'type': 'prebook'})
        self.assertEqual(response.data['count'], 0)

    def test_history_filters(self):
        response = self.client.get(reverse('booking:ride_history'), {'type': 'weekly'})
        self.assertEqual(response.status_code, 400)
        response = self.client.get(reverse('booking:ride_history'), {'date': 'yesterday'})
        self.assertEqual(response.status_code, 400)


class RideFeedbackTest(APITestCase):
    def setUp(self):
        self.rider = make_rider()
        self.hero = make_driver('Arun')
        ride = lifecycle.create_ride(self.rider, 'Gate 1', 'Library')
        self.ride = lifecycle.accept_ride(ride.id, self.hero.id)
        self.url = reverse('booking:ride_feedback', args=[self.ride.id])
        self.client.force_authenticate(self.rider)

    def _finish(self):
        lifecycle.verify_otp(self.ride.id, self.ride.otp)
        lifecycle.start_ride(self.ride.id)
        lifecycle.end_ride(self.ride.id)

    def test_feedback_needs_completed_ride(self):
        response = self.client.post(self.url, {'rating': 5}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_feedback_once_per_ride(self):
        self._finish()
        response = self.client.post(self.url, {'rating': 5, 'message': 'Smooth ride'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['rating'], 5)

        response = self.client.post(self.url, {'rating': 3}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_rating_out_of_range(self):
        self._finish()
        response = self.client.post(self.url, {'rating': 6}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_only_rider_can_leave_feedback(self):
        self._finish()
        self.client.force_authenticate(make_rider('other'))
        self.assertEqual(self.client.post(self.url, {'rating': 5}, format='json').status_code, 403)
        self.assertFalse(RideFeedback.objects.filter(ride_id=self.ride.id).exists())
