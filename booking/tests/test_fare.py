from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase

from fare_estimation import calculate_fare, is_pre_booking_discounted


class FareTest(SimpleTestCase):
    def setUp(self):
        self.now = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def test_immediate_ride_pays_standard_fare(self):
        self.assertEqual(calculate_fare(now=self.now), 30)

    def test_pre_booking_well_ahead_is_discounted(self):
        scheduled = self.now + timedelta(hours=3)
        self.assertEqual(calculate_fare(True, scheduled, now=self.now), 25)

    def test_pre_booking_exactly_at_lead_is_discounted(self):
        scheduled = self.now + timedelta(hours=1)
        self.assertTrue(is_pre_booking_discounted(True, scheduled, now=self.now))

    def test_pre_booking_too_close_pays_standard_fare(self):
        scheduled = self.now + timedelta(minutes=30)
        self.assertEqual(calculate_fare(True, scheduled, now=self.now), 30)

    def test_pre_booking_without_time_pays_standard_fare(self):
        self.assertEqual(calculate_fare(True, None, now=self.now), 30)

    def test_scheduled_time_ignored_for_immediate_ride(self):
        scheduled = self.now + timedelta(hours=5)
        self.assertEqual(calculate_fare(False, scheduled, now=self.now), 30)

    def test_fare_is_deterministic(self):
        scheduled = self.now + timedelta(hours=2)
        fares = {calculate_fare(True, scheduled, now=self.now) for _ in range(5)}
        self.assertEqual(fares, {25})

    def test_custom_amounts(self):
        scheduled = self.now + timedelta(hours=2)
        fare = calculate_fare(True, scheduled, now=self.now, standard_fare=40, pre_booking_fare=20, lead_hours=2)
        self.assertEqual(fare, 20)
