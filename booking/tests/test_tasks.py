from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from booking import lifecycle
from booking.models import CancellationReason, RideStatus
from booking.tasks import expire_stale_rides_task
from .helpers import age_ride, make_driver, make_rider


class ExpireStaleRidesTaskTest(TestCase):
    def test_task_runs_the_sweep(self):
        make_driver()
        ride = lifecycle.create_ride(make_rider(), 'Gate 1', 'Library')
        age_ride(ride, timezone.now() - timedelta(minutes=4))

        result = expire_stale_rides_task.apply().get()

        self.assertEqual(result, {'expired': 1, 'abandoned': 0, 'released': 0})
        ride.refresh_from_db()
        self.assertEqual(ride.status, RideStatus.CANCELLED)
        self.assertEqual(ride.cancellation_reason, CancellationReason.EXPIRED)

    def test_task_is_a_noop_when_nothing_is_stale(self):
        self.assertEqual(expire_stale_rides_task(), {'expired': 0, 'abandoned': 0, 'released': 0})
