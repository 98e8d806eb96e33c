"""Ride lifecycle engine.

    requested -> accepted -> otp_verified -> in_progress -> completed
    requested -> cancelled          (declined, or expired after 3 minutes)
    accepted  -> cancelled          (declined by the hero, or OTP not verified in time)

Every transition is a guarded update (see ``booking.store``). A guard that
matches nothing raises ``ConflictError``; the caller should refresh, not retry.
Expiry is decided here from stored timestamps, never from client timers.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound

from fare_estimation import calculate_fare
from user.models import ApprovalStatus, Driver
from . import payments, store
from .exceptions import ConflictError, InvalidOtpError, NoDriversAvailableError, ValidationError
from .matching import driver_satisfies, find_eligible_drivers, parse_preference
from .models import CAMPUS_LOCATIONS, CancellationReason, DriverPreference, Ride, RideStatus, TERMINAL_STATUSES

logger = logging.getLogger(__name__)


def _config(key):
    return settings.CAMPUS_RIDES[key]


def request_cutoff(now):
    """Rides created at or before this instant are no longer offered to heroes."""
    return now - timedelta(seconds=_config('RIDE_REQUEST_TTL'))


def acceptance_cutoff(now):
    """Accepted rides older than this without an OTP check are abandoned."""
    return now - timedelta(seconds=_config('ACCEPTED_RIDE_TTL'))


def generate_otp():
    length = _config('OTP_LENGTH')
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def ride_fare(is_pre_booking, scheduled_time, now=None):
    return calculate_fare(
        is_pre_booking=is_pre_booking,
        scheduled_time=scheduled_time,
        now=now or timezone.now(),
        standard_fare=_config('STANDARD_FARE'),
        pre_booking_fare=_config('PRE_BOOKING_FARE'),
        lead_hours=_config('PRE_BOOKING_LEAD_HOURS'),
    )


@dataclass(frozen=True)
class OpenRequest:
    ride: Ride
    time_remaining: int


# ---- Rider side ----

def create_ride(rider, pickup, drop, preference=None, is_pre_booking=False,
                scheduled_time=None, rider_gender=None, now=None):
    """Validate a booking, check hero availability and store it as requested.

    Pre-booked rides are offered to heroes straight away and expire on the same
    request window as any other ride; `scheduled_time` only affects the fare.
    """
    now = now or timezone.now()

    if rider is None:
        raise ValidationError('A rider is required to book a ride.')
    if not pickup or not drop:
        raise ValidationError('Pickup and drop locations are required.')
    for location in (pickup, drop):
        if location not in CAMPUS_LOCATIONS:
            raise ValidationError(f"'{location}' is not a campus pickup point.")
    if pickup == drop:
        raise ValidationError('Pickup and drop must be different locations.')

    preference = parse_preference(preference)
    if rider_gender is None:
        rider_gender = getattr(rider, 'gender', None) or None

    if is_pre_booking:
        if scheduled_time is None:
            raise ValidationError('A scheduled time is required for pre-booking.')
        if scheduled_time <= now:
            raise ValidationError('Scheduled time must be in the future.')
    else:
        # Pre-bookings are matched later; immediate rides need a hero now.
        match = find_eligible_drivers(preference)
        if match.count == 0:
            logger.info("No heroes available for rider %s (preference %s)", rider.pk, preference)
            raise NoDriversAvailableError()
        scheduled_time = None

    ride = Ride.objects.create(
        rider=rider,
        pickup_location=pickup,
        drop_location=drop,
        driver_preference=preference,
        rider_gender=rider_gender,
        is_pre_booking=bool(is_pre_booking),
        scheduled_time=scheduled_time,
        fare=ride_fare(is_pre_booking, scheduled_time, now=now),
        status=RideStatus.REQUESTED,
        created_at=now,
    )
    logger.info("Ride %s requested by rider %s: %s -> %s, fare %s",
                ride.id, rider.pk, pickup, drop, ride.fare)
    return ride


def current_ride_for_rider(rider, now=None):
    """The rider's latest ride that is still in play, after applying expiry."""
    now = now or timezone.now()
    ride = Ride.objects.filter(rider=rider).exclude(
        status__in=TERMINAL_STATUSES
    ).order_by('-created_at').first()
    if ride is None:
        return None
    ride = apply_expiry(ride, now=now)
    return ride if ride.is_active else None


# ---- Hero side ----

def list_open_requests(driver=None, now=None):
    """Requested rides still inside the acceptance window, newest first.

    When `driver` is given, rides whose gender preference the hero does not
    satisfy are left out.
    """
    now = now or timezone.now()
    rides = Ride.objects.select_related('rider').filter(
        status=RideStatus.REQUESTED,
        driver__isnull=True,
        created_at__gt=request_cutoff(now),
    )
    if driver is not None:
        rides = rides.filter(driver_preference__in=[DriverPreference.ANY, driver.gender])

    return [OpenRequest(ride=ride, time_remaining=ride.time_remaining(now))
            for ride in rides.order_by('-created_at')]


def _get_driver(driver_id):
    try:
        return Driver.objects.get(pk=driver_id)
    except (Driver.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Hero {driver_id} not found.")


def accept_ride(ride_id, driver_id, now=None):
    """Assign the hero and a fresh OTP. Exactly one of several racing heroes wins."""
    now = now or timezone.now()
    ride = store.get_ride(ride_id)
    driver = _get_driver(driver_id)

    if driver.approval_status != ApprovalStatus.APPROVED:
        raise ConflictError('Only approved heroes can accept rides.')
    if not driver_satisfies(driver, ride.driver_preference):
        raise ConflictError("This ride asked for a hero of a different gender.")

    with transaction.atomic():
        claimed = store.guarded_update(
            ride.id,
            RideStatus.REQUESTED,
            guard={'driver__isnull': True, 'created_at__gt': request_cutoff(now)},
            driver=driver,
            status=RideStatus.ACCEPTED,
            otp=generate_otp(),
            accepted_at=now,
            updated_at=now,
        )
        if not claimed:
            logger.warning("Hero %s lost ride %s: already taken, cancelled or expired", driver.id, ride.id)
            raise ConflictError('Ride not found or already accepted.')

        bound = Driver.objects.filter(
            pk=driver.id,
            approval_status=ApprovalStatus.APPROVED,
            is_online=True,
            active_ride__isnull=True,
        ).update(active_ride=ride, updated_at=now)
        if not bound:
            # Rolls back the claim above.
            raise ConflictError('Go online and finish your current ride before accepting another.')

    logger.info("Ride %s accepted by hero %s", ride.id, driver.id)
    return store.get_ride(ride.id)


def decline_ride(ride_id, driver_id=None, now=None):
    """Cancel an open request, or give up an accepted ride as its assigned hero."""
    now = now or timezone.now()
    ride = store.get_ride(ride_id)

    open_request = Q(status=RideStatus.REQUESTED, driver__isnull=True)
    if driver_id is not None:
        open_request |= Q(status=RideStatus.ACCEPTED, driver_id=driver_id)

    with transaction.atomic():
        cancelled = Ride.objects.filter(open_request, pk=ride.id).update(
            status=RideStatus.CANCELLED,
            cancellation_reason=CancellationReason.DECLINED,
            updated_at=now,
        )
        if not cancelled:
            raise ConflictError('Ride not found or already handled.')
        store.release_finished_rides()

    logger.info("Ride %s declined (hero %s)", ride.id, driver_id)
    return store.get_ride(ride.id)


def verify_otp(ride_id, submitted_otp, now=None):
    """Check the rider's pairing code and, by policy, confirm payment."""
    now = now or timezone.now()
    ride = apply_expiry(store.get_ride(ride_id), now=now)

    if ride.status != RideStatus.ACCEPTED:
        if ride.cancellation_reason == CancellationReason.ABANDONED:
            raise ConflictError('The OTP was not verified in time and the ride was released.')
        raise ConflictError('Ride is not waiting for OTP verification.')

    if isinstance(submitted_otp, int) and not isinstance(submitted_otp, bool):
        submitted = f"{submitted_otp:0{len(ride.otp)}d}"
    else:
        submitted = str(submitted_otp or '').strip()
    if not submitted:
        raise ValidationError('OTP is required.')
    if submitted != ride.otp:
        logger.warning("Wrong OTP entered for ride %s", ride.id)
        raise InvalidOtpError()

    with transaction.atomic():
        verified = store.guarded_update(
            ride.id,
            RideStatus.ACCEPTED,
            guard={'otp': submitted, 'accepted_at__gt': acceptance_cutoff(now)},
            status=RideStatus.OTP_VERIFIED,
            otp_verified_at=now,
            updated_at=now,
        )
        if not verified:
            raise ConflictError('Ride is not waiting for OTP verification.')
        if _config('OTP_CONFIRMS_PAYMENT'):
            payments.confirm_payment(ride.id)

    logger.info("OTP verified for ride %s", ride.id)
    return store.get_ride(ride.id)


def start_ride(ride_id, now=None):
    now = now or timezone.now()
    ride = store.get_ride(ride_id)
    started = store.guarded_update(
        ride.id,
        RideStatus.OTP_VERIFIED,
        status=RideStatus.IN_PROGRESS,
        actual_pickup_time=now,
        updated_at=now,
    )
    if not started:
        raise ConflictError('Verify the OTP before starting the ride.')
    logger.info("Ride %s started", ride.id)
    return store.get_ride(ride.id)


def end_ride(ride_id, now=None):
    """Complete the ride and credit the hero exactly once."""
    now = now or timezone.now()
    ride = store.get_ride(ride_id)

    with transaction.atomic():
        completed = store.guarded_update(
            ride.id,
            RideStatus.IN_PROGRESS,
            status=RideStatus.COMPLETED,
            actual_drop_time=now,
            updated_at=now,
        )
        if not completed:
            raise ConflictError('Ride is not in progress.')

        Driver.objects.filter(pk=ride.driver_id).update(
            total_rides=F('total_rides') + 1,
            total_earnings=F('total_earnings') + ride.fare,
            last_ride_at=now,
            updated_at=now,
        )
        store.release_finished_rides()

    logger.info("Ride %s completed; hero %s earned %s", ride.id, ride.driver_id, ride.fare)
    return store.get_ride(ride.id)


STATUS_TRANSITIONS = (RideStatus.OTP_VERIFIED, RideStatus.IN_PROGRESS, RideStatus.COMPLETED)


def update_status(ride_id, status, otp=None, now=None):
    """Dispatch a hero's status update to the matching transition."""
    if status == RideStatus.OTP_VERIFIED:
        return verify_otp(ride_id, otp, now=now)
    if status == RideStatus.IN_PROGRESS:
        return start_ride(ride_id, now=now)
    if status == RideStatus.COMPLETED:
        return end_ride(ride_id, now=now)
    raise ValidationError(f"Invalid status '{status}'. Use one of: {', '.join(STATUS_TRANSITIONS)}.")


def current_ride_for_driver(driver_id, now=None):
    """The hero's active ride, read through the explicit active_ride reference."""
    now = now or timezone.now()
    driver = _get_driver(driver_id)
    if driver.active_ride_id is None:
        return None
    ride = apply_expiry(store.get_ride(driver.active_ride_id), now=now)
    return ride if ride.is_active else None


# ---- Expiry ----

def apply_expiry(ride, now=None):
    """Expire a single ride if its window has passed. Returns the fresh row."""
    now = now or timezone.now()
    if ride.status == RideStatus.REQUESTED and ride.created_at <= request_cutoff(now):
        store.guarded_update(
            ride.id,
            RideStatus.REQUESTED,
            guard={'created_at__lte': request_cutoff(now)},
            status=RideStatus.CANCELLED,
            cancellation_reason=CancellationReason.EXPIRED,
            updated_at=now,
        )
        return store.get_ride(ride.id)
    if ride.status == RideStatus.ACCEPTED:
        if expire_stale_accepted(ride.id, now=now):
            return store.get_ride(ride.id)
    return ride


def expire_stale_accepted(ride_id, now=None):
    """Release an accepted ride whose OTP was not verified in time."""
    now = now or timezone.now()
    with transaction.atomic():
        abandoned = store.guarded_update(
            ride_id,
            RideStatus.ACCEPTED,
            guard={'accepted_at__lte': acceptance_cutoff(now)},
            status=RideStatus.CANCELLED,
            cancellation_reason=CancellationReason.ABANDONED,
            updated_at=now,
        )
        if abandoned:
            store.release_finished_rides()
    if abandoned:
        logger.info("Ride %s abandoned: OTP not verified within %ss", ride_id, _config('ACCEPTED_RIDE_TTL'))
    return abandoned


def expire_stale_rides(now=None):
    """Sweep every stale request and abandoned acceptance in one pass."""
    now = now or timezone.now()
    with transaction.atomic():
        expired = Ride.objects.filter(
            status=RideStatus.REQUESTED,
            created_at__lte=request_cutoff(now),
        ).update(
            status=RideStatus.CANCELLED,
            cancellation_reason=CancellationReason.EXPIRED,
            updated_at=now,
        )
        abandoned = Ride.objects.filter(
            status=RideStatus.ACCEPTED,
            accepted_at__lte=acceptance_cutoff(now),
        ).update(
            status=RideStatus.CANCELLED,
            cancellation_reason=CancellationReason.ABANDONED,
            updated_at=now,
        )
        released = store.release_finished_rides()

    if expired or abandoned:
        logger.info("Expiry sweep: %d request(s) expired, %d acceptance(s) abandoned, %d hero(es) released",
                    expired, abandoned, released)
    return {'expired': expired, 'abandoned': abandoned, 'released': released}
