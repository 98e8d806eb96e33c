"""Driver registry: hero onboarding, availability and counters."""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from booking.exceptions import ConflictError, ValidationError
from booking.models import Ride, RideStatus
from .models import ApprovalStatus, Driver, HeroApplication

logger = logging.getLogger(__name__)


def get_driver(driver_id):
    try:
        return Driver.objects.select_related('user').get(pk=driver_id)
    except (Driver.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Hero {driver_id} not found.")


def set_online(driver_id, is_online):
    """Toggle availability. Going offline mid-ride is refused."""
    driver = get_driver(driver_id)
    now = timezone.now()

    if is_online:
        Driver.objects.filter(pk=driver.id).update(is_online=True, updated_at=now)
    else:
        updated = Driver.objects.filter(
            pk=driver.id,
            active_ride__isnull=True,
        ).update(is_online=False, updated_at=now)
        if not updated:
            raise ConflictError('Finish your current ride before going offline.')

    logger.info("Hero %s is now %s", driver.id, 'online' if is_online else 'offline')
    driver.refresh_from_db()
    return driver


def get_stats(driver_id):
    driver = get_driver(driver_id)
    return {
        'totalRides': driver.total_rides,
        'totalEarnings': driver.total_earnings,
        'completedRides': Ride.objects.filter(driver=driver, status=RideStatus.COMPLETED).count(),
    }


def list_approved(online=None, gender=None):
    """Approved heroes, busiest first."""
    drivers = Driver.objects.select_related('user').filter(approval_status=ApprovalStatus.APPROVED)
    if online is not None:
        drivers = drivers.filter(is_online=online)
    if gender:
        drivers = drivers.filter(gender=gender)
    return drivers.order_by('-total_rides', 'id')


# ---- Hero applications ----

def submit_application(cleaned_data, user=None):
    """Store an application together with its not-yet-approved Driver row.

    A user who applied before gets their existing pending or rejected Driver
    row reset and linked to the new application. Approved heroes cannot re-apply.
    """
    with transaction.atomic():
        existing = Driver.objects.filter(user=user).first() if user is not None else None
        if existing is not None and existing.is_approved:
            raise ConflictError('You are already an approved hero.')

        application = HeroApplication.objects.create(user=user, **cleaned_data)
        details = {
            'application': application,
            'name': application.name,
            'phone': application.phone,
            'gender': application.gender,
            'vehicle_type': application.vehicle_type,
            'vehicle_number': application.vehicle_number,
            'approval_status': ApprovalStatus.PENDING,
            'is_online': False,
        }
        if existing is not None:
            Driver.objects.filter(pk=existing.pk).update(updated_at=timezone.now(), **details)
        else:
            Driver.objects.create(user=user, **details)
    logger.info("Hero application %s submitted by %s", application.id, application.name)
    return application


def review_application(application_id, decision):
    """Approve or reject a pending application. Decisions are final."""
    if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
        raise ValidationError("Status must be 'approved' or 'rejected'.")
    if not HeroApplication.objects.filter(pk=application_id).exists():
        raise NotFound(f"Application {application_id} not found.")

    now = timezone.now()
    with transaction.atomic():
        decided = HeroApplication.objects.filter(
            pk=application_id,
            status=ApprovalStatus.PENDING,
        ).update(status=decision, reviewed_at=now, updated_at=now)
        if not decided:
            raise ConflictError('This application has already been reviewed.')

        Driver.objects.filter(application_id=application_id).update(
            approval_status=decision,
            updated_at=now,
        )
        application = HeroApplication.objects.select_related('user').get(pk=application_id)
        if decision == ApprovalStatus.APPROVED and application.user is not None:
            application.user.user_type = 'D'
            application.user.save(update_fields=['user_type'])

    logger.info("Hero application %s %s", application_id, decision)
    return application
