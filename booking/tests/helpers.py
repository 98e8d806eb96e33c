from django.contrib.auth import get_user_model

from booking.models import Ride
from user.models import ApprovalStatus, Driver

User = get_user_model()


def make_rider(username='rider', gender='F', **extra):
    return User.objects.create_user(
        username=username,
        password='pass1234',
        phone='9876543210',
        gender=gender,
        user_type='R',
        **extra,
    )


def make_admin(username='admin'):
    return User.objects.create_user(username=username, password='pass1234', user_type='A')


def make_driver(name='Hero', gender='M', online=True, approval=ApprovalStatus.APPROVED, username=None):
    user = None
    if username:
        user = User.objects.create_user(username=username, password='pass1234', user_type='D', gender=gender)
    return Driver.objects.create(
        user=user,
        name=name,
        phone='9000000000',
        gender=gender,
        vehicle_type='E-rickshaw',
        vehicle_number='TN01AB1234',
        approval_status=approval,
        is_online=online,
    )


def age_ride(ride, created_at):
    """Backdate a ride's request time."""
    Ride.objects.filter(pk=ride.pk).update(created_at=created_at)
    ride.refresh_from_db()
    return ride
