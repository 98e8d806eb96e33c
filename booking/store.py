"""Ride record store.

Status changes go through ``guarded_update`` only. The expected prior status is
part of the UPDATE predicate and the matched row count decides the winner.
"""
from django.db.models import Count, IntegerField, OuterRef, Subquery
from django.utils import timezone
from rest_framework.exceptions import NotFound

from user.models import Driver
from .models import Ride, TERMINAL_STATUSES


def get_ride(ride_id):
    try:
        return Ride.objects.select_related('rider', 'driver').get(pk=ride_id)
    except (Ride.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"Ride {ride_id} not found.")


def guarded_update(ride_id, expected_status, guard=None, **changes):
    """Apply `changes` only if the ride is still in `expected_status`.

    `guard` holds extra lookups for the predicate. Returns True when exactly
    one row matched.
    """
    lookups = {'pk': ride_id}
    if isinstance(expected_status, (list, tuple)):
        lookups['status__in'] = list(expected_status)
    else:
        lookups['status'] = expected_status
    lookups.update(guard or {})

    # QuerySet.update() skips auto_now, so stamp updated_at here.
    changes.setdefault('updated_at', timezone.now())
    return Ride.objects.filter(**lookups).update(**changes) == 1


def release_finished_rides():
    """Clear `active_ride` on heroes whose ride has reached a terminal status."""
    return Driver.objects.filter(
        active_ride__status__in=TERMINAL_STATUSES,
    ).update(active_ride=None)


def ride_history(kind=None, on_date=None):
    """All rides for the admin console, newest first.

    `kind` is ``'prebook'`` or ``'normal'``; each row carries the hero's
    running ride number as ``driver_nth_ride``.
    """
    nth_ride = Ride.objects.filter(
        driver=OuterRef('driver'),
        created_at__lte=OuterRef('created_at'),
    ).order_by().values('driver').annotate(n=Count('id')).values('n')

    rides = Ride.objects.select_related('rider', 'driver').annotate(
        driver_nth_ride=Subquery(nth_ride, output_field=IntegerField())
    )
    if kind == 'prebook':
        rides = rides.filter(is_pre_booking=True)
    elif kind == 'normal':
        rides = rides.filter(is_pre_booking=False)
    if on_date:
        rides = rides.filter(created_at__date=on_date)
    return rides.order_by('-created_at')
