import logging

from django.conf import settings
from django.db import IntegrityError
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from user import services as driver_registry
from user.permissions import IsCampusAdmin, acts_for_driver
from . import lifecycle, store
from .exceptions import ConflictError, ValidationError
from .forms import PreBookingForm, PreBookingStatusForm, RideFeedbackForm, RideRequestForm
from .matching import find_eligible_drivers
from .models import CAMPUS_LOCATIONS, DriverPreference, PreBooking, RideStatus
from .utils import (
    build_driver_payload,
    build_driver_summary,
    build_history_payload,
    build_prebooking_payload,
    build_request_payload,
    build_ride_payload,
    first_form_error,
    form_data,
)

logger = logging.getLogger(__name__)


def _require(payload, key):
    value = payload.get(key)
    if value in (None, ''):
        raise ValidationError(f"'{key}' is required.")
    return value


def _check_driver(request, driver):
    if not acts_for_driver(request.user, driver):
        raise PermissionDenied('You can only act for your own hero account.')


# ---- Rider side ----

@api_view(['GET'])
@permission_classes([AllowAny])
def booking_config(request):
    """Polling contract and booking constants for the web clients."""
    config = settings.CAMPUS_RIDES
    return Response({
        'locations': CAMPUS_LOCATIONS,
        'driverPreferences': list(DriverPreference.values),
        'standardFare': config['STANDARD_FARE'],
        'preBookingFare': config['PRE_BOOKING_FARE'],
        'preBookingLeadHours': config['PRE_BOOKING_LEAD_HOURS'],
        'rideRequestTtl': config['RIDE_REQUEST_TTL'],
        'acceptedRideTtl': config['ACCEPTED_RIDE_TTL'],
        'driverPollInterval': config['DRIVER_POLL_INTERVAL'],
        'riderPollInterval': config['RIDER_POLL_INTERVAL'],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def available_drivers(request):
    match = find_eligible_drivers(request.query_params.get('preference'))
    return Response({
        'preference': match.preference,
        'count': match.count,
        'available': match.count > 0,
        'drivers': [build_driver_summary(driver) for driver in match.drivers],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_ride(request):
    form = RideRequestForm(form_data(request.data, {
        'pickup': ['pickup', 'fromLocation'],
        'drop': ['drop', 'toLocation'],
        'preference': ['preference', 'driverPreference'],
        'is_pre_booking': ['isPreBooking', 'is_pre_booking'],
        'scheduled_time': ['scheduledTime', 'scheduled_time'],
        'rider_gender': ['gender', 'riderGender'],
    }))
    if not form.is_valid():
        raise ValidationError(first_form_error(form))

    data = form.cleaned_data
    ride = lifecycle.create_ride(
        request.user,
        data['pickup'],
        data['drop'],
        preference=data['preference'],
        is_pre_booking=data['is_pre_booking'],
        scheduled_time=data['scheduled_time'],
        rider_gender=data['rider_gender'],
    )
    return Response(build_ride_payload(ride, include_otp=True), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ride_detail(request, ride_id):
    ride = lifecycle.apply_expiry(store.get_ride(ride_id))

    is_rider = ride.rider_id == request.user.id
    is_driver = ride.driver is not None and ride.driver.user_id == request.user.id
    if not (is_rider or is_driver or request.user.is_campus_admin):
        raise PermissionDenied('You are not part of this ride.')

    return Response(build_ride_payload(ride, include_otp=is_rider))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def rider_current_ride(request):
    ride = lifecycle.current_ride_for_rider(request.user)
    return Response({'ride': build_ride_payload(ride, include_otp=True) if ride else None})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def ride_feedback(request, ride_id):
    ride = store.get_ride(ride_id)
    if ride.rider_id != request.user.id:
        raise PermissionDenied('Only the rider can leave feedback for this ride.')
    if ride.status != RideStatus.COMPLETED:
        raise ConflictError('Feedback can only be left for completed rides.')
    if hasattr(ride, 'feedback'):
        raise ConflictError('Feedback was already submitted for this ride.')

    form = RideFeedbackForm(request.data)
    if not form.is_valid():
        raise ValidationError(first_form_error(form))

    feedback = form.save(commit=False)
    feedback.ride = ride
    feedback.rider = request.user
    try:
        feedback.save()
    except IntegrityError:
        raise ConflictError('Feedback was already submitted for this ride.')

    logger.info("Feedback %s/5 recorded for ride %s", feedback.rating, ride.id)
    return Response({
        'id': feedback.id,
        'rideId': ride.id,
        'rating': feedback.rating,
        'message': feedback.message,
    }, status=status.HTTP_201_CREATED)


# ---- Hero side ----

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def open_requests(request):
    driver = None
    driver_id = request.query_params.get('driverId')
    if driver_id:
        driver = driver_registry.get_driver(driver_id)
        _check_driver(request, driver)

    pending = lifecycle.list_open_requests(driver=driver)
    return Response({
        'count': len(pending),
        'requests': [build_request_payload(open_request) for open_request in pending],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_ride(request):
    ride_id = _require(request.data, 'rideId')
    driver = driver_registry.get_driver(_require(request.data, 'driverId'))
    _check_driver(request, driver)

    ride = lifecycle.accept_ride(ride_id, driver.id)
    return Response(build_ride_payload(ride))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def decline_ride(request):
    ride_id = _require(request.data, 'rideId')
    driver_id = request.data.get('driverId')

    if driver_id not in (None, ''):
        driver = driver_registry.get_driver(driver_id)
        _check_driver(request, driver)
        driver_id = driver.id
    else:
        driver_id = None
        ride = store.get_ride(ride_id)
        profile = getattr(request.user, 'driver_profile', None)
        is_hero = profile is not None and profile.is_approved
        if not (ride.rider_id == request.user.id or is_hero or request.user.is_campus_admin):
            raise PermissionDenied('You cannot decline this ride.')

    ride = lifecycle.decline_ride(ride_id, driver_id=driver_id)
    return Response(build_ride_payload(ride))


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_ride_status(request, ride_id):
    ride = store.get_ride(ride_id)
    if not request.user.is_campus_admin:
        if ride.driver is None or not acts_for_driver(request.user, ride.driver):
            raise PermissionDenied('Only the assigned hero can update this ride.')

    ride = lifecycle.update_status(
        ride.id,
        _require(request.data, 'status'),
        otp=request.data.get('otp'),
    )
    return Response(build_ride_payload(ride))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_current_ride(request, driver_id):
    driver = driver_registry.get_driver(driver_id)
    _check_driver(request, driver)

    ride = lifecycle.current_ride_for_driver(driver.id)
    return Response({'ride': build_ride_payload(ride) if ride else None})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def driver_stats(request, driver_id):
    driver = driver_registry.get_driver(driver_id)
    _check_driver(request, driver)
    return Response(driver_registry.get_stats(driver.id))


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def driver_status(request, driver_id):
    driver = driver_registry.get_driver(driver_id)
    _check_driver(request, driver)

    is_online = request.data.get('isOnline')
    if not isinstance(is_online, bool):
        raise ValidationError("'isOnline' must be true or false.")

    driver = driver_registry.set_online(driver.id, is_online)
    return Response({'id': driver.id, 'isOnline': driver.is_online})


# ---- Admin console ----

@api_view(['GET'])
@permission_classes([IsCampusAdmin])
def driver_list(request):
    online = request.query_params.get('online')
    if online is not None:
        online = online.lower() in ('1', 'true', 'yes')

    drivers = driver_registry.list_approved(online=online, gender=request.query_params.get('gender'))
    return Response({'drivers': [build_driver_payload(driver) for driver in drivers]})


@api_view(['GET'])
@permission_classes([IsCampusAdmin])
def ride_history(request):
    kind = request.query_params.get('type') or None
    if kind not in (None, 'prebook', 'normal'):
        raise ValidationError("'type' must be 'prebook' or 'normal'.")

    on_date = request.query_params.get('date') or None
    if on_date is not None:
        try:
            on_date = parse_date(on_date)
        except ValueError:
            on_date = None
        if on_date is None:
            raise ValidationError("'date' must be formatted YYYY-MM-DD.")

    rides = store.ride_history(kind=kind, on_date=on_date)
    payload = [build_history_payload(ride) for ride in rides]
    return Response({'count': len(payload), 'rides': payload})


# ---- Pre-bookings ----

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def prebookings(request):
    if request.method == 'GET':
        if not request.user.is_campus_admin:
            raise PermissionDenied('Only campus admins can list pre-bookings.')
        return Response({
            'prebookings': [build_prebooking_payload(p) for p in PreBooking.objects.all()],
        })

    data = form_data(request.data, {
        'username': ['username'],
        'pickup': ['pickup', 'fromLocation'],
        'drop': ['drop', 'toLocation'],
        'date': ['date', 'scheduledDate'],
        'time': ['time', 'scheduledTime'],
        'scheduled_datetime': ['scheduledDateTime', 'scheduled_datetime'],
    })
    data.setdefault('username', request.user.get_username())

    form = PreBookingForm(data)
    if not form.is_valid():
        raise ValidationError(first_form_error(form))

    prebooking = form.save()
    logger.info("Pre-booking %s created for %s at %s", prebooking.id, prebooking.username,
                prebooking.scheduled_datetime)
    return Response(build_prebooking_payload(prebooking), status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsCampusAdmin])
def prebooking_status(request, prebooking_id):
    prebooking = get_object_or_404(PreBooking, pk=prebooking_id)

    form = PreBookingStatusForm(request.data)
    if not form.is_valid():
        raise ValidationError(first_form_error(form))

    prebooking.status = form.cleaned_data['status']
    prebooking.save(update_fields=['status'])
    return Response(build_prebooking_payload(prebooking))


@api_view(['DELETE'])
@permission_classes([IsCampusAdmin])
def prebooking_delete(request, prebooking_id):
    prebooking = get_object_or_404(PreBooking, pk=prebooking_id)
    prebooking.delete()
    logger.info("Pre-booking %s deleted", prebooking_id)
    return Response(status=status.HTTP_204_NO_CONTENT)
