"""JSON payload builders shared by the booking and user API views."""


def _iso(value):
    return value.isoformat() if value is not None else None


def _person_name(user):
    if user is None:
        return None
    return user.get_full_name().strip() or user.username


def build_request_payload(open_request):
    """Summary of an open request as shown on the hero dashboard."""
    ride = open_request.ride
    return {
        'id': ride.id,
        'studentName': _person_name(ride.rider),
        'studentPhone': ride.rider.phone,
        'fromLocation': ride.pickup_location,
        'toLocation': ride.drop_location,
        'gender': ride.rider_gender,
        'driverPreference': ride.driver_preference,
        'fare': ride.fare,
        'isPreBooking': ride.is_pre_booking,
        'scheduledTime': _iso(ride.scheduled_time),
        'requestedAt': _iso(ride.created_at),
        'expiresAt': _iso(ride.request_expires_at()),
        'timeRemaining': open_request.time_remaining,
    }


def build_driver_summary(driver):
    if driver is None:
        return None
    return {
        'id': driver.id,
        'name': driver.name,
        'phone': driver.phone,
        'gender': driver.gender,
        'vehicleType': driver.vehicle_type,
        'vehicleNumber': driver.vehicle_number,
    }


def build_ride_payload(ride, include_otp=False):
    """Full ride view. The OTP is only ever shown to the rider who shares it."""
    payload = {
        'id': ride.id,
        'status': ride.status,
        'studentName': _person_name(ride.rider),
        'studentPhone': ride.rider.phone,
        'fromLocation': ride.pickup_location,
        'toLocation': ride.drop_location,
        'fare': ride.fare,
        'driverPreference': ride.driver_preference,
        'isPreBooking': ride.is_pre_booking,
        'scheduledTime': _iso(ride.scheduled_time),
        'paymentStatus': ride.payment_status,
        'requestedAt': _iso(ride.created_at),
        'acceptedAt': _iso(ride.accepted_at),
        'otpVerifiedAt': _iso(ride.otp_verified_at),
        'rideStartedAt': _iso(ride.actual_pickup_time),
        'rideEndedAt': _iso(ride.actual_drop_time),
        'cancellationReason': ride.cancellation_reason or None,
        'driver': build_driver_summary(ride.driver),
    }
    if include_otp:
        payload['otp'] = ride.otp or None
    return payload


def build_driver_payload(driver):
    """Hero row for the admin console's drivers table."""
    rating = driver.average_rating
    return {
        'id': driver.id,
        'name': driver.name,
        'phone': driver.phone,
        'email': driver.user.email if driver.user else None,
        'gender': driver.gender,
        'vehicleType': driver.vehicle_type,
        'vehicleNumber': driver.vehicle_number,
        'status': driver.approval_status,
        'isOnline': driver.is_online,
        'totalRides': driver.total_rides,
        'totalEarnings': driver.total_earnings,
        'joinedAt': _iso(driver.created_at),
        'lastRideAt': _iso(driver.last_ride_at),
        'averageRating': rating['average'],
        'ratingCount': rating['count'],
    }


def build_history_payload(ride):
    return {
        'id': ride.id,
        'driverName': ride.driver.name if ride.driver else None,
        'driverNthRide': getattr(ride, 'driver_nth_ride', None),
        'passengerName': _person_name(ride.rider),
        'from': ride.pickup_location,
        'to': ride.drop_location,
        'fare': ride.fare,
        'paymentStatus': ride.payment_status,
        'paymentSuccessTime': _iso(ride.otp_verified_at),
        'rideStartTime': _iso(ride.actual_pickup_time),
        'rideEndTime': _iso(ride.actual_drop_time),
        'isPreBooking': ride.is_pre_booking,
        'status': ride.status,
        'date': ride.created_at.date().isoformat(),
    }


def build_prebooking_payload(prebooking):
    return {
        'id': prebooking.id,
        'username': prebooking.username,
        'pickup': prebooking.pickup,
        'drop': prebooking.drop_location,
        'scheduledDate': prebooking.scheduled_date.isoformat(),
        'scheduledTime': prebooking.scheduled_time.strftime('%H:%M'),
        'scheduledDateTime': _iso(prebooking.scheduled_datetime),
        'createdAt': _iso(prebooking.created_at),
        'status': prebooking.status,
    }


def build_application_payload(application):
    return {
        'id': application.id,
        'name': application.name,
        'phone': application.phone,
        'gender': application.gender,
        'vehicleType': application.vehicle_type,
        'vehicleNumber': application.vehicle_number,
        'licenseUrl': application.license_url,
        'agreed': application.agreed,
        'status': application.status,
        'submittedAt': _iso(application.submitted_at),
        'reviewedAt': _iso(application.reviewed_at),
    }


def form_data(payload, aliases):
    """Copy request JSON into form field names, accepting camelCase aliases.

    `aliases` maps form field -> list of accepted request keys.
    """
    data = {}
    for field, keys in aliases.items():
        for key in keys:
            if key in payload:
                data[field] = payload[key]
                break
    return data


def first_form_error(form):
    """Flatten a bound form's errors into one readable message."""
    for field, errors in form.errors.items():
        if field == '__all__':
            return errors[0]
        return f"{field}: {errors[0]}"
    return 'Invalid request.'
