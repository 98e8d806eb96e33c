"""Error taxonomy for the ride lifecycle.

Every error is a DRF ``APIException`` so views can simply let it propagate;
``campusHero.exceptions.api_exception_handler`` renders it as
``{"error": ..., "code": ...}`` with a stable status code.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class RideError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Ride operation failed.'
    default_code = 'ride_error'


class ValidationError(RideError):
    """Malformed or missing input. Never retried."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid ride details.'
    default_code = 'validation_error'


class NoDriversAvailableError(RideError):
    """Zero eligible drivers at booking time. A normal outcome, not a fault."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'No drivers available right now. Please try again later.'
    default_code = 'no_drivers_available'


class ConflictError(RideError):
    """A guarded transition found the ride (or driver) in an unexpected state."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Ride not found or already handled.'
    default_code = 'conflict'


class InvalidOtpError(RideError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The OTP does not match. Ask the rider for the code again.'
    default_code = 'invalid_otp'


class StoreUnavailableError(RideError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The ride store is unavailable. Please try again shortly.'
    default_code = 'store_unavailable'
