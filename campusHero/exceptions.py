import logging

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions
from rest_framework.views import exception_handler

from booking.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render every API error as ``{"error": message, "code": code}``.

    Database failures that escape a view are reported as
    ``StoreUnavailableError`` instead of a bare 500.
    """
    if isinstance(exc, DatabaseError):
        logger.error("Datastore error in %s: %s", context.get('view'), exc)
        exc = StoreUnavailableError()
    elif isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = getattr(exc, 'detail', None)
    if isinstance(detail, (list, dict)):
        # Field-level validation errors keep their structure under "details".
        response.data = {
            'error': 'Invalid request.',
            'code': 'validation_error',
            'details': response.data,
        }
    else:
        codes = exc.get_codes() if hasattr(exc, 'get_codes') else 'error'
        response.data = {
            'error': str(detail) if detail is not None else str(exc),
            'code': codes if isinstance(codes, str) else 'error',
        }
    return response
