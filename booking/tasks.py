import logging

from celery import shared_task

from .lifecycle import expire_stale_rides

logger = logging.getLogger(__name__)


@shared_task
def expire_stale_rides_task():
    """Periodic sweep: cancel expired requests and release abandoned acceptances."""
    result = expire_stale_rides()
    logger.debug("Expiry sweep result: %s", result)
    return result
