"""Which heroes can take a ride right now.

Availability is global: a hero is eligible when approved, online and, if the
rider asked for one, of the preferred gender. There is no location matching
and no fallback from a specific preference to "Any".
"""
import logging
from dataclasses import dataclass, field

from django.db import DatabaseError

from user.models import ApprovalStatus, Driver
from .exceptions import StoreUnavailableError, ValidationError
from .models import DriverPreference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    preference: str
    drivers: list = field(default_factory=list)

    @property
    def count(self):
        return len(self.drivers)

    @property
    def driver_ids(self):
        return [driver.id for driver in self.drivers]


def parse_preference(value):
    """Map raw input onto the closed DriverPreference enum. Blank means Any."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return DriverPreference.ANY
    raw = str(value).strip()
    normalised = 'Any' if raw.lower() == 'any' else raw.upper()
    try:
        return DriverPreference(normalised)
    except ValueError:
        raise ValidationError(f"Unknown driver preference '{value}'. Use M, F or Any.")


def driver_satisfies(driver, preference):
    preference = parse_preference(preference)
    return preference == DriverPreference.ANY or driver.gender == preference


def eligible_drivers(preference=None):
    preference = parse_preference(preference)
    drivers = Driver.objects.filter(is_online=True, approval_status=ApprovalStatus.APPROVED)
    if preference != DriverPreference.ANY:
        drivers = drivers.filter(gender=preference)
    return drivers.order_by('id')


def find_eligible_drivers(preference=None):
    """Evaluate the eligible set. An empty result is valid; a store failure is not."""
    preference = parse_preference(preference)
    try:
        drivers = list(eligible_drivers(preference))
    except DatabaseError as exc:
        logger.error("Matching query failed for preference %s: %s", preference, exc)
        raise StoreUnavailableError() from exc

    logger.debug("Matching preference=%s found %d hero(es)", preference, len(drivers))
    return MatchResult(preference=preference, drivers=drivers)
