from datetime import datetime, timedelta, timezone

STANDARD_FARE = 30
PRE_BOOKING_FARE = 25
PRE_BOOKING_LEAD_HOURS = 1


def is_pre_booking_discounted(is_pre_booking, scheduled_time, now=None, lead_hours=PRE_BOOKING_LEAD_HOURS):
    """True when a pre-booking is scheduled at least `lead_hours` ahead of `now`."""
    if not is_pre_booking or scheduled_time is None:
        return False
    now = now or datetime.now(timezone.utc)
    return scheduled_time - now >= timedelta(hours=lead_hours)


def calculate_fare(is_pre_booking=False, scheduled_time=None, now=None,
                   standard_fare=STANDARD_FARE, pre_booking_fare=PRE_BOOKING_FARE,
                   lead_hours=PRE_BOOKING_LEAD_HOURS):
    # Flat campus fare; only the pre-booking discount changes it.
    if is_pre_booking_discounted(is_pre_booking, scheduled_time, now=now, lead_hours=lead_hours):
        return pre_booking_fare
    return standard_fare
