"""Simulated payment confirmation.

Riders "pay" in the UI and the hero's OTP entry is taken as proof of payment.
This module only records that confirmation, so a real gateway callback can
replace the OTP policy without touching the pairing check.
"""
import logging

from .models import PaymentStatus, Ride

logger = logging.getLogger(__name__)


def confirm_payment(ride_id):
    """Mark a ride paid. Returns False when it was already paid."""
    updated = Ride.objects.filter(
        pk=ride_id,
        payment_status=PaymentStatus.PENDING,
    ).update(payment_status=PaymentStatus.PAID)
    if updated:
        logger.info("Payment confirmed for ride %s", ride_id)
    return bool(updated)
