"""Booking models."""

from lodging.models.booking.booking import Booking, BookingStatusHistory, generate_booking_code
from lodging.models.booking.booking_unit import CLAIM_CONSTRAINT_NAME, BookingUnit, UnitNightClaim
from lodging.models.booking.payment_transaction import PaymentTransaction

__all__ = [
    "Booking",
    "BookingStatusHistory",
    "BookingUnit",
    "CLAIM_CONSTRAINT_NAME",
    "PaymentTransaction",
    "UnitNightClaim",
    "generate_booking_code",
]
