"""
Base models package.

Provides the declarative base, abstract base models and enums for all
database models.
"""

from lodging.models.base.base_model import Base, BaseModel, TimestampModel, utcnow
from lodging.models.base.enums import (
    BOOKING_TRANSITIONS,
    BookingSource,
    BookingStatus,
    PaymentResult,
    PaymentStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "utcnow",
    "BOOKING_TRANSITIONS",
    "BookingSource",
    "BookingStatus",
    "PaymentResult",
    "PaymentStatus",
]
