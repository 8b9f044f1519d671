"""
Database models for the lodging reservation engine.

Importing this package registers every table on ``Base.metadata``.
"""

from lodging.models.base import Base, BookingSource, BookingStatus, PaymentResult, PaymentStatus
from lodging.models.booking import (
    Booking,
    BookingStatusHistory,
    BookingUnit,
    PaymentTransaction,
    UnitNightClaim,
)
from lodging.models.room import Promotion, RoomType, UnavailableDate

__all__ = [
    "Base",
    "Booking",
    "BookingSource",
    "BookingStatus",
    "BookingStatusHistory",
    "BookingUnit",
    "PaymentResult",
    "PaymentStatus",
    "PaymentTransaction",
    "Promotion",
    "RoomType",
    "UnavailableDate",
    "UnitNightClaim",
]
