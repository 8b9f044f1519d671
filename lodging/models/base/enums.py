"""
Database enums.

Provides SQLAlchemy-compatible enum definitions shared by the models,
schemas and services.
"""

import enum


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    REJECTED = "rejected"

    @classmethod
    def releasing(cls) -> frozenset:
        """Statuses whose bookings no longer hold their units."""
        return frozenset({cls.CANCELLED, cls.NO_SHOW, cls.REJECTED})

    @classmethod
    def holding(cls) -> frozenset:
        """Statuses whose bookings occupy units."""
        return frozenset(set(cls) - cls.releasing())


# Allowed moves of the booking state machine
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
        BookingStatus.REJECTED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CHECKED_IN,
        BookingStatus.CANCELLED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
    BookingStatus.REJECTED: frozenset(),
}


class PaymentStatus(str, enum.Enum):
    """Payment status carried on the booking."""
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    EXPIRED = "expired"


class PaymentResult(str, enum.Enum):
    """Outcome reported by the payment gateway callback."""
    PAID = "paid"
    FAILED = "failed"
    EXPIRED = "expired"


class BookingSource(str, enum.Enum):
    """Channel a booking was made through."""
    WEBSITE = "website"
    ADMIN = "admin"
    AI_ASSISTANT = "ai_assistant"
    ADMIN_CHATBOT = "admin_chatbot"
    WALK_IN = "walk_in"
    OTA = "ota"
