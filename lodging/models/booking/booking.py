"""
Booking models for managing room reservations.

This module defines the core booking entity with lifecycle management and
status tracking, plus the status history audit trail.
"""

from datetime import date as Date, datetime, time as Time
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Date as SQLDate,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time as SQLTime,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from lodging.config.settings import settings
from lodging.core.exceptions import InvalidStatusTransitionError
from lodging.models.base.base_model import TimestampModel, utcnow
from lodging.models.base.enums import BOOKING_TRANSITIONS, BookingSource, BookingStatus, PaymentStatus

if TYPE_CHECKING:
    from lodging.models.booking.booking_unit import BookingUnit, UnitNightClaim
    from lodging.models.booking.payment_transaction import PaymentTransaction
    from lodging.models.room.room_type import RoomType

__all__ = [
    "Booking",
    "BookingStatusHistory",
    "generate_booking_code",
]


def generate_booking_code(on: Optional[Date] = None) -> str:
    """Human-readable booking code: BK + YYYYMMDD + 4 random characters."""
    on = on or utcnow().date()
    return f"BK{on.strftime('%Y%m%d')}{uuid4().hex[:4].upper()}"


class Booking(TimestampModel):
    """
    Room reservation.

    Attributes:
        booking_code: Unique human-readable code (e.g. BK20250601A1B2)
        room_type_id: Primary room type of the booking
        allocated_unit: First allocated unit (legacy single-unit field)
        check_in / check_out: Stay dates; nights = check_out - check_in
        check_in_time / check_out_time: Time-of-day for same-day turnover
        num_guests: Guest count across all units
        status: Lifecycle status
        payment_status / payment_amount: Payment state and amount received
        total_price: Price of the whole stay for all units
        discount_amount: Savings against the day-of-week rate
        source: Booking channel
    """

    __tablename__ = "bookings"

    booking_code: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique human-readable booking code",
    )

    # Guest identity
    guest_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    guest_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    allocated_unit: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="First allocated unit, kept for single-unit readers",
    )

    check_in: Mapped[Date] = mapped_column(SQLDate, nullable=False, index=True)
    check_out: Mapped[Date] = mapped_column(SQLDate, nullable=False, index=True)
    check_in_time: Mapped[Time] = mapped_column(
        SQLTime, nullable=False, default=lambda: settings.DEFAULT_CHECK_IN_TIME
    )
    check_out_time: Mapped[Time] = mapped_column(
        SQLTime, nullable=False, default=lambda: settings.DEFAULT_CHECK_OUT_TIME
    )
    num_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.UNPAID,
    )
    payment_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))

    source: Mapped[BookingSource] = mapped_column(
        Enum(BookingSource),
        nullable=False,
        default=BookingSource.WEBSITE,
    )
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_in_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    room_type: Mapped["RoomType"] = relationship("RoomType", lazy="joined")
    units: Mapped[List["BookingUnit"]] = relationship(
        "BookingUnit",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingUnit.position",
    )
    claims: Mapped[List["UnitNightClaim"]] = relationship(
        "UnitNightClaim",
        back_populates="booking",
        cascade="all, delete-orphan",
    )
    status_history: Mapped[List["BookingStatusHistory"]] = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="[BookingStatusHistory.changed_at, BookingStatusHistory.created_at]",
    )
    payments: Mapped[List["PaymentTransaction"]] = relationship(
        "PaymentTransaction",
        back_populates="booking",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_booking_date_range"),
        CheckConstraint("num_guests >= 1", name="ck_booking_guests_positive"),
        CheckConstraint("total_price >= 0", name="ck_booking_total_positive"),
        Index("ix_booking_room_type_dates", "room_type_id", "check_in", "check_out"),
        {"comment": "Room reservations"},
    )

    @validates("total_price", "discount_amount", "payment_amount")
    def validate_amounts(self, key: str, value: Optional[Decimal]) -> Optional[Decimal]:
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative")
        return value

    # Properties
    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def unit_numbers(self) -> List[str]:
        return [u.unit_number for u in self.units]

    @property
    def unit_keys(self) -> List[Tuple[str, str]]:
        """(room_type_id, unit_number) pairs, falling back to the legacy unit field."""
        if self.units:
            return [row.key for row in self.units]
        if self.allocated_unit:
            return [(self.room_type_id, self.allocated_unit)]
        return []

    # Methods
    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in BOOKING_TRANSITIONS[self.status]

    def transition_to(
        self,
        target: BookingStatus,
        reason: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> "BookingStatusHistory":
        """
        Move the booking to ``target`` and record the change.

        Raises:
            InvalidStatusTransitionError: If the state machine forbids the move
        """
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionError(self.id, self.status.value, target.value)

        at = at or utcnow()
        previous = self.status
        self.status = target

        if target == BookingStatus.CONFIRMED:
            self.confirmed_at = at
        elif target == BookingStatus.CHECKED_IN:
            self.checked_in_at = at
        elif target == BookingStatus.CHECKED_OUT:
            self.checked_out_at = at
        elif target in BookingStatus.releasing():
            self.cancelled_at = at
            self.cancellation_reason = reason

        entry = BookingStatusHistory(
            from_status=previous,
            to_status=target,
            change_reason=reason,
            changed_at=at,
        )
        self.status_history.append(entry)
        return entry

    def reinstate(self, reason: Optional[str] = None, at: Optional[datetime] = None) -> "BookingStatusHistory":
        """
        Bring a cancelled booking back as confirmed.

        Only late payments use this; the regular state machine keeps
        cancellation terminal.
        """
        if self.status != BookingStatus.CANCELLED:
            raise InvalidStatusTransitionError(self.id, self.status.value, BookingStatus.CONFIRMED.value)

        at = at or utcnow()
        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = at
        self.cancelled_at = None
        self.cancellation_reason = None

        entry = BookingStatusHistory(
            from_status=BookingStatus.CANCELLED,
            to_status=BookingStatus.CONFIRMED,
            change_reason=reason,
            changed_at=at,
        )
        self.status_history.append(entry)
        return entry

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, code={self.booking_code}, "
            f"status={self.status}, {self.check_in}..{self.check_out})>"
        )


class BookingStatusHistory(TimestampModel):
    """
    Booking status change history for audit trail.

    Attributes:
        booking_id: Reference to the booking
        from_status: Previous status (NULL for the initial status)
        to_status: New status
        change_reason: Reason for status change
        changed_at: When status was changed
    """

    __tablename__ = "booking_status_history"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[Optional[BookingStatus]] = mapped_column(Enum(BookingStatus), nullable=True)
    to_status: Mapped[BookingStatus] = mapped_column(Enum(BookingStatus), nullable=False)
    change_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="status_history")

    __table_args__ = (
        Index("ix_status_history_booking_changed", "booking_id", "changed_at"),
        {"comment": "Booking status change audit trail"},
    )

    def __repr__(self) -> str:
        return (
            f"<BookingStatusHistory(booking_id={self.booking_id}, "
            f"{self.from_status} -> {self.to_status})>"
        )


# Event Listeners
@event.listens_for(Booking, "before_insert")
def fill_booking_code(mapper, connection, target):
    """Generate a booking code before insert when the caller did not set one."""
    if not target.booking_code:
        target.booking_code = generate_booking_code()
