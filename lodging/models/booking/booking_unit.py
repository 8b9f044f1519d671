"""
Per-unit rows owned by a booking.

``BookingUnit`` is the detail row for each physical unit a booking consumes.
``UnitNightClaim`` holds one row per (room type, unit, night) for every
booking that currently occupies the unit; its unique constraint makes
claiming a unit an atomic insert that fails on collision.
"""

from datetime import date as Date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date as SQLDate, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodging.models.base.base_model import BaseModel, TimestampModel

if TYPE_CHECKING:
    from lodging.models.booking.booking import Booking

__all__ = ["BookingUnit", "UnitNightClaim", "CLAIM_CONSTRAINT_NAME"]

CLAIM_CONSTRAINT_NAME = "uq_unit_night_claim"


class BookingUnit(TimestampModel):
    """Detail row: one physical unit held by a booking."""

    __tablename__ = "booking_units"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Allocation order within the booking",
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="units")

    __table_args__ = (
        UniqueConstraint("booking_id", "room_type_id", "unit_number", name="uq_booking_unit"),
        Index("ix_booking_unit_room_unit", "room_type_id", "unit_number"),
    )

    @property
    def key(self) -> tuple:
        return (self.room_type_id, self.unit_number)

    def __repr__(self) -> str:
        return f"<BookingUnit(booking_id={self.booking_id}, unit={self.unit_number})>"


class UnitNightClaim(BaseModel):
    """Exclusive hold of one unit for one night."""

    __tablename__ = "unit_night_claims"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="CASCADE"),
        nullable=False,
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    night: Mapped[Date] = mapped_column(SQLDate, nullable=False)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="claims")

    __table_args__ = (
        UniqueConstraint("room_type_id", "unit_number", "night", name=CLAIM_CONSTRAINT_NAME),
    )

    @property
    def key(self) -> tuple:
        return (self.room_type_id, self.unit_number, self.night)

    def __repr__(self) -> str:
        return f"<UnitNightClaim(unit={self.unit_number}, night={self.night}, booking_id={self.booking_id})>"
