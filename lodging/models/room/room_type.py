"""
Room type model.

A room type is a bookable category (e.g. "Deluxe") owning an ordered list of
physical unit identifiers, a base nightly rate with optional day-of-week
overrides, and an optional legacy single promotion.
"""

from datetime import date as Date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Date as SQLDate, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from lodging.models.base.base_model import TimestampModel

if TYPE_CHECKING:
    from lodging.models.room.promotion import Promotion
    from lodging.models.room.unavailable_date import UnavailableDate

__all__ = ["RoomType", "WEEKDAY_PRICE_COLUMNS"]

# Indexed by date.weekday(): Monday == 0
WEEKDAY_PRICE_COLUMNS = (
    "monday_price",
    "tuesday_price",
    "wednesday_price",
    "thursday_price",
    "friday_price",
    "saturday_price",
    "sunday_price",
)


class RoomType(TimestampModel):
    """
    Bookable room category.

    Attributes:
        name: Display name, unique case-insensitively by convention
        unit_numbers: Ordered physical unit identifiers (natural order)
        allotment: Total unit count
        base_price: Nightly price when no day-of-week override applies
        monday_price .. sunday_price: Optional day-of-week overrides
        promo_price: Legacy single promotion fixed price
        promo_start_date / promo_end_date: Legacy promotion range (inclusive)
        max_guests: Maximum guests per unit
    """

    __tablename__ = "room_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    unit_numbers: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered physical unit identifiers",
    )
    allotment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    monday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    tuesday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    wednesday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    thursday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    friday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    saturday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    sunday_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    # Legacy single promotion
    promo_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    promo_start_date: Mapped[Optional[Date]] = mapped_column(SQLDate, nullable=True)
    promo_end_date: Mapped[Optional[Date]] = mapped_column(SQLDate, nullable=True)

    max_guests: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    promotions: Mapped[List["Promotion"]] = relationship(
        "Promotion",
        back_populates="room_type",
        cascade="all, delete-orphan",
        lazy="select",
    )
    unavailable_dates: Mapped[List["UnavailableDate"]] = relationship(
        "UnavailableDate",
        back_populates="room_type",
        cascade="all, delete-orphan",
        lazy="select",
    )

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="ck_room_type_base_price_positive"),
        CheckConstraint("max_guests >= 1", name="ck_room_type_max_guests_positive"),
        {"comment": "Bookable room categories and their rate tables"},
    )

    @validates("unit_numbers")
    def validate_unit_numbers(self, key: str, value: Optional[List[str]]) -> List[str]:
        units = [str(u).strip() for u in (value or [])]
        if len(set(units)) != len(units):
            raise ValueError("Unit identifiers must be unique within a room type")
        return units

    @property
    def units(self) -> List[str]:
        return list(self.unit_numbers or [])

    def price_override_for(self, night: Date) -> Optional[Decimal]:
        return getattr(self, WEEKDAY_PRICE_COLUMNS[night.weekday()])

    def __repr__(self) -> str:
        return f"<RoomType(id={self.id}, name={self.name}, units={len(self.units)})>"
