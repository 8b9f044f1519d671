"""Promotion model: a priced offer for one room type over an inclusive date range."""

from datetime import date as Date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, Date as SQLDate, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodging.models.base.base_model import TimestampModel

if TYPE_CHECKING:
    from lodging.models.room.room_type import RoomType

__all__ = ["Promotion"]


class Promotion(TimestampModel):
    """
    Room type promotion.

    Either ``promo_price`` (fixed nightly price) or ``discount_percentage``
    is set; when both are, the fixed price wins. Higher ``priority`` wins
    among promotions covering the same night.
    """

    __tablename__ = "promotions"

    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)

    promo_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    discount_percentage: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)

    start_date: Mapped[Date] = mapped_column(SQLDate, nullable=False)
    end_date: Mapped[Date] = mapped_column(SQLDate, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_nights: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    room_type: Mapped["RoomType"] = relationship("RoomType", back_populates="promotions")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_promotion_date_range"),
        CheckConstraint(
            "discount_percentage IS NULL OR (discount_percentage > 0 AND discount_percentage <= 100)",
            name="ck_promotion_discount_range",
        ),
        Index("ix_promotion_room_type_dates", "room_type_id", "start_date", "end_date"),
    )

    def covers(self, night: Date) -> bool:
        return self.start_date <= night <= self.end_date

    def __repr__(self) -> str:
        return (
            f"<Promotion(id={self.id}, room_type_id={self.room_type_id}, "
            f"{self.start_date}..{self.end_date}, priority={self.priority})>"
        )
