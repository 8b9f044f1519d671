"""Unavailable-date block for a whole room type or a single unit."""

from datetime import date as Date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date as SQLDate, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodging.models.base.base_model import TimestampModel

if TYPE_CHECKING:
    from lodging.models.room.room_type import RoomType

__all__ = ["UnavailableDate"]


class UnavailableDate(TimestampModel):
    """
    Blocked night.

    A record without ``unit_number`` blocks every unit of the room type for
    that night.
    """

    __tablename__ = "unavailable_dates"

    room_type_id: Mapped[str] = mapped_column(
        ForeignKey("room_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    unavailable_date: Mapped[Date] = mapped_column(SQLDate, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    room_type: Mapped["RoomType"] = relationship("RoomType", back_populates="unavailable_dates")

    __table_args__ = (
        Index("ix_unavailable_room_type_date", "room_type_id", "unavailable_date"),
    )

    @property
    def blocks_whole_type(self) -> bool:
        return not self.unit_number

    def __repr__(self) -> str:
        target = self.unit_number or "*"
        return f"<UnavailableDate(room_type_id={self.room_type_id}, unit={target}, date={self.unavailable_date})>"
