"""Unavailable-date repository."""

from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from lodging.models.room.unavailable_date import UnavailableDate
from lodging.repositories.base.base_repository import BaseRepository


class UnavailableDateRepository(BaseRepository[UnavailableDate]):
    """Repository for blocked nights."""

    def __init__(self, db: Session):
        super().__init__(UnavailableDate, db)

    def find_in_range(self, room_type_id: str, check_in: date, check_out: date) -> List[UnavailableDate]:
        """Blocks for nights in the half-open range [check_in, check_out)."""
        query = (
            select(UnavailableDate)
            .where(
                UnavailableDate.room_type_id == room_type_id,
                UnavailableDate.unavailable_date >= check_in,
                UnavailableDate.unavailable_date < check_out,
            )
            .order_by(UnavailableDate.unavailable_date.asc())
        )
        return list(self.db.execute(query).scalars().all())
