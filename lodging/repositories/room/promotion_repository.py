"""Promotion repository."""

from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from lodging.models.room.promotion import Promotion
from lodging.repositories.base.base_repository import BaseRepository


class PromotionRepository(BaseRepository[Promotion]):
    """Repository for room type promotions."""

    def __init__(self, db: Session):
        super().__init__(Promotion, db)

    def find_active_covering(self, room_type_id: str, first_night: date, last_night: date) -> List[Promotion]:
        """
        Active promotions whose inclusive range intersects [first_night, last_night].

        Ordered by precedence: priority, then most recently created, then id,
        all descending. The first entry covering a night is the winner.
        """
        query = (
            select(Promotion)
            .where(
                Promotion.room_type_id == room_type_id,
                Promotion.is_active.is_(True),
                Promotion.start_date <= last_night,
                Promotion.end_date >= first_night,
            )
            .order_by(
                Promotion.priority.desc(),
                Promotion.created_at.desc(),
                Promotion.id.desc(),
            )
        )
        return list(self.db.execute(query).scalars().all())
