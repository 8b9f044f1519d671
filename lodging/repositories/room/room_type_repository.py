"""
Room type repository.

Lookup of room types by id or by exact (case-insensitive) name. Free-text
fuzzy matching is left to callers; an unresolved or ambiguous reference is
rejected here rather than guessed.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lodging.core.exceptions import AmbiguousRoomTypeError, RoomTypeNotFoundError
from lodging.models.room.room_type import RoomType
from lodging.repositories.base.base_repository import BaseRepository


class RoomTypeRepository(BaseRepository[RoomType]):
    """Repository for room types and their rate tables."""

    def __init__(self, db: Session):
        super().__init__(RoomType, db)

    # ==================== SEARCH & RETRIEVAL ====================

    def find_by_name(self, name: str) -> List[RoomType]:
        """Room types whose trimmed name equals ``name`` ignoring case."""
        normalized = name.strip().lower()
        query = (
            select(RoomType)
            .where(func.lower(func.trim(RoomType.name)) == normalized)
            .order_by(RoomType.created_at.asc(), RoomType.id.asc())
        )
        return list(self.db.execute(query).scalars().all())

    def find_active(self) -> List[RoomType]:
        query = select(RoomType).where(RoomType.is_active.is_(True)).order_by(RoomType.name.asc())
        return list(self.db.execute(query).scalars().all())

    def resolve_reference(self, reference: Optional[str]) -> RoomType:
        """
        Resolve a room type id or exact name.

        Raises:
            RoomTypeNotFoundError: Nothing matches
            AmbiguousRoomTypeError: Several room types share the name
        """
        if reference is None or not str(reference).strip():
            raise RoomTypeNotFoundError(reference, message="A room type reference is required")

        reference = str(reference).strip()
        room_type = self.find_by_id(reference)
        if room_type is not None:
            return room_type

        matches = self.find_by_name(reference)
        if not matches:
            raise RoomTypeNotFoundError(reference)
        if len(matches) > 1:
            raise AmbiguousRoomTypeError(reference, [f"{m.name} ({m.id})" for m in matches])
        return matches[0]
