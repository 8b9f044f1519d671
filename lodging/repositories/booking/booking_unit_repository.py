"""Repository for booking detail rows."""

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from lodging.models.base.enums import BookingStatus
from lodging.models.booking.booking import Booking
from lodging.models.booking.booking_unit import BookingUnit
from lodging.repositories.base.base_repository import BaseRepository


class BookingUnitRepository(BaseRepository[BookingUnit]):
    """Repository for per-unit detail rows."""

    def __init__(self, db: Session):
        super().__init__(BookingUnit, db)

    def find_units_overlapping(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[str]:
        """
        Units referenced by detail rows of holding bookings whose stay
        overlaps [check_in, check_out).
        """
        query = (
            select(BookingUnit.unit_number)
            .join(Booking, Booking.id == BookingUnit.booking_id)
            .where(
                BookingUnit.room_type_id == room_type_id,
                Booking.status.in_(list(BookingStatus.holding())),
                Booking.check_in < check_out,
                Booking.check_out > check_in,
            )
        )
        if exclude_booking_id:
            query = query.where(Booking.id != exclude_booking_id)

        return list(self.db.execute(query).scalars().all())

    def find_by_booking(self, booking_id: str) -> List[BookingUnit]:
        query = (
            select(BookingUnit)
            .where(BookingUnit.booking_id == booking_id)
            .order_by(BookingUnit.position.asc())
        )
        return list(self.db.execute(query).scalars().all())
