# lodging/repositories/booking/booking_repository.py
"""
Booking repository.

Provides lookups used by availability, conflict detection and the
maintenance sweeps. Only bookings in a unit-holding status are returned by
the overlap queries.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, selectinload

from lodging.models.base.enums import BookingStatus, PaymentStatus
from lodging.models.booking.booking import Booking, BookingStatusHistory
from lodging.models.booking.booking_unit import BookingUnit
from lodging.models.booking.payment_transaction import PaymentTransaction
from lodging.repositories.base.base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """
    Booking repository with:
    - Retrieval by id and booking code
    - Overlap queries for the legacy single-unit field
    - Per-unit neighbour lookup for same-day turnover checks
    - Sweep queries for expired payments and overdue check-outs
    """

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    # ==================== SEARCH & RETRIEVAL ====================

    def find_with_units(self, booking_id: str) -> Optional[Booking]:
        query = (
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.units), selectinload(Booking.claims))
        )
        return self.db.execute(query).scalar_one_or_none()

    def find_by_code(self, booking_code: str) -> Optional[Booking]:
        query = select(Booking).where(Booking.booking_code == booking_code)
        return self.db.execute(query).scalar_one_or_none()

    def get_status_history(self, booking_id: str) -> List[BookingStatusHistory]:
        query = (
            select(BookingStatusHistory)
            .where(BookingStatusHistory.booking_id == booking_id)
            .order_by(BookingStatusHistory.changed_at.asc(), BookingStatusHistory.created_at.asc())
        )
        return list(self.db.execute(query).scalars().all())

    # ==================== AVAILABILITY ====================

    def find_legacy_units_overlapping(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[str]:
        """
        Units named by the legacy single-unit field of holding bookings whose
        stay overlaps [check_in, check_out).
        """
        query = select(Booking.allocated_unit).where(
            Booking.room_type_id == room_type_id,
            Booking.allocated_unit.isnot(None),
            Booking.status.in_(list(BookingStatus.holding())),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        if exclude_booking_id:
            query = query.where(Booking.id != exclude_booking_id)

        return [unit for unit in self.db.execute(query).scalars().all() if unit]

    def find_holding_on_unit(
        self,
        room_type_id: str,
        unit_number: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Holding bookings on one unit whose stay overlaps or touches
        [check_in, check_out], so that same-day neighbours are included.
        """
        detail_holders = select(BookingUnit.booking_id).where(
            BookingUnit.room_type_id == room_type_id,
            BookingUnit.unit_number == unit_number,
        )
        query = (
            select(Booking)
            .where(
                Booking.status.in_(list(BookingStatus.holding())),
                Booking.check_in <= check_out,
                Booking.check_out >= check_in,
                or_(
                    and_(
                        Booking.room_type_id == room_type_id,
                        Booking.allocated_unit == unit_number,
                    ),
                    Booking.id.in_(detail_holders),
                ),
            )
            .order_by(Booking.check_in.asc(), Booking.id.asc())
        )
        if exclude_booking_id:
            query = query.where(Booking.id != exclude_booking_id)

        return list(self.db.execute(query).scalars().unique().all())

    # ==================== MAINTENANCE ====================

    def find_pending_with_expired_payment(self, now: datetime) -> List[Booking]:
        """Pending bookings whose pending payment transaction expired at or before ``now``."""
        expired = select(PaymentTransaction.booking_id).where(
            PaymentTransaction.status == PaymentStatus.PENDING,
            PaymentTransaction.expires_at <= now,
        )
        query = (
            select(Booking)
            .where(
                Booking.status == BookingStatus.PENDING,
                Booking.id.in_(expired),
            )
            .order_by(Booking.created_at.asc())
        )
        return list(self.db.execute(query).scalars().all())

    def find_due_for_checkout(self, today: date) -> List[Booking]:
        """Confirmed or checked-in bookings whose check-out date is today or earlier."""
        query = (
            select(Booking)
            .where(
                Booking.status.in_([BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN]),
                Booking.check_out <= today,
            )
            .order_by(Booking.check_out.asc(), Booking.id.asc())
        )
        return list(self.db.execute(query).scalars().all())
