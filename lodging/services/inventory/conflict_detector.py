"""
Unit-level conflict detection with same-day turnover.

Two stays on the same unit may share a calendar date when one checks out and
the other checks in, provided the check-in time is not before the check-out
time. The coarse availability query treats any date overlap as taken; this
detector is what decides whether a specific unit can be committed.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Any, Dict, Optional

from lodging.config.settings import settings
from lodging.core.logging import get_logger
from lodging.models.booking.booking import Booking
from lodging.models.room.room_type import RoomType
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.utils.date_utils import ranges_overlap

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConflictCheck:
    conflict: bool
    reason: Optional[str] = None
    booking_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"conflict": self.conflict, "reason": self.reason, "booking_id": self.booking_id}


NO_CONFLICT = ConflictCheck(conflict=False)


def _fmt(value: time) -> str:
    return value.strftime("%H:%M")


def evaluate_conflict(
    existing: Booking,
    check_in: date,
    check_out: date,
    check_in_time: time,
    check_out_time: time,
) -> ConflictCheck:
    """
    Compare a proposed stay on a unit against one existing stay on it.

    Rules in order:
    1. Existing stay ends on the new check-in date and the new check-in time
       is before its check-out time.
    2. Existing stay starts on the new check-out date and the new check-out
       time is after its check-in time.
    3. The date ranges overlap.
    """
    existing_in_time = existing.check_in_time or settings.DEFAULT_CHECK_IN_TIME
    existing_out_time = existing.check_out_time or settings.DEFAULT_CHECK_OUT_TIME

    if existing.check_out == check_in and check_in_time < existing_out_time:
        return ConflictCheck(
            conflict=True,
            reason=(
                f"previous guest hasn't checked out yet "
                f"(check-out at {_fmt(existing_out_time)})"
            ),
            booking_id=existing.id,
        )

    if existing.check_in == check_out and check_out_time > existing_in_time:
        return ConflictCheck(
            conflict=True,
            reason=f"next guest already checked in (check-in at {_fmt(existing_in_time)})",
            booking_id=existing.id,
        )

    if ranges_overlap(existing.check_in, existing.check_out, check_in, check_out):
        return ConflictCheck(
            conflict=True,
            reason=f"already booked from {existing.check_in.isoformat()} to {existing.check_out.isoformat()}",
            booking_id=existing.id,
        )

    return NO_CONFLICT


class ConflictDetector:
    """Checks one unit for conflicts against every holding booking on it."""

    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def has_conflict(
        self,
        room_type: RoomType,
        unit_number: str,
        check_in: date,
        check_out: date,
        check_in_time: Optional[time] = None,
        check_out_time: Optional[time] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> ConflictCheck:
        check_in_time = check_in_time or settings.DEFAULT_CHECK_IN_TIME
        check_out_time = check_out_time or settings.DEFAULT_CHECK_OUT_TIME

        neighbours = self.bookings.find_holding_on_unit(
            room_type.id, unit_number, check_in, check_out, exclude_booking_id
        )
        for existing in neighbours:
            check = evaluate_conflict(existing, check_in, check_out, check_in_time, check_out_time)
            if check.conflict:
                logger.debug(
                    f"Unit {unit_number} conflicts with booking {existing.id}: {check.reason}",
                    extra={"room_type_id": room_type.id, "booking_id": existing.id},
                )
                return check

        return NO_CONFLICT
