"""
Availability calculation.

Starting from a room type's full unit list, removes units blocked by
unavailable-date records (a record without a unit blocks the whole room type
for that night) and units held by overlapping bookings in a holding status,
through either the detail rows or the legacy single-unit field. Every call
recomputes from current data; nothing is cached.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set

from lodging.core.logging import get_logger
from lodging.models.room.room_type import RoomType
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository

logger = get_logger(__name__)


@dataclass
class AvailabilityResult:
    """Free units of one room type for a stay, in natural unit order."""

    room_type_id: str
    check_in: date
    check_out: date
    units: List[str] = field(default_factory=list)
    blocked_units: List[str] = field(default_factory=list)
    booked_units: List[str] = field(default_factory=list)
    fully_blocked: bool = False

    @property
    def count(self) -> int:
        return len(self.units)

    def __contains__(self, unit_number: str) -> bool:
        return unit_number in self.units


class AvailabilityCalculator:
    """Computes the set of free units for a room type and date range."""

    def __init__(
        self,
        unavailable_dates: UnavailableDateRepository,
        bookings: BookingRepository,
        booking_units: BookingUnitRepository,
    ):
        self.unavailable_dates = unavailable_dates
        self.bookings = bookings
        self.booking_units = booking_units

    def available_units(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """
        Free units for [check_in, check_out).

        Args:
            room_type: Room type whose unit list is the starting pool
            check_in: First night
            check_out: Departure date (not a night of the stay)
            exclude_booking_id: Booking ignored as a holder, used when editing it
        """
        all_units = room_type.units
        result = AvailabilityResult(room_type_id=room_type.id, check_in=check_in, check_out=check_out)

        blocked: Set[str] = set()
        for block in self.unavailable_dates.find_in_range(room_type.id, check_in, check_out):
            if block.blocks_whole_type:
                result.fully_blocked = True
                blocked.update(all_units)
                break
            blocked.add(block.unit_number)

        booked: Set[str] = set(
            self.booking_units.find_units_overlapping(room_type.id, check_in, check_out, exclude_booking_id)
        )
        booked.update(
            self.bookings.find_legacy_units_overlapping(room_type.id, check_in, check_out, exclude_booking_id)
        )

        result.blocked_units = [u for u in all_units if u in blocked]
        result.booked_units = [u for u in all_units if u in booked and u not in blocked]
        result.units = [u for u in all_units if u not in blocked and u not in booked]

        logger.debug(
            f"{result.count}/{len(all_units)} unit(s) of {room_type.name} free "
            f"for {check_in}..{check_out}",
            extra={"room_type_id": room_type.id, "operation": "available_units"},
        )
        return result
