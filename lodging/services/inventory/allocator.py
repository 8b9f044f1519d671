"""
Unit allocation.

Honors a requested unit after validating it, or picks the first free units
in the room type's natural order. Candidates must also pass the conflict
detector's time rule, so a unit whose same-day neighbour is still occupied
is skipped. Allocation reads only; exclusivity is enforced when the
booking's unit-night claims are written.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import List, Optional, Sequence

from lodging.core.exceptions import InsufficientInventoryError, UnitUnavailableError, ValidationError
from lodging.core.logging import get_logger
from lodging.models.room.room_type import RoomType
from lodging.services.inventory.availability_service import AvailabilityCalculator, AvailabilityResult
from lodging.services.inventory.conflict_detector import ConflictDetector

logger = get_logger(__name__)


@dataclass
class AllocationRequest:
    room_type: RoomType
    check_in: date
    check_out: date
    quantity: int = 1
    requested_unit: Optional[str] = None
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    exclude_booking_id: Optional[str] = None
    preferred_units: Sequence[str] = ()


class Allocator:
    """Chooses unit identifiers for a reservation."""

    def __init__(self, availability: AvailabilityCalculator, conflicts: ConflictDetector):
        self.availability = availability
        self.conflicts = conflicts

    def allocate(self, request: AllocationRequest) -> List[str]:
        """
        Allocate ``request.quantity`` units.

        The requested unit, when given, comes first; remaining units are
        taken from ``preferred_units`` still free, then in natural order.

        Raises:
            UnitUnavailableError: The requested unit does not exist or is taken
            InsufficientInventoryError: Fewer free units than requested
        """
        if request.quantity < 1:
            raise ValidationError("Quantity must be at least 1", {"quantity": ["must be >= 1"]})

        room_type = request.room_type
        free = self.availability.available_units(
            room_type, request.check_in, request.check_out, request.exclude_booking_id
        )

        chosen: List[str] = []
        if request.requested_unit:
            chosen.append(self._validate_requested(request, free))

        if len(chosen) < request.quantity:
            usable = self._usable_units(request, free, exclude=chosen)
            needed = request.quantity - len(chosen)
            if len(usable) < needed:
                available = len(usable) + len(chosen)
                raise InsufficientInventoryError(
                    requested=request.quantity,
                    available=available,
                    room_type_id=room_type.id,
                    room_type_name=room_type.name,
                    alternatives=chosen + usable,
                )
            chosen.extend(usable[:needed])

        logger.info(
            f"Allocated {chosen} of {room_type.name} for {request.check_in}..{request.check_out}",
            extra={"room_type_id": room_type.id, "operation": "allocate"},
        )
        return chosen

    def _validate_requested(self, request: AllocationRequest, free: AvailabilityResult) -> str:
        unit = request.requested_unit.strip()
        room_type = request.room_type

        if unit not in room_type.units:
            raise UnitUnavailableError(
                unit,
                f"unit does not exist in room type {room_type.name}",
                alternatives=self._usable_units(request, free),
                room_type_id=room_type.id,
            )

        if unit not in free:
            reason = (
                "unit is blocked for these dates"
                if unit in free.blocked_units
                else "unit is already booked for these dates"
            )
            raise UnitUnavailableError(
                unit,
                reason,
                alternatives=self._usable_units(request, free),
                room_type_id=room_type.id,
            )

        check = self._check(request, unit)
        if check.conflict:
            raise UnitUnavailableError(
                unit,
                check.reason,
                alternatives=self._usable_units(request, free, exclude=[unit]),
                room_type_id=room_type.id,
                conflicting_booking_id=check.booking_id,
            )
        return unit

    def _usable_units(
        self,
        request: AllocationRequest,
        free: AvailabilityResult,
        exclude: Sequence[str] = (),
    ) -> List[str]:
        """Free units passing the time rule: preferred ones first, then natural order."""
        preferred = [u for u in request.preferred_units if u in free and u not in exclude]
        rest = [u for u in free.units if u not in preferred and u not in exclude]

        return [u for u in preferred + rest if not self._check(request, u).conflict]

    def _check(self, request: AllocationRequest, unit: str):
        return self.conflicts.has_conflict(
            request.room_type,
            unit,
            request.check_in,
            request.check_out,
            request.check_in_time,
            request.check_out_time,
            request.exclude_booking_id,
        )
