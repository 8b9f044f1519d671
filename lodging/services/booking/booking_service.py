"""
Booking transaction service: create, update and read bookings.

Each attempt resolves the room types, checks capacity, allocates units,
prices the stay and writes the booking row, its per-unit detail rows and its
unit-night claims in one database transaction. A unique-constraint collision
on a claim means another request took the same unit first; the attempt is
rolled back and replayed from a fresh read.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lodging.config.settings import settings
from lodging.core.clock import Clock, system_clock, today
from lodging.core.exceptions import (
    BookingNotFoundError,
    ConcurrentAllocationConflictError,
    GuestCountExceedsCapacityError,
    InvalidDateRangeError,
    RoomTypeNotFoundError,
    ValidationError,
)
from lodging.core.logging import log_execution_time
from lodging.models.base.enums import BookingStatus, PaymentStatus
from lodging.models.booking.booking import Booking, BookingStatusHistory, generate_booking_code
from lodging.models.booking.booking_unit import CLAIM_CONSTRAINT_NAME, BookingUnit, UnitNightClaim
from lodging.models.room.room_type import RoomType
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository
from lodging.repositories.room.room_type_repository import RoomTypeRepository
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository
from lodging.schemas.booking.booking_request import BookingCreate, BookingUpdate, RoomSelection
from lodging.schemas.booking.booking_response import BookingResponse
from lodging.services.base.base_service import BaseService
from lodging.services.base.service_result import ServiceResult
from lodging.services.booking.booking_notification_service import BookingNotificationService
from lodging.services.integrations.notifier import BookingNotifier
from lodging.services.inventory.allocator import AllocationRequest, Allocator
from lodging.services.inventory.availability_service import AvailabilityCalculator
from lodging.services.inventory.conflict_detector import ConflictDetector
from lodging.services.pricing.pricing_calculator import StayQuote, build_pricing_calculator
from lodging.utils.date_utils import nights_of

T = TypeVar("T")

EDITABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})
GUEST_FIELDS = ("guest_name", "guest_email", "guest_phone", "special_requests")

# Unique violations that mean "someone else won the race"
RETRYABLE_CONSTRAINTS = ("unit_night_claims", CLAIM_CONSTRAINT_NAME, "booking_code")


def is_allocation_collision(error: IntegrityError) -> bool:
    message = str(error.orig if error.orig is not None else error).lower()
    return any(marker in message for marker in RETRYABLE_CONSTRAINTS)


@dataclass
class SelectionPlan:
    """Allocated units and price for one room selection."""

    room_type: RoomType
    units: List[str]
    quote: StayQuote


class BookingService(BaseService[Booking, BookingRepository]):
    """
    Booking transaction operations.

    Responsibilities:
    - Room type resolution and guest capacity checks
    - Unit allocation and stay pricing
    - Atomic write of booking, detail rows and unit-night claims
    - Retry on concurrent claim collisions
    - Best-effort notifications after commit
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        notifier: Optional[BookingNotifier] = None,
        max_retries: Optional[int] = None,
    ):
        super().__init__(BookingRepository(db), db, clock)
        self.room_types = RoomTypeRepository(db)
        self.booking_units = BookingUnitRepository(db)
        availability = AvailabilityCalculator(UnavailableDateRepository(db), self.repository, self.booking_units)
        self.allocator = Allocator(availability, ConflictDetector(self.repository))
        self.pricing = build_pricing_calculator(db, clock)
        self.notifications = BookingNotificationService(notifier, self.room_types)
        self.max_retries = settings.ALLOCATION_MAX_RETRIES if max_retries is None else max_retries

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    @log_execution_time("create_booking")
    def create_booking(self, request: BookingCreate) -> ServiceResult[BookingResponse]:
        """
        Create a booking for one or more room selections.

        Failures: InvalidDateRange, RoomTypeNotFound, GuestCountExceedsCapacity,
        UnitUnavailable, InsufficientInventory, ConcurrentAllocationConflict.
        """
        try:
            booking = self._with_retries(lambda: self._create_once(request))
        except Exception as e:
            return self._handle_exception(e, "create booking", request.guest_email)

        self._log_operation(
            "create_booking",
            booking.id,
            {"booking_id": booking.id, "units": booking.unit_numbers, "total_price": str(booking.total_price)},
        )
        self.notifications.booking_created(booking)
        return ServiceResult.success(BookingResponse.model_validate(booking), message="Booking created")

    @log_execution_time("update_booking")
    def update_booking(self, booking_id: str, request: BookingUpdate) -> ServiceResult[BookingResponse]:
        """
        Apply a partial update.

        Changing dates, times or rooms re-allocates (keeping current units
        where still free), re-prices and diffs the detail rows and claims.
        """
        try:
            booking, rescheduled = self._with_retries(lambda: self._update_once(booking_id, request))
        except Exception as e:
            return self._handle_exception(e, "update booking", booking_id)

        self._log_operation("update_booking", booking.id, {"booking_id": booking.id, "rescheduled": rescheduled})
        if rescheduled:
            self.notifications.booking_rescheduled(booking)
        return ServiceResult.success(BookingResponse.model_validate(booking), message="Booking updated")

    def get_booking(self, booking_ref: str) -> ServiceResult[BookingResponse]:
        """Look up a booking by id or booking code."""
        try:
            booking = self._load(booking_ref)
        except Exception as e:
            return self._handle_exception(e, "get booking", booking_ref)
        return ServiceResult.success(BookingResponse.model_validate(booking))

    # -------------------------------------------------------------------------
    # Attempts
    # -------------------------------------------------------------------------

    def _with_retries(self, attempt: Callable[[], T]) -> T:
        # Zero still makes the one attempt, with no retry after a collision
        attempts = max(self.max_retries, 1)
        for number in range(1, attempts + 1):
            try:
                return attempt()
            except IntegrityError as e:
                if not is_allocation_collision(e):
                    raise
                self._logger.warning(
                    f"Unit claim collision on attempt {number}/{attempts}",
                    extra={"operation": "allocate_retry"},
                )
        raise ConcurrentAllocationConflictError(attempts)

    def _create_once(self, request: BookingCreate) -> Booking:
        with self.transaction():
            check_in_time = request.check_in_time or settings.DEFAULT_CHECK_IN_TIME
            check_out_time = request.check_out_time or settings.DEFAULT_CHECK_OUT_TIME
            self._validate_dates(request.check_in, request.check_out)

            plans = self._plan(
                request.selections(),
                request.check_in,
                request.check_out,
                check_in_time,
                check_out_time,
                request.num_guests,
            )

            now = self.clock()
            booking = Booking(
                booking_code=generate_booking_code(now.date()),
                guest_name=request.guest_name,
                guest_email=str(request.guest_email),
                guest_phone=request.guest_phone,
                check_in=request.check_in,
                check_out=request.check_out,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                num_guests=request.num_guests,
                status=BookingStatus.PENDING,
                payment_status=PaymentStatus.UNPAID,
                source=request.source,
                special_requests=request.special_requests,
            )
            booking.status_history.append(
                BookingStatusHistory(
                    from_status=None,
                    to_status=BookingStatus.PENDING,
                    change_reason="Booking created",
                    changed_at=now,
                )
            )
            self._apply_plans(booking, plans)
            self.repository.add(booking)
            self.db.flush()
        return booking

    def _update_once(self, booking_id: str, request: BookingUpdate) -> Tuple[Booking, bool]:
        with self.transaction():
            booking = self._load(booking_id)
            if booking.status not in EDITABLE_STATUSES:
                raise ValidationError(
                    f"Booking in status '{booking.status.value}' cannot be modified",
                    {"status": [booking.status.value]},
                )

            provided = request.provided_fields()
            for field_name in GUEST_FIELDS:
                value = getattr(request, field_name)
                if field_name in provided and value is not None:
                    setattr(booking, field_name, str(value) if field_name == "guest_email" else value)

            num_guests = request.num_guests or booking.num_guests
            rescheduled = False

            if request.changes_stay:
                check_in = request.check_in or booking.check_in
                check_out = request.check_out or booking.check_out
                check_in_time = request.check_in_time or booking.check_in_time
                check_out_time = request.check_out_time or booking.check_out_time
                self._validate_dates(check_in, check_out, check_window=check_in != booking.check_in)

                before = (booking.check_in, booking.check_out, booking.check_in_time,
                          booking.check_out_time, sorted(booking.unit_keys))
                plans = self._plan(
                    request.selections() or self._current_selections(booking, request.quantity),
                    check_in,
                    check_out,
                    check_in_time,
                    check_out_time,
                    num_guests,
                    exclude_booking_id=booking.id,
                    current_units=self._current_units(booking),
                )
                booking.check_in, booking.check_out = check_in, check_out
                booking.check_in_time, booking.check_out_time = check_in_time, check_out_time
                self._apply_plans(booking, plans)

                after = (check_in, check_out, check_in_time, check_out_time,
                         sorted((p.room_type.id, u) for p in plans for u in p.units))
                rescheduled = before != after
            elif num_guests != booking.num_guests:
                capacity = self._capacity_of(booking)
                if num_guests > capacity:
                    raise GuestCountExceedsCapacityError(num_guests, capacity, booking.room_type_id)

            booking.num_guests = num_guests
            self.db.flush()
        return booking, rescheduled

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def _validate_dates(self, check_in: date, check_out: date, check_window: bool = True) -> None:
        if check_out <= check_in:
            raise InvalidDateRangeError(check_in=check_in, check_out=check_out)
        if not check_window:
            return

        current = today(self.clock)
        if check_in < current:
            raise InvalidDateRangeError("Check-in date cannot be in the past", check_in, check_out)
        if check_in > current + timedelta(days=settings.BOOKING_ADVANCE_DAYS):
            raise InvalidDateRangeError(
                f"Check-in date cannot be more than {settings.BOOKING_ADVANCE_DAYS} days ahead",
                check_in,
                check_out,
            )

    def _plan(
        self,
        selections: Sequence[RoomSelection],
        check_in: date,
        check_out: date,
        check_in_time: time,
        check_out_time: time,
        num_guests: int,
        exclude_booking_id: Optional[str] = None,
        current_units: Optional[Dict[str, List[str]]] = None,
    ) -> List[SelectionPlan]:
        resolved: List[Tuple[RoomType, RoomSelection]] = []
        for selection in selections:
            room_type = self.room_types.resolve_reference(selection.room_type)
            if not room_type.is_active:
                raise RoomTypeNotFoundError(
                    selection.room_type, message=f"Room type '{room_type.name}' is not bookable"
                )
            if any(seen.id == room_type.id for seen, _ in resolved):
                raise ValidationError(
                    f"Room type '{room_type.name}' is selected more than once",
                    {"rooms": ["each room type may appear only once; use quantity instead"]},
                )
            resolved.append((room_type, selection))

        capacity = sum(room_type.max_guests * selection.quantity for room_type, selection in resolved)
        if num_guests > capacity:
            raise GuestCountExceedsCapacityError(num_guests, capacity, resolved[0][0].id)

        plans = []
        for room_type, selection in resolved:
            units = self.allocator.allocate(
                AllocationRequest(
                    room_type=room_type,
                    check_in=check_in,
                    check_out=check_out,
                    quantity=selection.quantity,
                    requested_unit=selection.requested_unit,
                    check_in_time=check_in_time,
                    check_out_time=check_out_time,
                    exclude_booking_id=exclude_booking_id,
                    preferred_units=(current_units or {}).get(room_type.id, ()),
                )
            )
            quote = self.pricing.price_stay(room_type, check_in, check_out, selection.quantity)
            plans.append(SelectionPlan(room_type=room_type, units=units, quote=quote))
        return plans

    def _apply_plans(self, booking: Booking, plans: Sequence[SelectionPlan]) -> None:
        """Set totals and the legacy unit field, then diff detail rows and claims."""
        primary = plans[0]
        booking.room_type_id = primary.room_type.id
        booking.allocated_unit = primary.units[0]
        booking.total_price = sum((p.quote.total for p in plans), Decimal("0"))
        booking.discount_amount = sum((p.quote.savings for p in plans), Decimal("0"))

        wanted: "OrderedDict[Tuple[str, str], Decimal]" = OrderedDict()
        for plan in plans:
            for unit in plan.units:
                wanted[(plan.room_type.id, unit)] = plan.quote.price_per_night

        self._sync_units(booking, wanted)
        self._sync_claims(booking, list(wanted), nights_of(booking.check_in, booking.check_out))

    @staticmethod
    def _sync_units(booking: Booking, wanted: "OrderedDict[Tuple[str, str], Decimal]") -> None:
        existing = {row.key: row for row in booking.units}
        for key, row in existing.items():
            if key not in wanted:
                booking.units.remove(row)

        for position, (key, price) in enumerate(wanted.items()):
            row = existing.get(key)
            if row is None:
                booking.units.append(
                    BookingUnit(
                        room_type_id=key[0],
                        unit_number=key[1],
                        price_per_night=price,
                        position=position,
                    )
                )
            else:
                row.price_per_night = price
                row.position = position

    @staticmethod
    def _sync_claims(booking: Booking, unit_keys: Sequence[Tuple[str, str]], nights: Sequence[date]) -> None:
        wanted = {(room_type_id, unit, night) for room_type_id, unit in unit_keys for night in nights}
        existing = {claim.key: claim for claim in booking.claims}

        for key, claim in existing.items():
            if key not in wanted:
                booking.claims.remove(claim)

        for room_type_id, unit, night in sorted(wanted - set(existing)):
            booking.claims.append(UnitNightClaim(room_type_id=room_type_id, unit_number=unit, night=night))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, booking_ref: str) -> Booking:
        booking = self.repository.find_with_units(booking_ref) or self.repository.find_by_code(booking_ref)
        if booking is None:
            raise BookingNotFoundError(booking_ref)
        return booking

    def _current_units(self, booking: Booking) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = OrderedDict()
        for room_type_id, unit in booking.unit_keys:
            grouped.setdefault(room_type_id, []).append(unit)
        return grouped

    def _current_selections(self, booking: Booking, quantity: Optional[int] = None) -> List[RoomSelection]:
        """Selections for the units held now; a bare ``quantity`` resizes a single room type."""
        grouped = self._current_units(booking) or {booking.room_type_id: []}
        if quantity is not None and len(grouped) > 1:
            raise ValidationError(
                "Name the room type whose quantity should change",
                {"quantity": ["room_type is required when the booking holds several room types"]},
            )
        return [
            RoomSelection(room_type=room_type_id, quantity=quantity or max(len(units), 1))
            for room_type_id, units in grouped.items()
        ]

    def _capacity_of(self, booking: Booking) -> int:
        capacity = 0
        for room_type_id, units in (self._current_units(booking) or {booking.room_type_id: [None]}).items():
            room_type = self.room_types.get_by_id(room_type_id)
            capacity += room_type.max_guests * len(units)
        return capacity
