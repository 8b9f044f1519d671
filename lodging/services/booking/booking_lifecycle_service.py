"""
Booking lifecycle service.

Status transitions along the booking state machine, plus the two periodic
sweeps: cancelling pending bookings whose payment expired and closing out
stays whose check-out time has passed. A move to a releasing status drops
the booking's unit-night claims in the same transaction, so the units are
bookable again as soon as it commits.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from lodging.core.clock import Clock, system_clock, today
from lodging.core.exceptions import BookingNotFoundError, InvalidDateRangeError, UnitUnavailableError
from lodging.core.logging import log_execution_time
from lodging.models.base.enums import BookingStatus, PaymentStatus
from lodging.models.booking.booking import Booking
from lodging.models.booking.booking_unit import UnitNightClaim
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository
from lodging.repositories.room.room_type_repository import RoomTypeRepository
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository
from lodging.schemas.booking.booking_response import BookingResponse
from lodging.services.base.base_service import BaseService
from lodging.services.base.service_result import ServiceResult
from lodging.services.booking.booking_notification_service import BookingNotificationService
from lodging.services.integrations.notifier import BookingNotifier
from lodging.services.inventory.availability_service import AvailabilityCalculator
from lodging.services.inventory.conflict_detector import ConflictDetector
from lodging.utils.date_utils import nights_of


class BookingLifecycleService(BaseService[Booking, BookingRepository]):
    """
    Booking status management:
    - confirm / check_in / check_out / cancel / mark_no_show / reject
    - expired-payment and automatic check-out sweeps
    """

    def __init__(self, db: Session, clock: Clock = system_clock, notifier: Optional[BookingNotifier] = None):
        super().__init__(BookingRepository(db), db, clock)
        self.room_types = RoomTypeRepository(db)
        self.notifications = BookingNotificationService(notifier, self.room_types)
        self.availability = AvailabilityCalculator(
            UnavailableDateRepository(db), self.repository, BookingUnitRepository(db)
        )
        self.conflicts = ConflictDetector(self.repository)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def apply_transition(
        self,
        booking: Booking,
        target: BookingStatus,
        reason: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> Booking:
        """
        Move ``booking`` to ``target`` inside the caller's transaction.

        Raises:
            InvalidStatusTransitionError: The state machine forbids the move
        """
        previous = booking.status
        booking.transition_to(target, reason, at or self.clock())

        released = 0
        if target in BookingStatus.releasing():
            released = len(booking.claims)
            booking.claims.clear()

        self._logger.info(
            f"Booking {booking.booking_code} {previous.value} -> {target.value}"
            + (f", released {released} unit-night claim(s)" if released else ""),
            extra={"booking_id": booking.id, "operation": "transition"},
        )
        return booking

    def reinstate(self, booking: Booking, reason: Optional[str] = None, at: Optional[datetime] = None) -> Booking:
        """
        Confirm a cancelled booking again on the units it held, inside the
        caller's transaction, and claim those units back.

        Raises:
            InvalidDateRangeError: The stay has already started
            UnitUnavailableError: A former unit was booked or blocked meanwhile
            InvalidStatusTransitionError: The booking is not cancelled
        """
        if booking.check_in < today(self.clock):
            raise InvalidDateRangeError("The stay has already started", booking.check_in, booking.check_out)

        keys = booking.unit_keys
        for room_type_id, unit in keys:
            room_type = self.room_types.get_by_id(room_type_id)
            free = self.availability.available_units(
                room_type, booking.check_in, booking.check_out, exclude_booking_id=booking.id
            )
            if unit not in free:
                raise UnitUnavailableError(
                    unit, "it was taken after the booking was cancelled", free.units, room_type.id
                )
            check = self.conflicts.has_conflict(
                room_type,
                unit,
                booking.check_in,
                booking.check_out,
                booking.check_in_time,
                booking.check_out_time,
                exclude_booking_id=booking.id,
            )
            if check.conflict:
                raise UnitUnavailableError(unit, check.reason, free.units, room_type.id, check.booking_id)

        booking.reinstate(reason, at or self.clock())
        for room_type_id, unit in keys:
            for night in nights_of(booking.check_in, booking.check_out):
                booking.claims.append(UnitNightClaim(room_type_id=room_type_id, unit_number=unit, night=night))

        self._logger.info(
            f"Booking {booking.booking_code} reinstated on {', '.join(u for _, u in keys)}",
            extra={"booking_id": booking.id, "units": [u for _, u in keys], "operation": "reinstate"},
        )
        return booking

    def change_status(
        self,
        booking_id: str,
        target: BookingStatus,
        reason: Optional[str] = None,
    ) -> ServiceResult[BookingResponse]:
        try:
            with self.transaction():
                booking = self.repository.find_with_units(booking_id)
                if booking is None:
                    raise BookingNotFoundError(booking_id)
                self.apply_transition(booking, target, reason)
        except Exception as e:
            return self._handle_exception(e, f"move booking to {target.value}", booking_id)

        if target == BookingStatus.CONFIRMED:
            self.notifications.booking_confirmed(booking)

        return ServiceResult.success(
            BookingResponse.model_validate(booking),
            message=f"Booking {target.value.replace('_', ' ')}",
        )

    def confirm(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.CONFIRMED, reason)

    def check_in(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.CHECKED_IN, reason)

    def check_out(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.CHECKED_OUT, reason)

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.CANCELLED, reason)

    def mark_no_show(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.NO_SHOW, reason)

    def reject(self, booking_id: str, reason: Optional[str] = None) -> ServiceResult[BookingResponse]:
        return self.change_status(booking_id, BookingStatus.REJECTED, reason)

    # -------------------------------------------------------------------------
    # Sweeps
    # -------------------------------------------------------------------------

    @log_execution_time("cancel_expired_bookings")
    def cancel_expired_bookings(self, now: Optional[datetime] = None) -> ServiceResult[List[str]]:
        """Cancel pending bookings whose pending payment expired at or before ``now``."""
        now = now or self.clock()
        processed: List[str] = []
        try:
            with self.transaction():
                # Expiry timestamps are stored in UTC
                for booking in self.repository.find_pending_with_expired_payment(now.astimezone(timezone.utc)):
                    for txn in booking.payments:
                        if txn.status == PaymentStatus.PENDING:
                            txn.status = PaymentStatus.EXPIRED
                    booking.payment_status = PaymentStatus.EXPIRED
                    self.apply_transition(booking, BookingStatus.CANCELLED, "Payment expired", now)
                    processed.append(booking.id)
        except Exception as e:
            return self._handle_exception(e, "cancel expired bookings")

        return ServiceResult.success(processed, message=f"Cancelled {len(processed)} expired booking(s)")

    @log_execution_time("auto_checkout")
    def auto_checkout(self, now: Optional[datetime] = None) -> ServiceResult[List[str]]:
        """
        Close stays past their check-out moment.

        Checked-in bookings become checked_out; confirmed bookings that never
        checked in become no_show.
        """
        now = now or self.clock()
        current_date, current_time = now.date(), now.time()
        processed: List[str] = []
        try:
            with self.transaction():
                for booking in self.repository.find_due_for_checkout(current_date):
                    if booking.check_out == current_date and current_time < booking.check_out_time:
                        continue
                    if booking.status == BookingStatus.CHECKED_IN:
                        self.apply_transition(booking, BookingStatus.CHECKED_OUT, "Automatic check-out", now)
                    else:
                        self.apply_transition(booking, BookingStatus.NO_SHOW, "Not checked in before check-out", now)
                    processed.append(booking.id)
        except Exception as e:
            return self._handle_exception(e, "run automatic check-out")

        return ServiceResult.success(processed, message=f"Closed {len(processed)} stay(s)")
