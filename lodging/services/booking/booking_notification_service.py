"""
Booking notification service.

Builds the flat payload handed to the notification collaborator and delivers
it best-effort: any provider failure is logged and swallowed so it never
affects an already committed booking.
"""

from typing import Any, Dict, List, Optional

from lodging.config.settings import settings
from lodging.core.logging import get_logger
from lodging.models.booking.booking import Booking
from lodging.repositories.room.room_type_repository import RoomTypeRepository
from lodging.services.integrations.notifier import BookingNotifier, LoggingNotifier

logger = get_logger(__name__)

BOOKING_CREATED = "booking_created"
BOOKING_RESCHEDULED = "booking_rescheduled"
BOOKING_CONFIRMED = "booking_confirmed"


class BookingNotificationService:
    """Sends booking events to the configured notifier."""

    def __init__(self, notifier: Optional[BookingNotifier] = None, room_types: Optional[RoomTypeRepository] = None):
        self.notifier = notifier or LoggingNotifier()
        self.room_types = room_types

    def booking_created(self, booking: Booking) -> bool:
        return self.send(BOOKING_CREATED, booking)

    def booking_rescheduled(self, booking: Booking) -> bool:
        return self.send(BOOKING_RESCHEDULED, booking)

    def booking_confirmed(self, booking: Booking) -> bool:
        return self.send(BOOKING_CONFIRMED, booking)

    def send(self, event: str, booking: Booking) -> bool:
        """Deliver ``event``; returns False when delivery failed."""
        try:
            self.notifier.notify(event, self.build_payload(event, booking))
            return True
        except Exception as e:
            logger.warning(
                f"Notification {event} failed for booking {booking.id}: {e}",
                exc_info=True,
                extra={"booking_id": booking.id, "operation": "notify"},
            )
            return False

    def build_payload(self, event: str, booking: Booking) -> Dict[str, Any]:
        units = [
            {"room_type": self._room_type_name(u.room_type_id), "unit_number": u.unit_number}
            for u in booking.units
        ]
        if not units and booking.allocated_unit:
            units = [{"room_type": self._room_type_name(booking.room_type_id), "unit_number": booking.allocated_unit}]

        room_types: List[str] = []
        for unit in units:
            if unit["room_type"] not in room_types:
                room_types.append(unit["room_type"])

        return {
            "event": event,
            "booking_id": booking.id,
            "booking_code": booking.booking_code,
            "guest_name": booking.guest_name,
            "guest_email": booking.guest_email,
            "guest_phone": booking.guest_phone,
            "room_types": room_types,
            "units": units,
            "check_in": booking.check_in.isoformat(),
            "check_out": booking.check_out.isoformat(),
            "check_in_time": booking.check_in_time.strftime("%H:%M"),
            "check_out_time": booking.check_out_time.strftime("%H:%M"),
            "nights": booking.nights,
            "num_guests": booking.num_guests,
            "total_price": str(booking.total_price),
            "discount_amount": str(booking.discount_amount or 0),
            "currency": settings.CURRENCY,
            "promo_summary": self._promo_summary(booking),
            "status": booking.status.value,
        }

    def _room_type_name(self, room_type_id: str) -> str:
        if self.room_types is not None:
            room_type = self.room_types.find_by_id(room_type_id)
            if room_type is not None:
                return room_type.name
        return room_type_id

    @staticmethod
    def _promo_summary(booking: Booking) -> Optional[str]:
        if not booking.discount_amount:
            return None
        original = booking.total_price + booking.discount_amount
        return f"Saved {booking.discount_amount} {settings.CURRENCY} (was {original})"
