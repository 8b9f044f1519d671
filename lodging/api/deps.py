"""
FastAPI dependencies.

Plain callables used with ``Depends``: database session, clock, external
collaborators and the service objects built on top of them. Tests override
``get_db``, ``get_clock``, ``get_notifier`` and ``get_payment_gateway``.

Example usage in a router:
    @router.get("/bookings/{booking_id}")
    def read_booking(service: BookingService = Depends(deps.get_booking_service)):
        ...
"""

from typing import TypeVar

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from lodging.core.clock import Clock, system_clock
from lodging.db.session import get_db
from lodging.services.base.service_result import ServiceResult
from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService
from lodging.services.booking.booking_payment_service import BookingPaymentService
from lodging.services.booking.booking_service import BookingService
from lodging.services.integrations.notifier import BookingNotifier, get_notifier
from lodging.services.integrations.payment_gateway import PaymentGateway, get_payment_gateway
from lodging.services.inventory.room_inventory_service import RoomInventoryService

T = TypeVar("T")


# --- Database & clock ----------------------------------------------------------

def get_clock() -> Clock:
    return system_clock


# --- Services ------------------------------------------------------------------

def get_inventory_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RoomInventoryService:
    return RoomInventoryService(db, clock)


def get_booking_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingService:
    return BookingService(db, clock, notifier)


def get_lifecycle_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingLifecycleService:
    return BookingLifecycleService(db, clock, notifier)


def get_payment_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingPaymentService:
    return BookingPaymentService(db, clock, gateway, notifier)


# --- Results -------------------------------------------------------------------

def unwrap_result(result: ServiceResult[T]) -> T:
    """Return the result data or raise an HTTPException carrying the error."""
    if result.is_success:
        return result.data
    error = result.error
    raise HTTPException(status_code=error.status_code, detail=error.to_dict())


__all__ = [
    "get_db",
    "get_clock",
    "get_notifier",
    "get_payment_gateway",
    "get_inventory_service",
    "get_booking_service",
    "get_lifecycle_service",
    "get_payment_service",
    "unwrap_result",
]
