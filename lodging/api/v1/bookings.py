"""Booking endpoints: create, read, edit and status changes."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from lodging.api.deps import get_booking_service, get_lifecycle_service, get_payment_service, unwrap_result
from lodging.models.base.enums import BookingStatus
from lodging.schemas.booking.booking_request import BookingCreate, BookingUpdate, StatusChangeRequest
from lodging.schemas.booking.booking_response import BookingResponse, PaymentTransactionResponse
from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService
from lodging.services.booking.booking_payment_service import BookingPaymentService
from lodging.services.booking.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])

# URL action -> target status
STATUS_ACTIONS = {
    "confirm": BookingStatus.CONFIRMED,
    "check-in": BookingStatus.CHECKED_IN,
    "check-out": BookingStatus.CHECKED_OUT,
    "cancel": BookingStatus.CANCELLED,
    "no-show": BookingStatus.NO_SHOW,
    "reject": BookingStatus.REJECTED,
}


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(payload: BookingCreate, service: BookingService = Depends(get_booking_service)):
    return unwrap_result(service.create_booking(payload))


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    """Fetch a booking by id or booking code."""
    return unwrap_result(service.get_booking(booking_id))


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return unwrap_result(service.update_booking(booking_id, payload))


@router.post(
    "/{booking_id}/payments",
    response_model=PaymentTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_payment(booking_id: str, service: BookingPaymentService = Depends(get_payment_service)):
    return unwrap_result(service.start_payment(booking_id))


def _register_status_action(action: str, target: BookingStatus) -> None:
    def change_status(
        booking_id: str,
        payload: Optional[StatusChangeRequest] = Body(None),
        service: BookingLifecycleService = Depends(get_lifecycle_service),
    ):
        reason = payload.reason if payload else None
        return unwrap_result(service.change_status(booking_id, target, reason))

    change_status.__name__ = f"{action.replace('-', '_')}_booking"
    router.add_api_route(
        f"/{{booking_id}}/{action}",
        change_status,
        methods=["POST"],
        response_model=BookingResponse,
        name=change_status.__name__,
    )


for _action, _target in STATUS_ACTIONS.items():
    _register_status_action(_action, _target)
