from lodging.schemas.booking.booking_request import (
    BookingCreate,
    BookingUpdate,
    PaymentCallback,
    RoomSelection,
    StatusChangeRequest,
)
from lodging.schemas.booking.booking_response import (
    BookingResponse,
    BookingUnitResponse,
    MaintenanceResponse,
    PaymentTransactionResponse,
    StatusHistoryResponse,
)

__all__ = [
    "BookingCreate",
    "BookingResponse",
    "BookingUnitResponse",
    "BookingUpdate",
    "MaintenanceResponse",
    "PaymentCallback",
    "PaymentTransactionResponse",
    "RoomSelection",
    "StatusChangeRequest",
    "StatusHistoryResponse",
]
