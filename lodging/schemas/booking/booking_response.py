"""Booking response schemas."""

from __future__ import annotations

from datetime import date as Date, datetime, time as Time
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from lodging.models.base.enums import BookingSource, BookingStatus, PaymentStatus
from lodging.schemas.common.base import BaseResponseSchema, BaseSchema

__all__ = [
    "BookingUnitResponse",
    "BookingResponse",
    "StatusHistoryResponse",
    "PaymentTransactionResponse",
    "MaintenanceResponse",
]


class BookingUnitResponse(BaseSchema):
    room_type_id: str
    unit_number: str
    price_per_night: Decimal


class StatusHistoryResponse(BaseSchema):
    from_status: Optional[BookingStatus] = None
    to_status: BookingStatus
    change_reason: Optional[str] = None
    changed_at: datetime


class BookingResponse(BaseResponseSchema):
    booking_code: str
    guest_name: str
    guest_email: str
    guest_phone: Optional[str] = None

    room_type_id: str
    allocated_unit: Optional[str] = None
    check_in: Date
    check_out: Date
    check_in_time: Time
    check_out_time: Time
    nights: int
    num_guests: int

    status: BookingStatus
    payment_status: PaymentStatus
    payment_amount: Optional[Decimal] = None
    total_price: Decimal
    discount_amount: Decimal

    source: BookingSource
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None

    units: List[BookingUnitResponse] = Field(default_factory=list)
    status_history: List[StatusHistoryResponse] = Field(default_factory=list)


class PaymentTransactionResponse(BaseResponseSchema):
    booking_id: str
    merchant_order_id: str
    amount: Decimal
    status: PaymentStatus
    expires_at: datetime
    paid_at: Optional[datetime] = None
    gateway_reference: Optional[str] = None
    payment_url: Optional[str] = None


class MaintenanceResponse(BaseSchema):
    processed: int
    booking_ids: List[str] = Field(default_factory=list)
