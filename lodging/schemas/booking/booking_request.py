"""
Booking request schemas.

A booking names one or more room selections. The single-selection shorthand
(``room_type`` / ``quantity`` / ``requested_unit``) and the ``rooms`` list
are mutually exclusive.
"""

from __future__ import annotations

from datetime import date as Date, time as Time
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field, model_validator

from lodging.models.base.enums import BookingSource, PaymentResult
from lodging.schemas.common.base import BaseCreateSchema, BaseSchema, BaseUpdateSchema

__all__ = [
    "RoomSelection",
    "BookingCreate",
    "BookingUpdate",
    "StatusChangeRequest",
    "PaymentCallback",
]


class RoomSelection(BaseSchema):
    """Units requested from one room type."""

    room_type: str = Field(..., min_length=1, description="Room type id or exact name")
    quantity: int = Field(1, ge=1)
    requested_unit: Optional[str] = Field(None, description="Specific unit to assign first")


class RoomSelectionMixin(BaseSchema):
    room_type: Optional[str] = Field(None, description="Room type id or exact name")
    quantity: Optional[int] = Field(None, ge=1)
    requested_unit: Optional[str] = None
    rooms: Optional[List[RoomSelection]] = Field(None, min_length=1)

    def selections(self) -> Optional[List[RoomSelection]]:
        """Normalized selection list, or None when no room change was requested."""
        if self.rooms:
            return list(self.rooms)
        if self.room_type:
            return [
                RoomSelection(
                    room_type=self.room_type,
                    quantity=self.quantity or 1,
                    requested_unit=self.requested_unit,
                )
            ]
        return None

    def _check_selection_form(self) -> None:
        if self.rooms and (self.room_type or self.quantity is not None or self.requested_unit):
            raise ValueError("Use either rooms or room_type/quantity/requested_unit, not both")
        if self.requested_unit and not self.room_type:
            raise ValueError("requested_unit requires room_type")


class BookingCreate(RoomSelectionMixin, BaseCreateSchema):
    """Create a booking for one or more room types."""

    guest_name: str = Field(..., min_length=1, max_length=200)
    guest_email: EmailStr
    guest_phone: Optional[str] = Field(None, max_length=30)

    check_in: Date
    check_out: Date
    check_in_time: Optional[Time] = None
    check_out_time: Optional[Time] = None
    num_guests: int = Field(1, ge=1)

    source: BookingSource = BookingSource.WEBSITE
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def validate_rooms(self) -> "BookingCreate":
        self._check_selection_form()
        if not self.rooms and not self.room_type:
            raise ValueError("A room_type or a rooms list is required")
        return self


class BookingUpdate(RoomSelectionMixin, BaseUpdateSchema):
    """Partial update; omitted fields keep their current value."""

    guest_name: Optional[str] = Field(None, min_length=1, max_length=200)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = Field(None, max_length=30)

    check_in: Optional[Date] = None
    check_out: Optional[Date] = None
    check_in_time: Optional[Time] = None
    check_out_time: Optional[Time] = None
    num_guests: Optional[int] = Field(None, ge=1)
    special_requests: Optional[str] = None

    @model_validator(mode="after")
    def validate_rooms(self) -> "BookingUpdate":
        self._check_selection_form()
        return self

    @property
    def changes_stay(self) -> bool:
        """Whether the update can move units: dates, times, rooms or quantity."""
        return bool(
            {"check_in", "check_out", "check_in_time", "check_out_time"} & self.provided_fields()
        ) or self.selections() is not None or self.quantity is not None


class StatusChangeRequest(BaseSchema):
    reason: Optional[str] = Field(None, max_length=500)


class PaymentCallback(BaseSchema):
    """Payment outcome, already authenticated by the caller."""

    merchant_order_id: str = Field(..., min_length=1)
    result: PaymentResult
    amount: Decimal = Field(..., ge=0, description="Amount reported by the gateway")
    reference: Optional[str] = None
