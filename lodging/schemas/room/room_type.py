"""
Room type, promotion and unavailable-date schemas for staff inventory management.
"""

from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from lodging.schemas.common.base import BaseCreateSchema, BaseResponseSchema

__all__ = [
    "RoomTypeCreate",
    "RoomTypeResponse",
    "PromotionCreate",
    "PromotionResponse",
    "UnavailableDateCreate",
    "UnavailableDateResponse",
]

Price = Optional[Decimal]


class RoomTypeCreate(BaseCreateSchema):
    """Create a room type with its unit list and rate table."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    unit_numbers: List[str] = Field(..., min_length=1, description="Ordered unit identifiers")
    allotment: Optional[int] = Field(None, ge=0, description="Defaults to the number of units")

    base_price: Decimal = Field(..., ge=0)
    monday_price: Price = Field(None, ge=0)
    tuesday_price: Price = Field(None, ge=0)
    wednesday_price: Price = Field(None, ge=0)
    thursday_price: Price = Field(None, ge=0)
    friday_price: Price = Field(None, ge=0)
    saturday_price: Price = Field(None, ge=0)
    sunday_price: Price = Field(None, ge=0)

    promo_price: Price = Field(None, ge=0)
    promo_start_date: Optional[Date] = None
    promo_end_date: Optional[Date] = None

    max_guests: int = Field(2, ge=1)

    @field_validator("unit_numbers")
    @classmethod
    def validate_unit_numbers(cls, v: List[str]) -> List[str]:
        units = [u.strip() for u in v]
        if any(not u for u in units):
            raise ValueError("Unit identifiers cannot be blank")
        if len(set(units)) != len(units):
            raise ValueError("Unit identifiers must be unique")
        return units

    @model_validator(mode="after")
    def validate_consistency(self) -> "RoomTypeCreate":
        if self.allotment is not None and self.allotment != len(self.unit_numbers):
            raise ValueError("allotment must equal the number of unit identifiers")

        promo_dates = (self.promo_start_date, self.promo_end_date)
        if any(d is not None for d in promo_dates) and not all(d is not None for d in promo_dates):
            raise ValueError("promo_start_date and promo_end_date must be given together")
        if self.promo_start_date and self.promo_end_date and self.promo_end_date < self.promo_start_date:
            raise ValueError("promo_end_date cannot be before promo_start_date")
        return self


class RoomTypeResponse(BaseResponseSchema):
    name: str
    description: Optional[str] = None
    unit_numbers: List[str]
    allotment: int
    base_price: Decimal
    monday_price: Price = None
    tuesday_price: Price = None
    wednesday_price: Price = None
    thursday_price: Price = None
    friday_price: Price = None
    saturday_price: Price = None
    sunday_price: Price = None
    promo_price: Price = None
    promo_start_date: Optional[Date] = None
    promo_end_date: Optional[Date] = None
    max_guests: int
    is_active: bool


class PromotionCreate(BaseCreateSchema):
    """
    Create a promotion for a room type.

    At least one of ``promo_price`` and ``discount_percentage`` is required;
    when both are given the fixed price is the one applied.
    """

    name: str = Field(..., min_length=1, max_length=150)
    promo_price: Price = Field(None, ge=0)
    discount_percentage: Optional[Decimal] = Field(None, gt=0, le=100)
    start_date: Date
    end_date: Date
    is_active: bool = True
    priority: int = 0
    min_nights: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def validate_promotion(self) -> "PromotionCreate":
        if self.promo_price is None and self.discount_percentage is None:
            raise ValueError("Either promo_price or discount_percentage is required")
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class PromotionResponse(BaseResponseSchema):
    room_type_id: str
    name: str
    promo_price: Price = None
    discount_percentage: Optional[Decimal] = None
    start_date: Date
    end_date: Date
    is_active: bool
    priority: int
    min_nights: Optional[int] = None


class UnavailableDateCreate(BaseCreateSchema):
    """Block one night, or every night of an inclusive range, for a unit or the whole room type."""

    start_date: Date
    end_date: Optional[Date] = Field(None, description="Inclusive; defaults to start_date")
    unit_number: Optional[str] = Field(None, description="Omit to block every unit")
    reason: Optional[str] = None

    @model_validator(mode="after")
    def validate_range(self) -> "UnavailableDateCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class UnavailableDateResponse(BaseResponseSchema):
    room_type_id: str
    unit_number: Optional[str] = None
    unavailable_date: Date
    reason: Optional[str] = None
