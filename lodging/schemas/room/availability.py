"""Availability and price quote responses."""

from __future__ import annotations

from datetime import date as Date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from lodging.schemas.common.base import BaseSchema

__all__ = ["AvailabilityResponse", "NightlyPriceResponse", "QuoteResponse"]


class AvailabilityResponse(BaseSchema):
    room_type_id: str
    room_type_name: str
    check_in: Date
    check_out: Date
    available_units: List[str]
    available_count: int
    total_units: int
    blocked_units: List[str] = Field(default_factory=list)
    booked_units: List[str] = Field(default_factory=list)
    fully_blocked: bool = False


class NightlyPriceResponse(BaseSchema):
    date: Date
    base_price: Decimal
    price: Decimal
    promotion: Optional[str] = None


class QuoteResponse(BaseSchema):
    room_type_id: str
    check_in: Date
    check_out: Date
    quantity: int
    nights: int
    total: Decimal
    original_total: Decimal
    savings: Decimal
    promo_nights_count: int
    price_per_night: Decimal
    available_count: int
    breakdown: List[NightlyPriceResponse] = Field(default_factory=list)
