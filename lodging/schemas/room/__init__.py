from lodging.schemas.room.availability import AvailabilityResponse, NightlyPriceResponse, QuoteResponse
from lodging.schemas.room.room_type import (
    PromotionCreate,
    PromotionResponse,
    RoomTypeCreate,
    RoomTypeResponse,
    UnavailableDateCreate,
    UnavailableDateResponse,
)

__all__ = [
    "AvailabilityResponse",
    "NightlyPriceResponse",
    "PromotionCreate",
    "PromotionResponse",
    "QuoteResponse",
    "RoomTypeCreate",
    "RoomTypeResponse",
    "UnavailableDateCreate",
    "UnavailableDateResponse",
]
