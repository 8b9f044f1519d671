"""Room inventory models."""

from lodging.models.room.promotion import Promotion
from lodging.models.room.room_type import WEEKDAY_PRICE_COLUMNS, RoomType
from lodging.models.room.unavailable_date import UnavailableDate

__all__ = ["Promotion", "RoomType", "UnavailableDate", "WEEKDAY_PRICE_COLUMNS"]
