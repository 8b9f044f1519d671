"""
Rate table lookup.

A room type carries a base nightly price and seven optional day-of-week
overrides; a missing override silently falls back to the base price.
"""

from datetime import date
from decimal import Decimal

from lodging.models.room.room_type import RoomType


def price_for_night(room_type: RoomType, night: date) -> Decimal:
    """Day-of-week override for ``night`` if set, else the base price."""
    override = room_type.price_override_for(night)
    if override is not None:
        return Decimal(override)
    return Decimal(room_type.base_price)
