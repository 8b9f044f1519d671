from lodging.repositories.room.promotion_repository import PromotionRepository
from lodging.repositories.room.room_type_repository import RoomTypeRepository
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository

__all__ = ["PromotionRepository", "RoomTypeRepository", "UnavailableDateRepository"]
