from lodging.services.inventory.allocator import AllocationRequest, Allocator
from lodging.services.inventory.availability_service import AvailabilityCalculator, AvailabilityResult
from lodging.services.inventory.conflict_detector import ConflictCheck, ConflictDetector, evaluate_conflict
from lodging.services.inventory.room_inventory_service import RoomInventoryService

__all__ = [
    "AllocationRequest",
    "Allocator",
    "AvailabilityCalculator",
    "AvailabilityResult",
    "ConflictCheck",
    "ConflictDetector",
    "RoomInventoryService",
    "evaluate_conflict",
]
