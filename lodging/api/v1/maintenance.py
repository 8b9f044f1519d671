"""Maintenance sweeps, meant to be triggered by a scheduler."""

from fastapi import APIRouter, Depends

from lodging.api.deps import get_lifecycle_service, unwrap_result
from lodging.schemas.booking.booking_response import MaintenanceResponse
from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post("/expire-pending", response_model=MaintenanceResponse)
def expire_pending(service: BookingLifecycleService = Depends(get_lifecycle_service)):
    booking_ids = unwrap_result(service.cancel_expired_bookings())
    return MaintenanceResponse(processed=len(booking_ids), booking_ids=booking_ids)


@router.post("/auto-checkout", response_model=MaintenanceResponse)
def auto_checkout(service: BookingLifecycleService = Depends(get_lifecycle_service)):
    booking_ids = unwrap_result(service.auto_checkout())
    return MaintenanceResponse(processed=len(booking_ids), booking_ids=booking_ids)
