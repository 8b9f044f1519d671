"""Room type endpoints: availability, quotes and staff inventory management."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from lodging.api.deps import get_inventory_service, unwrap_result
from lodging.schemas.room.availability import AvailabilityResponse, NightlyPriceResponse, QuoteResponse
from lodging.schemas.room.room_type import (
    PromotionCreate,
    PromotionResponse,
    RoomTypeCreate,
    RoomTypeResponse,
    UnavailableDateCreate,
    UnavailableDateResponse,
)
from lodging.services.inventory.room_inventory_service import RoomInventoryService

router = APIRouter(tags=["Room Inventory"])


@router.get("/room-types", response_model=List[RoomTypeResponse])
def list_room_types(service: RoomInventoryService = Depends(get_inventory_service)):
    return unwrap_result(service.list_room_types())


@router.post("/room-types", response_model=RoomTypeResponse, status_code=status.HTTP_201_CREATED)
def create_room_type(
    payload: RoomTypeCreate,
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.create_room_type(payload))


@router.get("/room-types/{room_type_id}", response_model=RoomTypeResponse)
def get_room_type(room_type_id: str, service: RoomInventoryService = Depends(get_inventory_service)):
    return unwrap_result(service.get_room_type(room_type_id))


@router.get("/room-types/{room_type_id}/availability", response_model=AvailabilityResponse)
def get_availability(
    room_type_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    exclude_booking_id: Optional[str] = Query(None, description="Booking to ignore, when editing it"),
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.check_availability(room_type_id, check_in, check_out, exclude_booking_id))


@router.get("/room-types/{room_type_id}/quote", response_model=QuoteResponse)
def get_quote(
    room_type_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    quantity: int = Query(1, ge=1),
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.quote(room_type_id, check_in, check_out, quantity))


@router.get("/room-types/{room_type_id}/nightly-price", response_model=NightlyPriceResponse)
def get_nightly_price(
    room_type_id: str,
    on: Optional[date] = Query(None, description="Defaults to today"),
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.nightly_price(room_type_id, on))


@router.post(
    "/room-types/{room_type_id}/promotions",
    response_model=PromotionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_promotion(
    room_type_id: str,
    payload: PromotionCreate,
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.create_promotion(room_type_id, payload))


@router.post(
    "/room-types/{room_type_id}/unavailable-dates",
    response_model=List[UnavailableDateResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_unavailable_dates(
    room_type_id: str,
    payload: UnavailableDateCreate,
    service: RoomInventoryService = Depends(get_inventory_service),
):
    return unwrap_result(service.create_unavailable_dates(room_type_id, payload))


@router.delete("/unavailable-dates/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unavailable_date(block_id: str, service: RoomInventoryService = Depends(get_inventory_service)):
    unwrap_result(service.delete_unavailable_date(block_id))
