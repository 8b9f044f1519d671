"""
Room inventory service.

Read side: free units, price quotes and single-night prices for a room type.
Staff side: room types, promotions and unavailable-date blocks.
"""

from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from lodging.core.clock import Clock, system_clock
from lodging.core.exceptions import (
    EntityAlreadyExistsError,
    InvalidDateRangeError,
    ResourceNotFoundError,
    ValidationError,
)
from lodging.models.room.promotion import Promotion
from lodging.models.room.room_type import RoomType
from lodging.models.room.unavailable_date import UnavailableDate
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository
from lodging.repositories.room.promotion_repository import PromotionRepository
from lodging.repositories.room.room_type_repository import RoomTypeRepository
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository
from lodging.schemas.room.availability import AvailabilityResponse, NightlyPriceResponse, QuoteResponse
from lodging.schemas.room.room_type import (
    PromotionCreate,
    PromotionResponse,
    RoomTypeCreate,
    RoomTypeResponse,
    UnavailableDateCreate,
    UnavailableDateResponse,
)
from lodging.services.base.base_service import BaseService
from lodging.services.base.service_result import ServiceResult
from lodging.services.inventory.availability_service import AvailabilityCalculator
from lodging.services.pricing.pricing_calculator import build_pricing_calculator


class RoomInventoryService(BaseService[RoomType, RoomTypeRepository]):
    """Availability, pricing lookups and staff inventory management."""

    def __init__(self, db: Session, clock: Clock = system_clock):
        super().__init__(RoomTypeRepository(db), db, clock)
        self.promotions = PromotionRepository(db)
        self.unavailable_dates = UnavailableDateRepository(db)
        self.availability = AvailabilityCalculator(
            self.unavailable_dates,
            BookingRepository(db),
            BookingUnitRepository(db),
        )
        self.pricing = build_pricing_calculator(db, clock)

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def list_room_types(self) -> ServiceResult[List[RoomTypeResponse]]:
        try:
            room_types = self.repository.find_active()
        except Exception as e:
            return self._handle_exception(e, "list room types")
        return ServiceResult.success([RoomTypeResponse.model_validate(rt) for rt in room_types])

    def get_room_type(self, room_type_ref: str) -> ServiceResult[RoomTypeResponse]:
        try:
            room_type = self.repository.resolve_reference(room_type_ref)
        except Exception as e:
            return self._handle_exception(e, "get room type", room_type_ref)
        return ServiceResult.success(RoomTypeResponse.model_validate(room_type))

    def check_availability(
        self,
        room_type_ref: str,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[str] = None,
    ) -> ServiceResult[AvailabilityResponse]:
        try:
            if check_out <= check_in:
                raise InvalidDateRangeError(check_in=check_in, check_out=check_out)
            room_type = self.repository.resolve_reference(room_type_ref)
            result = self.availability.available_units(room_type, check_in, check_out, exclude_booking_id)
        except Exception as e:
            return self._handle_exception(e, "check availability", room_type_ref)

        return ServiceResult.success(
            AvailabilityResponse(
                room_type_id=room_type.id,
                room_type_name=room_type.name,
                check_in=check_in,
                check_out=check_out,
                available_units=result.units,
                available_count=result.count,
                total_units=len(room_type.units),
                blocked_units=result.blocked_units,
                booked_units=result.booked_units,
                fully_blocked=result.fully_blocked,
            )
        )

    def quote(self, room_type_ref: str, check_in: date, check_out: date, quantity: int = 1) -> ServiceResult[QuoteResponse]:
        """Price a stay and report how many units are currently free for it."""
        try:
            room_type = self.repository.resolve_reference(room_type_ref)
            quote = self.pricing.price_stay(room_type, check_in, check_out, quantity)
            free = self.availability.available_units(room_type, check_in, check_out)
        except Exception as e:
            return self._handle_exception(e, "quote stay", room_type_ref)

        return ServiceResult.success(
            QuoteResponse(
                room_type_id=room_type.id,
                check_in=check_in,
                check_out=check_out,
                quantity=quantity,
                nights=quote.nights_count,
                total=quote.total,
                original_total=quote.original_total,
                savings=quote.savings,
                promo_nights_count=quote.promo_nights_count,
                price_per_night=quote.price_per_night,
                available_count=free.count,
                breakdown=[NightlyPriceResponse(**n.to_dict()) for n in quote.nights],
            )
        )

    def nightly_price(self, room_type_ref: str, on: Optional[date] = None) -> ServiceResult[NightlyPriceResponse]:
        try:
            room_type = self.repository.resolve_reference(room_type_ref)
            night = self.pricing.nightly_price(room_type, on)
        except Exception as e:
            return self._handle_exception(e, "get nightly price", room_type_ref)
        return ServiceResult.success(NightlyPriceResponse(**night.to_dict()))

    # -------------------------------------------------------------------------
    # Staff operations
    # -------------------------------------------------------------------------

    def create_room_type(self, data: RoomTypeCreate) -> ServiceResult[RoomTypeResponse]:
        try:
            if self.repository.find_by_name(data.name):
                raise EntityAlreadyExistsError(
                    f"Room type '{data.name}' already exists",
                    {"name": data.name},
                )
            values = data.model_dump()
            if values.get("allotment") is None:
                values["allotment"] = len(data.unit_numbers)
            room_type = self.repository.create(RoomType(**values))
        except Exception as e:
            return self._handle_exception(e, "create room type", data.name)

        self._log_operation("create_room_type", room_type.id, {"room_type_id": room_type.id})
        return ServiceResult.success(RoomTypeResponse.model_validate(room_type), message="Room type created")

    def create_promotion(self, room_type_ref: str, data: PromotionCreate) -> ServiceResult[PromotionResponse]:
        try:
            room_type = self.repository.resolve_reference(room_type_ref)
            promotion = self.promotions.create(Promotion(room_type_id=room_type.id, **data.model_dump()))
        except Exception as e:
            return self._handle_exception(e, "create promotion", room_type_ref)

        self._log_operation("create_promotion", promotion.id, {"room_type_id": promotion.room_type_id})
        return ServiceResult.success(PromotionResponse.model_validate(promotion), message="Promotion created")

    def create_unavailable_dates(
        self,
        room_type_ref: str,
        data: UnavailableDateCreate,
    ) -> ServiceResult[List[UnavailableDateResponse]]:
        """Block every night of the inclusive range for one unit, or for the whole room type."""
        try:
            with self.transaction():
                room_type = self.repository.resolve_reference(room_type_ref)
                unit_number = data.unit_number or None
                if unit_number and unit_number not in room_type.units:
                    raise ValidationError(
                        f"Unit {unit_number} does not exist in room type {room_type.name}",
                        {"unit_number": [f"expected one of {', '.join(room_type.units)}"]},
                    )

                blocks = []
                night, last = data.start_date, data.end_date or data.start_date
                while night <= last:
                    blocks.append(
                        self.unavailable_dates.add(
                            UnavailableDate(
                                room_type_id=room_type.id,
                                unit_number=unit_number,
                                unavailable_date=night,
                                reason=data.reason,
                            )
                        )
                    )
                    night += timedelta(days=1)
        except Exception as e:
            return self._handle_exception(e, "block dates", room_type_ref)

        self._log_operation(
            "create_unavailable_dates",
            room_type.id,
            {"room_type_id": room_type.id, "unit_number": unit_number, "nights": len(blocks)},
        )
        return ServiceResult.success(
            [UnavailableDateResponse.model_validate(b) for b in blocks],
            message=f"Blocked {len(blocks)} night(s)",
        )

    def delete_unavailable_date(self, block_id: str) -> ServiceResult[None]:
        try:
            block = self.unavailable_dates.find_by_id(block_id)
            if block is None:
                raise ResourceNotFoundError("Unavailable date", block_id)
            self.unavailable_dates.delete(block)
        except Exception as e:
            return self._handle_exception(e, "remove blocked date", block_id)
        return ServiceResult.success(None, message="Block removed")
