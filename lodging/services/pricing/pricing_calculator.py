"""
Stay pricing.

Walks every night of [check_in, check_out), prices it with the rate table
and the promotion resolver, and multiplies the per-unit totals by the unit
count. Savings are measured against the day-of-week rate.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from lodging.config.settings import settings
from lodging.core.clock import Clock, system_clock, today
from lodging.core.exceptions import InvalidDateRangeError, ValidationError
from lodging.core.logging import get_logger
from lodging.models.room.room_type import RoomType
from lodging.repositories.room.promotion_repository import PromotionRepository
from lodging.services.pricing.promotion_resolver import AppliedPromotion, PromotionResolver, round_currency
from lodging.services.pricing.rate_table import price_for_night
from lodging.utils.date_utils import iter_nights

logger = get_logger(__name__)


@dataclass
class NightPrice:
    night: date
    base_price: Decimal
    price: Decimal
    promotion: Optional[AppliedPromotion] = None

    @property
    def has_promotion(self) -> bool:
        return self.promotion is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.night.isoformat(),
            "base_price": self.base_price,
            "price": self.price,
            "promotion": self.promotion.name if self.promotion else None,
        }


@dataclass
class StayQuote:
    """Price of a stay for ``quantity`` units of one room type."""

    room_type_id: str
    check_in: date
    check_out: date
    quantity: int
    nights: List[NightPrice] = field(default_factory=list)

    @property
    def nights_count(self) -> int:
        return len(self.nights)

    @property
    def per_unit_total(self) -> Decimal:
        return sum((n.price for n in self.nights), Decimal("0"))

    @property
    def per_unit_original_total(self) -> Decimal:
        return sum((n.base_price for n in self.nights), Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.per_unit_total * self.quantity

    @property
    def original_total(self) -> Decimal:
        return self.per_unit_original_total * self.quantity

    @property
    def savings(self) -> Decimal:
        return self.original_total - self.total

    @property
    def promo_nights_count(self) -> int:
        return sum(1 for n in self.nights if n.has_promotion)

    @property
    def price_per_night(self) -> Decimal:
        """Average per-unit nightly price, rounded to the currency unit."""
        if not self.nights:
            return Decimal("0")
        return round_currency(self.per_unit_total / self.nights_count)


class PricingCalculator:
    """Prices nights and stays for a room type."""

    def __init__(self, resolver: PromotionResolver, clock: Clock = system_clock):
        self.resolver = resolver
        self.clock = clock

    def price_stay(self, room_type: RoomType, check_in: date, check_out: date, quantity: int = 1) -> StayQuote:
        """
        Price ``quantity`` units for every night of [check_in, check_out).

        Raises:
            InvalidDateRangeError: check_out is not after check_in
            ValidationError: quantity is below one
        """
        if check_out <= check_in:
            raise InvalidDateRangeError(check_in=check_in, check_out=check_out)
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1", {"quantity": ["must be >= 1"]})

        stay_nights = (check_out - check_in).days
        candidates = self.resolver.candidates(room_type, check_in, check_out - timedelta(days=1))

        quote = StayQuote(
            room_type_id=room_type.id,
            check_in=check_in,
            check_out=check_out,
            quantity=quantity,
        )
        for night in iter_nights(check_in, check_out):
            quote.nights.append(self._price_night(room_type, night, candidates, stay_nights))

        logger.debug(
            f"Priced {stay_nights} night(s) x {quantity} of {room_type.name}: {quote.total}",
            extra={"room_type_id": room_type.id, "operation": "price_stay"},
        )
        return quote

    def nightly_price(self, room_type: RoomType, night: Optional[date] = None) -> NightPrice:
        """Price a single night, defaulting to today."""
        night = night or today(self.clock)
        base = price_for_night(room_type, night)
        promotion = self.resolver.active_promotion(room_type, night, base)
        return NightPrice(
            night=night,
            base_price=base,
            price=promotion.price if promotion else base,
            promotion=promotion,
        )

    def _price_night(self, room_type: RoomType, night: date, candidates, stay_nights: int) -> NightPrice:
        base = price_for_night(room_type, night)
        promotion = self.resolver.resolve(room_type, night, base, candidates, stay_nights)
        return NightPrice(
            night=night,
            base_price=base,
            price=promotion.price if promotion else base,
            promotion=promotion,
        )


def build_pricing_calculator(db: Session, clock: Clock = system_clock) -> PricingCalculator:
    """Wire a calculator to the promotion table of ``db``."""
    return PricingCalculator(PromotionResolver(PromotionRepository(db), settings.CURRENCY_QUANTUM), clock)
