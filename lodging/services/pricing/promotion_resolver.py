"""
Promotion resolution.

For a given night the winning promotion is the first active promotion
covering it in precedence order (priority, then most recently created, then
id, all descending). Promotions whose minimum-nights constraint the stay does
not meet are skipped. When no promotion row applies, the room type's legacy
single promotion is used if its inclusive range covers the night.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from lodging.config.settings import settings
from lodging.models.room.promotion import Promotion
from lodging.models.room.room_type import RoomType
from lodging.repositories.room.promotion_repository import PromotionRepository

LEGACY_PROMOTION = "legacy"
TABLE_PROMOTION = "promotion"

HUNDRED = Decimal("100")


def round_currency(amount: Decimal, quantum: Optional[Decimal] = None) -> Decimal:
    """Round half-up to the currency unit."""
    return Decimal(amount).quantize(quantum or settings.CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AppliedPromotion:
    """A promotion chosen for one night and the nightly price it yields."""

    source: str
    name: str
    price: Decimal
    promotion_id: Optional[str] = None
    discount_percentage: Optional[Decimal] = None

    @property
    def is_legacy(self) -> bool:
        return self.source == LEGACY_PROMOTION


def effective_price(
    day_price: Decimal,
    promo_price: Optional[Decimal],
    discount_percentage: Optional[Decimal],
    quantum: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """
    Nightly price under a promotion, or None when it defines no price.

    A fixed price wins over a percentage when both are set.
    """
    if promo_price is not None:
        return Decimal(promo_price)
    if discount_percentage is not None:
        discounted = Decimal(day_price) * (HUNDRED - Decimal(discount_percentage)) / HUNDRED
        return round_currency(discounted, quantum)
    return None


class PromotionResolver:
    """Selects the applicable promotion for a room type and night."""

    def __init__(self, promotion_repository: PromotionRepository, quantum: Optional[Decimal] = None):
        self.promotion_repository = promotion_repository
        self.quantum = quantum or settings.CURRENCY_QUANTUM

    def candidates(self, room_type: RoomType, first_night: date, last_night: date) -> List[Promotion]:
        """Active promotions intersecting the nights, in precedence order."""
        return self.promotion_repository.find_active_covering(room_type.id, first_night, last_night)

    def resolve(
        self,
        room_type: RoomType,
        night: date,
        day_price: Decimal,
        candidates: Sequence[Promotion],
        stay_nights: int = 1,
    ) -> Optional[AppliedPromotion]:
        """
        Pick the promotion for ``night`` from precedence-ordered ``candidates``.

        Args:
            room_type: Room type being priced (for the legacy promotion)
            night: Night being priced
            day_price: Rate table price for the night
            candidates: Output of ``candidates`` for a range containing ``night``
            stay_nights: Length of the whole stay, for minimum-nights checks
        """
        for promotion in candidates:
            if not promotion.is_active or not promotion.covers(night):
                continue
            if promotion.min_nights and stay_nights < promotion.min_nights:
                continue

            price = effective_price(day_price, promotion.promo_price, promotion.discount_percentage, self.quantum)
            if price is None:
                continue

            return AppliedPromotion(
                source=TABLE_PROMOTION,
                name=promotion.name,
                price=price,
                promotion_id=promotion.id,
                discount_percentage=None if promotion.promo_price is not None else promotion.discount_percentage,
            )

        return self._legacy_promotion(room_type, night)

    def active_promotion(self, room_type: RoomType, night: date, day_price: Decimal, stay_nights: int = 1) -> Optional[AppliedPromotion]:
        """Resolve a single night, loading its candidates."""
        return self.resolve(room_type, night, day_price, self.candidates(room_type, night, night), stay_nights)

    def _legacy_promotion(self, room_type: RoomType, night: date) -> Optional[AppliedPromotion]:
        if room_type.promo_price is None:
            return None
        if room_type.promo_start_date is None or room_type.promo_end_date is None:
            return None
        if not (room_type.promo_start_date <= night <= room_type.promo_end_date):
            return None

        return AppliedPromotion(
            source=LEGACY_PROMOTION,
            name=f"{room_type.name} promo",
            price=Decimal(room_type.promo_price),
        )
