from lodging.services.pricing.pricing_calculator import NightPrice, PricingCalculator, StayQuote
from lodging.services.pricing.promotion_resolver import AppliedPromotion, PromotionResolver, effective_price, round_currency
from lodging.services.pricing.rate_table import price_for_night

__all__ = [
    "AppliedPromotion",
    "NightPrice",
    "PricingCalculator",
    "PromotionResolver",
    "StayQuote",
    "effective_price",
    "price_for_night",
    "round_currency",
]
