from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from lodging.core.exceptions import InvalidDateRangeError, ValidationError
from lodging.repositories.room.promotion_repository import PromotionRepository
from lodging.services.pricing.pricing_calculator import build_pricing_calculator
from lodging.services.pricing.promotion_resolver import PromotionResolver, effective_price, round_currency
from lodging.services.pricing.rate_table import price_for_night
from lodging.utils.date_utils import iter_nights

SUNDAY = date(2025, 6, 1)
MONDAY = date(2025, 6, 2)
TUESDAY = date(2025, 6, 3)


@pytest.fixture()
def calculator(db, clock):
    return build_pricing_calculator(db, clock)


class TestRateTable:
    def test_day_of_week_override_applies(self, make_room_type):
        room_type = make_room_type(monday_price=Decimal("250000"))
        assert price_for_night(room_type, MONDAY) == Decimal("250000")

    def test_missing_override_falls_back_to_base_price(self, make_room_type):
        room_type = make_room_type(monday_price=Decimal("250000"))
        assert price_for_night(room_type, SUNDAY) == Decimal("300000")
        assert price_for_night(room_type, TUESDAY) == Decimal("300000")


class TestEffectivePrice:
    def test_fixed_price_wins_over_percentage(self):
        assert effective_price(Decimal("300000"), Decimal("200000"), Decimal("50")) == Decimal("200000")

    def test_percentage_rounds_half_up_to_currency_unit(self):
        # 333333 * 0.9 = 299999.7
        assert effective_price(Decimal("333333"), None, Decimal("10")) == Decimal("300000")
        assert round_currency(Decimal("100.5")) == Decimal("101")

    def test_no_price_defined(self):
        assert effective_price(Decimal("300000"), None, None) is None


class TestPriceStay:
    def test_scenario_d_promotion_overrides_day_of_week_rate(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type(monday_price=Decimal("250000"))
        make_promotion(room_type, MONDAY, MONDAY, promo_price="200000")

        quote = calculator.price_stay(room_type, SUNDAY, TUESDAY, 1)

        assert quote.total == Decimal("500000")
        assert quote.original_total == Decimal("550000")
        assert quote.savings == Decimal("50000")
        assert quote.promo_nights_count == 1
        assert [n.price for n in quote.nights] == [Decimal("300000"), Decimal("200000")]

    def test_quantity_multiplies_per_unit_schedule(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type(monday_price=Decimal("250000"))
        make_promotion(room_type, MONDAY, MONDAY, promo_price="200000")

        quote = calculator.price_stay(room_type, SUNDAY, TUESDAY, 3)

        assert quote.total == Decimal("1500000")
        assert quote.savings == Decimal("150000")
        assert quote.price_per_night == Decimal("250000")

    def test_without_promotion_total_is_sum_of_nightly_rates(self, make_room_type, calculator):
        room_type = make_room_type(friday_price=Decimal("350000"), saturday_price=Decimal("400000"))
        check_in, check_out = date(2025, 6, 4), date(2025, 6, 10)

        quote = calculator.price_stay(room_type, check_in, check_out, 2)

        expected = sum(price_for_night(room_type, night) for night in iter_nights(check_in, check_out)) * 2
        assert quote.total == expected
        assert quote.savings == 0
        assert quote.promo_nights_count == 0

    def test_stay_outside_promotion_range_prices_as_without_promotion(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, date(2025, 7, 1), date(2025, 7, 5), promo_price="100000")

        quote = calculator.price_stay(room_type, date(2025, 6, 28), date(2025, 7, 1), 1)

        assert quote.total == Decimal("900000")
        assert quote.promo_nights_count == 0

    def test_promotion_end_date_is_inclusive(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, date(2025, 6, 1), date(2025, 6, 2), promo_price="100000")

        quote = calculator.price_stay(room_type, date(2025, 6, 2), date(2025, 6, 4), 1)

        assert [n.price for n in quote.nights] == [Decimal("100000"), Decimal("300000")]

    def test_zero_night_stay_is_rejected(self, make_room_type, calculator):
        room_type = make_room_type()
        with pytest.raises(InvalidDateRangeError):
            calculator.price_stay(room_type, SUNDAY, SUNDAY, 1)

    def test_quantity_below_one_is_rejected(self, make_room_type, calculator):
        room_type = make_room_type()
        with pytest.raises(ValidationError):
            calculator.price_stay(room_type, SUNDAY, MONDAY, 0)


class TestPromotionPrecedence:
    def test_higher_priority_wins(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, SUNDAY, SUNDAY, promo_price="150000", priority=1, name="Low")
        make_promotion(room_type, SUNDAY, SUNDAY, promo_price="250000", priority=5, name="High")

        night = calculator.nightly_price(room_type, SUNDAY)

        assert night.price == Decimal("250000")
        assert night.promotion.name == "High"

    def test_equal_priority_prefers_most_recently_created(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(
            room_type, SUNDAY, SUNDAY, promo_price="150000", name="Older",
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        make_promotion(
            room_type, SUNDAY, SUNDAY, promo_price="180000", name="Newer",
            created_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
        )

        assert calculator.nightly_price(room_type, SUNDAY).promotion.name == "Newer"

    def test_inactive_promotion_is_ignored(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, SUNDAY, SUNDAY, promo_price="100000", is_active=False)

        assert calculator.nightly_price(room_type, SUNDAY).promotion is None

    def test_min_nights_not_met_falls_through_to_next_promotion(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, SUNDAY, TUESDAY, promo_price="100000", priority=10, min_nights=3, name="Long stay")
        make_promotion(room_type, SUNDAY, TUESDAY, discount_percentage="10", priority=1, name="Ten off")

        short = calculator.price_stay(room_type, SUNDAY, TUESDAY, 1)
        long = calculator.price_stay(room_type, SUNDAY, date(2025, 6, 4), 1)

        assert {n.promotion.name for n in short.nights} == {"Ten off"}
        assert short.total == Decimal("540000")
        assert {n.promotion.name for n in long.nights} == {"Long stay"}

    def test_each_night_priced_by_promotion_covering_it(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type()
        make_promotion(room_type, SUNDAY, SUNDAY, promo_price="100000", name="First")
        make_promotion(room_type, MONDAY, MONDAY, promo_price="200000", name="Second")

        quote = calculator.price_stay(room_type, SUNDAY, TUESDAY, 1)

        assert [n.promotion.name for n in quote.nights] == ["First", "Second"]
        assert quote.total == Decimal("300000")


class TestLegacyPromotion:
    def test_legacy_promotion_applies_inside_inclusive_range(self, make_room_type, calculator):
        room_type = make_room_type(
            promo_price=Decimal("280000"),
            promo_start_date=SUNDAY,
            promo_end_date=SUNDAY,
        )

        quote = calculator.price_stay(room_type, SUNDAY, TUESDAY, 1)

        assert [n.price for n in quote.nights] == [Decimal("280000"), Decimal("300000")]
        assert quote.nights[0].promotion.is_legacy

    def test_promotion_table_beats_legacy_promotion(self, make_room_type, make_promotion, calculator):
        room_type = make_room_type(
            promo_price=Decimal("280000"),
            promo_start_date=SUNDAY,
            promo_end_date=MONDAY,
        )
        make_promotion(room_type, SUNDAY, SUNDAY, promo_price="150000")

        quote = calculator.price_stay(room_type, SUNDAY, TUESDAY, 1)

        assert [n.price for n in quote.nights] == [Decimal("150000"), Decimal("280000")]


def test_nightly_price_defaults_to_injected_today(make_room_type, calculator):
    # 2025-05-01 is a Thursday
    room_type = make_room_type(thursday_price=Decimal("310000"))

    night = calculator.nightly_price(room_type)

    assert night.night == date(2025, 5, 1)
    assert night.price == Decimal("310000")


def test_active_promotion_checks_min_nights_against_stay(db, make_room_type, make_promotion):
    room_type = make_room_type()
    make_promotion(room_type, SUNDAY, TUESDAY, promo_price="100000", min_nights=2, name="Two nights")
    resolver = PromotionResolver(PromotionRepository(db))

    assert resolver.active_promotion(room_type, MONDAY, Decimal("300000")) is None
    assert resolver.active_promotion(room_type, MONDAY, Decimal("300000"), stay_nights=2).name == "Two nights"
