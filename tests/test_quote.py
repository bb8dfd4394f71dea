"""Tests for engine/quote.py — hand-calculated expected values.

Calendar: 2025-01-06 is a Monday, 2025-01-10 a Friday, 2025-01-11 a Saturday.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from rental_billing.config import PricingSlab, PricingSlabs, RentalWindow, TariffConfig
from rental_billing.engine.quote import quote, select_slab
from rental_billing.engine.resolver import resolve
from rental_billing.errors import (
    IncompleteTariff,
    InvalidWindow,
    PricingError,
    SlabDurationOutOfRange,
)

MONDAY = datetime(2025, 1, 6)
FRIDAY = datetime(2025, 1, 10)
SATURDAY = datetime(2025, 1, 11)


def _window(start: datetime, **delta) -> RentalWindow:
    return RentalWindow(pickup=start, dropoff=start + timedelta(**delta))


def _quote(config: TariffConfig, window: RentalWindow, **kwargs):
    return quote(resolve(config), window, **kwargs)


# ═══════════════════════════════════════════════════════════════════════════
# Simple model: hourly accrual
# ═══════════════════════════════════════════════════════════════════════════

class TestSimpleHourly:

    def test_three_weekday_hours(self, weekday_tariff):
        """100/hr, 3 weekday hours, 18% GST → 300 + 54 = 354."""
        q = _quote(weekday_tariff, _window(MONDAY.replace(hour=10), hours=3))
        assert q.base_price == Decimal("300.00")
        assert q.weekend_surcharge_amount == Decimal("0.00")
        assert q.subtotal == Decimal("300.00")
        assert q.gst_amount == Decimal("54.00")
        assert q.total == Decimal("354.00")
        assert q.pricing_model == "simple"
        assert q.pricing_type == "tariff"
        assert q.has_weekend is False
        assert q.breakdown_text == "3 hrs × 100.00/hr weekday"

    def test_partial_hour_rounds_up(self, weekday_tariff):
        # 2h30 → 3 billable hours
        q = _quote(weekday_tariff, _window(MONDAY.replace(hour=10), hours=2, minutes=30))
        assert q.duration_hours == Decimal("2.5")
        assert q.billable_hours == Decimal("3")
        assert q.base_price == Decimal("300.00")

    def test_weekend_hours_use_weekend_rate(self, split_tariff):
        # Fri 22:00 → Sat 02:00: 2 weekday h × 100 + 2 weekend h × 150 = 500
        q = _quote(split_tariff, _window(FRIDAY.replace(hour=22), hours=4))
        assert q.weekday_hours == Decimal("2")
        assert q.weekend_hours == Decimal("2")
        assert q.base_price == Decimal("500.00")
        assert q.has_weekend is True
        assert q.breakdown_text == "2 hrs × 100.00/hr weekday + 2 hrs × 150.00/hr weekend"

    def test_hour_straddling_midnight_is_split(self, split_tariff):
        # Fri 23:30 → Sat 00:30: 0.5 × 100 + 0.5 × 150 = 125
        q = _quote(split_tariff, _window(FRIDAY.replace(hour=23, minute=30), hours=1))
        assert q.weekday_hours == Decimal("0.5")
        assert q.weekend_hours == Decimal("0.5")
        assert q.base_price == Decimal("125.00")

    def test_rounded_up_time_follows_dropoff(self, split_tariff):
        # Fri 22:30 → Sat 00:00 is 1.5 h, billed as 2 h ending Sat 00:30:
        # 1.5 × 100 + 0.5 × 150 = 225
        q = _quote(split_tariff, _window(FRIDAY.replace(hour=22, minute=30), hours=1, minutes=30))
        assert q.weekday_hours == Decimal("1.5")
        assert q.weekend_hours == Decimal("0.5")
        assert q.base_price == Decimal("225.00")

    def test_weekday_rate_covers_weekend_when_no_weekend_rate(self, weekday_tariff):
        q = _quote(weekday_tariff, _window(SATURDAY.replace(hour=10), hours=3))
        assert q.base_price == Decimal("300.00")
        assert q.has_weekend is True

    def test_weekend_rate_only(self):
        q = _quote(TariffConfig(weekend_rate=150), _window(MONDAY.replace(hour=10), hours=2))
        assert q.base_price == Decimal("300.00")

    def test_minimum_booking_hours(self):
        config = TariffConfig(weekday_rate=100, min_booking_hours=4)
        q = _quote(config, _window(MONDAY.replace(hour=10), hours=2))
        assert q.billable_hours == Decimal("4")
        assert q.base_price == Decimal("400.00")
        assert q.breakdown_text.endswith("(min 4 hrs)")

    def test_minimum_not_applied_above_it(self):
        config = TariffConfig(weekday_rate=100, min_booking_hours=4)
        q = _quote(config, _window(MONDAY.replace(hour=10), hours=5))
        assert q.base_price == Decimal("500.00")
        assert "min" not in q.breakdown_text

    def test_no_hourly_rate_is_incomplete(self):
        """12-hour block only, 20 h requested → no rate for hourly accrual."""
        with pytest.raises(IncompleteTariff) as exc:
            _quote(TariffConfig(price_12_hours=900), _window(MONDAY, hours=20))
        assert isinstance(exc.value, PricingError)
        assert exc.value.details == {"model": "simple", "missing": "weekday_rate or weekend_rate"}

    def test_included_km_absolute(self, weekday_tariff):
        q = _quote(weekday_tariff, _window(MONDAY, hours=3))
        assert q.included_km == Decimal("100")
        assert q.excess_km_rate == Decimal("5")

    def test_included_km_per_hour(self):
        config = TariffConfig(weekday_rate=100, km_limit_per_hour=10)
        q = _quote(config, _window(MONDAY, hours=2, minutes=15))
        # 3 billable hours × 10 km
        assert q.included_km == Decimal("30")

    def test_absolute_km_limit_wins(self):
        config = TariffConfig(weekday_rate=100, km_limit=50, km_limit_per_hour=10)
        assert _quote(config, _window(MONDAY, hours=8)).included_km == Decimal("50")

    def test_no_allowance(self):
        assert _quote(TariffConfig(weekday_rate=100), _window(MONDAY, hours=1)).included_km is None


# ═══════════════════════════════════════════════════════════════════════════
# Simple model: block prices
# ═══════════════════════════════════════════════════════════════════════════

class TestSimpleBlocks:

    def test_twelve_hour_block(self, block_tariff):
        """Exactly 12 h with price_12_hours=900 → 900 regardless of hourly rate."""
        q = _quote(block_tariff, _window(MONDAY.replace(hour=8), hours=12))
        assert q.pricing_type == "12hours"
        assert q.base_price == Decimal("900.00")
        assert q.total == Decimal("1062.00")

    def test_block_applies_to_short_bookings(self, block_tariff):
        q = _quote(block_tariff, _window(MONDAY.replace(hour=8), hours=3))
        assert q.base_price == Decimal("900.00")
        assert q.breakdown_text == "12 hour package for 3 hrs"

    def test_override_for_rounded_up_hours(self, block_tariff):
        # 17.5 h → 18 whole hours → override 1300
        q = _quote(block_tariff, _window(MONDAY, hours=17, minutes=30))
        assert q.pricing_type == "override"
        assert q.base_price == Decimal("1300.00")
        assert q.breakdown_text == "18 hour package"

    def test_capped_by_longer_override(self, block_tariff):
        # 19 h hourly would be 1900; the 24 h package is 1600
        q = _quote(block_tariff, _window(MONDAY, hours=19))
        assert q.pricing_type == "override"
        assert q.base_price == Decimal("1600.00")
        assert q.billable_hours == Decimal("19")
        assert q.breakdown_text == "24 hour package for 19 hrs"

    def test_hour_before_override_not_dearer(self, block_tariff):
        # 17 h hourly = 1700 > 18 h package 1300
        shorter = _quote(block_tariff, _window(MONDAY, hours=17))
        longer = _quote(block_tariff, _window(MONDAY, hours=18))
        assert shorter.base_price == Decimal("1300.00")
        assert shorter.base_price <= longer.base_price

    def test_just_over_block_accrues_hourly(self, block_tariff):
        q = _quote(block_tariff, _window(MONDAY, hours=13))
        assert q.pricing_type == "tariff"
        assert q.base_price == Decimal("1300.00")

    def test_weekly_pro_rated(self, block_tariff):
        # 8 days = 192 h → 6300 × 192 / 168 = 7200
        q = _quote(block_tariff, _window(MONDAY, days=8))
        assert q.pricing_type == "weekly"
        assert q.base_price == Decimal("7200.00")
        assert q.breakdown_text == "6300.00/week × 1.14 weeks (192 hrs)"

    def test_full_week_capped_at_weekly_price(self):
        config = TariffConfig(weekday_rate=100, weekend_rate=100, price_per_week=6300)
        q = _quote(config, _window(MONDAY, days=7))
        assert q.pricing_type == "weekly"
        assert q.base_price == Decimal("6300.00")
        assert q.weekday_hours == Decimal("0")
        assert q.breakdown_text == "1 week package (6300.00) for 168 hrs"

    def test_week_boundary_never_drops(self):
        # 168 h → 6300; 169 h → 6300 × 169 / 168 = 6337.50
        config = TariffConfig(weekday_rate=100, weekend_rate=100, price_per_week=6300)
        week = _quote(config, _window(MONDAY, days=7))
        over = _quote(config, _window(MONDAY, days=7, hours=1))
        assert over.base_price == Decimal("6337.50")
        assert week.base_price <= over.base_price

    def test_short_booking_under_cap_accrues_hourly(self):
        config = TariffConfig(weekday_rate=100, price_per_week=6300)
        q = _quote(config, _window(MONDAY, hours=20))
        assert q.pricing_type == "tariff"
        assert q.base_price == Decimal("2000.00")

    def test_weekly_only_short_booking_incomplete(self):
        with pytest.raises(IncompleteTariff):
            _quote(TariffConfig(price_per_week=6300), _window(MONDAY, hours=3))

    def test_per_hour_allowance_uses_billable_hours(self, block_tariff):
        q = _quote(block_tariff, _window(MONDAY, hours=17, minutes=30))
        assert q.included_km == Decimal("180")

    def test_minimum_hours_push_past_block(self):
        config = TariffConfig(price_12_hours=900, weekday_rate=100, min_booking_hours=14)
        q = _quote(config, _window(MONDAY, hours=3))
        assert q.pricing_type == "tariff"
        assert q.base_price == Decimal("1400.00")


# ═══════════════════════════════════════════════════════════════════════════
# Slab model
# ═══════════════════════════════════════════════════════════════════════════

class TestSlab:

    def test_explicit_hourly_slab(self, slab_tariff):
        q = _quote(slab_tariff, _window(MONDAY.replace(hour=9), hours=5), slab="hourly")
        assert q.pricing_model == "slab"
        assert q.slab == "hourly"
        assert q.base_price == Decimal("300.00")
        assert q.included_km == Decimal("10")
        assert q.excess_km_rate == Decimal("4")
        assert q.breakdown_text == "hourly slab: 5 hrs × 60.00"

    def test_min_duration_rule(self, slab_tariff):
        # 2 h booked, hourly slab minimum 3 h → 180
        q = _quote(slab_tariff, _window(MONDAY.replace(hour=9), hours=2), slab="hourly")
        assert q.billable_hours == Decimal("3")
        assert q.base_price == Decimal("180.00")

    def test_auto_selects_covering_slab(self, slab_tariff):
        # 30 h → daily slab, 2 days × 700
        q = _quote(slab_tariff, _window(MONDAY, hours=30))
        assert q.slab == "daily"
        assert q.base_price == Decimal("1400.00")
        assert q.billable_hours == Decimal("48")
        assert q.total == Decimal("1652.00")

    def test_weekend_surge(self, slab_tariff):
        # Sat 10:00 → Sun 10:00, daily 700, surge 1.2 → +140
        q = _quote(slab_tariff, _window(SATURDAY.replace(hour=10), hours=24))
        assert q.has_weekend is True
        assert q.surge_multiplier == Decimal("1.2")
        assert q.base_price == Decimal("700.00")
        assert q.weekend_surcharge_amount == Decimal("140.00")
        assert q.subtotal == Decimal("840.00")
        assert q.gst_amount == Decimal("151.20")
        assert q.total == Decimal("991.20")

    def test_no_surge_on_weekdays(self, slab_tariff):
        q = _quote(slab_tariff, _window(MONDAY, hours=30))
        assert q.surge_multiplier == Decimal("1.0")
        assert q.weekend_surcharge_amount == Decimal("0.00")

    def test_min_price_rule(self):
        config = TariffConfig(pricing_slabs=PricingSlabs(weekly=PricingSlab(
            price=3500, duration_min=168, duration_max=720,
            minimum_booking_rule="min_price", minimum_value=4000,
        )))
        q = _quote(config, _window(MONDAY, days=7))
        assert q.base_price == Decimal("4000.00")
        assert q.breakdown_text.endswith("(min price 4000.00)")

    def test_single_slab_used_without_choice(self):
        config = TariffConfig(pricing_slabs=PricingSlabs(daily=PricingSlab(price=700, duration_max=720)))
        q = _quote(config, _window(MONDAY, hours=50))
        assert q.slab == "daily"
        assert q.base_price == Decimal("2100.00")

    def test_explicit_slab_out_of_range(self, slab_tariff):
        with pytest.raises(SlabDurationOutOfRange) as exc:
            _quote(slab_tariff, _window(MONDAY, hours=30), slab="hourly")
        assert exc.value.details["slab"] == "hourly"

    def test_explicit_slab_not_configured(self):
        config = TariffConfig(pricing_slabs=PricingSlabs(
            hourly=PricingSlab(price=60, duration_min=1, duration_max=23),
            daily=PricingSlab(price=700, duration_min=24, duration_max=167),
        ))
        with pytest.raises(IncompleteTariff):
            _quote(config, _window(MONDAY, days=8), slab="weekly")

    def test_no_slab_covers_duration(self):
        config = TariffConfig(pricing_slabs=PricingSlabs(
            hourly=PricingSlab(price=60, duration_min=1, duration_max=23),
            daily=PricingSlab(price=700, duration_min=24, duration_max=167),
        ))
        with pytest.raises(IncompleteTariff):
            _quote(config, _window(MONDAY, minutes=30))

    def test_select_slab_prefers_longest(self, slab_tariff):
        assert select_slab(resolve(slab_tariff), Decimal("200")) == "weekly"
        assert select_slab(resolve(slab_tariff), Decimal("5")) == "hourly"

    def test_slab_argument_ignored_for_simple_model(self, weekday_tariff):
        q = _quote(weekday_tariff, _window(MONDAY, hours=3), slab="daily")
        assert q.pricing_model == "simple"
        assert q.slab is None


# ═══════════════════════════════════════════════════════════════════════════
# Flat-hourly model
# ═══════════════════════════════════════════════════════════════════════════

class TestFlatHourly:

    def test_rounds_up_to_whole_hours(self, flat_tariff):
        # 2h10 → 3 h × 80 = 240; GST 43.20
        q = _quote(flat_tariff, _window(MONDAY, hours=2, minutes=10))
        assert q.pricing_model == "flat_hourly"
        assert q.base_price == Decimal("240.00")
        assert q.gst_amount == Decimal("43.20")
        assert q.total == Decimal("283.20")
        assert q.breakdown_text == "3 hrs × 80.00/hr"
        assert q.included_km == Decimal("60")

    def test_minimum_hours(self):
        config = TariffConfig(price_per_hour=80, min_booking_hours=5)
        q = _quote(config, _window(MONDAY, hours=1))
        assert q.base_price == Decimal("400.00")

    def test_weekend_has_no_effect(self, flat_tariff):
        weekday = _quote(flat_tariff, _window(MONDAY, hours=3))
        weekend = _quote(flat_tariff, _window(SATURDAY, hours=3))
        assert weekday.total == weekend.total


# ═══════════════════════════════════════════════════════════════════════════
# GST and rounding
# ═══════════════════════════════════════════════════════════════════════════

class TestGst:

    def test_half_up_rounding(self):
        # 10.25 × 18% = 1.845 → 1.85 (half-up, not banker's 1.84)
        q = _quote(TariffConfig(weekday_rate="10.25"), _window(MONDAY, hours=1))
        assert q.gst_amount == Decimal("1.85")
        assert q.total == Decimal("12.10")

    def test_custom_gst(self):
        q = _quote(TariffConfig(weekday_rate=100, gst_percentage=28), _window(MONDAY, hours=3))
        assert q.gst_percentage == Decimal("28")
        assert q.gst_amount == Decimal("84.00")
        assert q.total == Decimal("384.00")

    def test_zero_gst(self):
        q = _quote(TariffConfig(weekday_rate=100, gst_percentage=0), _window(MONDAY, hours=3))
        assert q.gst_amount == Decimal("0.00")
        assert q.total == q.subtotal

    def test_base_price_rounded_to_cents(self):
        # 1/3 h × 100 (weekday) + 2/3 h × 150 (weekend) = 133.333… → 133.33
        config = TariffConfig(weekday_rate=100, weekend_rate=150)
        q = _quote(config, _window(FRIDAY.replace(hour=23, minute=40), minutes=40))
        assert q.base_price == Decimal("133.33")
        assert q.gst_amount == Decimal("24.00")
        assert q.total == Decimal("157.33")


# ═══════════════════════════════════════════════════════════════════════════
# Window validation
# ═══════════════════════════════════════════════════════════════════════════

class TestWindow:

    def test_zero_length_rejected(self, weekday_tariff):
        with pytest.raises(InvalidWindow):
            _quote(weekday_tariff, RentalWindow(pickup=MONDAY, dropoff=MONDAY))

    def test_negative_length_rejected(self, weekday_tariff):
        with pytest.raises(InvalidWindow) as exc:
            _quote(weekday_tariff, RentalWindow(pickup=MONDAY, dropoff=MONDAY - timedelta(hours=1)))
        assert exc.value.error_code == "ERR_WINDOW_INVALID"

    def test_mixed_timezones_rejected(self, weekday_tariff):
        window = RentalWindow(pickup=MONDAY, dropoff=(MONDAY + timedelta(hours=2)).replace(tzinfo=timezone.utc))
        with pytest.raises(InvalidWindow):
            _quote(weekday_tariff, window)

    def test_aware_window(self, split_tariff):
        ist = timezone(timedelta(hours=5, minutes=30))
        # Fri 22:00 → Sat 02:00 local time
        window = RentalWindow(
            pickup=datetime(2025, 1, 10, 22, tzinfo=ist),
            dropoff=datetime(2025, 1, 11, 2, tzinfo=ist),
        )
        assert _quote(split_tariff, window).base_price == Decimal("500.00")

    def test_zoned_window_over_weekend_boundary(self, split_tariff):
        kolkata = ZoneInfo("Asia/Kolkata")
        # Fri 21:00 → Sat 01:30 local: 3 weekday hours, 1.5 weekend billed as 2 (rounded up after dropoff)
        window = RentalWindow(
            pickup=datetime(2025, 1, 10, 21, tzinfo=kolkata),
            dropoff=datetime(2025, 1, 11, 1, 30, tzinfo=kolkata),
        )
        q = _quote(split_tariff, window)
        assert q.duration_hours == Decimal("4.5")
        assert q.weekday_hours == Decimal("3")
        assert q.weekend_hours == Decimal("2")
        assert q.base_price == Decimal("600.00")
        assert q.has_weekend is True

    def test_dst_jump_is_real_time(self, split_tariff):
        london = ZoneInfo("Europe/London")
        # Sat 22:00 GMT → Sun 06:00 BST is 7 real hours, all on the weekend
        window = RentalWindow(
            pickup=datetime(2025, 3, 29, 22, tzinfo=london),
            dropoff=datetime(2025, 3, 30, 6, tzinfo=london),
        )
        q = _quote(split_tariff, window)
        assert q.duration_hours == Decimal("7")
        assert q.weekend_hours == Decimal("7")
        assert q.base_price == Decimal("1050.00")
