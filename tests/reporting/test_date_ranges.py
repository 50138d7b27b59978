"""Tests for date range presets and comparison periods."""

from datetime import date, datetime

import pytest

from farm_report.schemas.reporting import ComparisonBasis, DateRange, RangePreset
from farm_report.services.date_ranges import DateRangeResolver, _add_months
from farm_report.utils.exceptions import InvalidRangeError

NOW = date(2025, 6, 15)


@pytest.fixture
def resolver() -> DateRangeResolver:
    return DateRangeResolver()


class TestPresetResolution:
    def test_last_7_days(self, resolver):
        period = resolver.resolve("7d", NOW)
        assert period == DateRange(start=date(2025, 6, 8), end=date(2025, 6, 15))

    def test_last_30_days(self, resolver):
        period = resolver.resolve(RangePreset.LAST_30_DAYS, NOW)
        assert period == DateRange(start=date(2025, 5, 16), end=NOW)

    def test_last_3_and_6_months(self, resolver):
        assert resolver.resolve("3m", NOW).start == date(2025, 3, 15)
        assert resolver.resolve("6m", NOW).start == date(2024, 12, 15)
        assert resolver.resolve("6m", NOW).end == NOW

    def test_month_presets_clamp_to_month_length(self, resolver):
        period = resolver.resolve("3m", date(2025, 5, 31))
        assert period.start == date(2025, 2, 28)

    def test_year_to_date(self, resolver):
        assert resolver.resolve("ytd", NOW) == DateRange(start=date(2025, 1, 1), end=NOW)

    def test_last_year_is_closed_calendar_year(self, resolver):
        period = resolver.resolve("ly", NOW)
        assert period == DateRange(start=date(2024, 1, 1), end=date(2024, 12, 31))

    def test_datetime_now_uses_its_date(self, resolver):
        period = resolver.resolve("7d", datetime(2025, 6, 15, 23, 59, 59))
        assert period == DateRange(start=date(2025, 6, 8), end=date(2025, 6, 15))

    def test_token_is_case_insensitive(self, resolver):
        assert resolver.resolve("YTD", NOW).start == date(2025, 1, 1)

    def test_unknown_preset_rejected(self, resolver):
        with pytest.raises(InvalidRangeError, match="Unsupported range preset"):
            resolver.resolve("2w", NOW)

    @pytest.mark.parametrize("spec", [7, None, date(2025, 1, 1)])
    def test_non_string_spec_rejected(self, resolver, spec):
        with pytest.raises(InvalidRangeError, match="Unsupported range spec"):
            resolver.resolve(spec, NOW)

    @pytest.mark.parametrize("preset", list(RangePreset))
    def test_every_preset_is_ordered(self, resolver, preset):
        period = resolver.resolve(preset, NOW)
        assert period.start <= period.end


class TestExplicitRanges:
    def test_explicit_range_passes_through(self, resolver):
        explicit = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 31))
        assert resolver.resolve(explicit, NOW) is explicit

    def test_single_day_range_is_valid(self, resolver):
        explicit = DateRange(start=NOW, end=NOW)
        assert resolver.resolve(explicit, NOW).duration.days == 0

    def test_inverted_range_cannot_be_built(self):
        with pytest.raises(InvalidRangeError):
            DateRange(start=date(2025, 2, 1), end=date(2025, 1, 1))

    def test_unvalidated_inverted_range_rejected(self, resolver):
        inverted = DateRange.model_construct(start=date(2025, 2, 1), end=date(2025, 1, 1))
        with pytest.raises(InvalidRangeError):
            resolver.resolve(inverted, NOW)


class TestPreviousPeriod:
    def test_adjacent_period_has_same_duration(self, resolver):
        period = DateRange(start=date(2025, 6, 8), end=date(2025, 6, 15))
        previous = resolver.previous_period_of(period)
        assert previous == DateRange(start=date(2025, 5, 31), end=date(2025, 6, 7))
        assert previous.duration == period.duration

    def test_single_day_period(self, resolver):
        previous = resolver.previous_period_of(DateRange(start=NOW, end=NOW))
        assert previous == DateRange(start=date(2025, 6, 14), end=date(2025, 6, 14))

    @pytest.mark.parametrize("preset", list(RangePreset))
    def test_adjacent_period_ends_day_before_start(self, resolver, preset):
        period = resolver.resolve(preset, NOW)
        previous = resolver.previous_period_of(period)
        assert (period.start - previous.end).days == 1
        assert previous.duration == period.duration

    def test_comparison_defaults_to_adjacent(self, resolver):
        period = DateRange(start=date(2025, 3, 1), end=date(2025, 3, 31))
        assert resolver.comparison_period(period, None, NOW) == resolver.previous_period_of(period)
        assert resolver.comparison_period(period, "adjacent", NOW) == resolver.previous_period_of(period)

    def test_prior_year_basis(self, resolver):
        period = DateRange(start=date(2025, 3, 1), end=date(2025, 3, 31))
        previous = resolver.comparison_period(period, ComparisonBasis.PRIOR_YEAR, NOW)
        assert previous == DateRange(start=date(2024, 3, 1), end=date(2024, 3, 31))

    def test_prior_year_basis_clamps_leap_day(self, resolver):
        period = DateRange(start=date(2024, 2, 1), end=date(2024, 2, 29))
        previous = resolver.comparison_period(period, "prior_year", NOW)
        assert previous == DateRange(start=date(2023, 2, 1), end=date(2023, 2, 28))

    def test_explicit_previous_spec(self, resolver):
        period = resolver.resolve("ytd", NOW)
        assert resolver.comparison_period(period, "ly", NOW) == DateRange(
            start=date(2024, 1, 1), end=date(2024, 12, 31)
        )


def test_add_months_crosses_year_boundary():
    assert _add_months(date(2025, 1, 31), -2) == date(2024, 11, 30)
    assert _add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
