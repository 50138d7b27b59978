"""Date range presets and comparison periods for reports."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from farm_report.constants.error_ids import ErrorIds
from farm_report.logger import get_logger
from farm_report.schemas.reporting import ComparisonBasis, DateRange, RangePreset
from farm_report.utils.exceptions import InvalidRangeError

logger = get_logger(__name__)

RangeSpec = DateRange | RangePreset | str


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _month_end(value: date) -> date:
    next_month = value.replace(day=28) + timedelta(days=4)
    return next_month.replace(day=1) - timedelta(days=1)


def _add_months(value: date, months: int) -> date:
    year = value.year + (value.month - 1 + months) // 12
    month = (value.month - 1 + months) % 12 + 1
    day = min(value.day, _month_end(date(year, month, 1)).day)
    return date(year, month, day)


def _parse_preset(token: RangePreset | str) -> RangePreset:
    if isinstance(token, RangePreset):
        return token
    if not isinstance(token, str):
        logger.warning("Unknown date range preset", error_id=ErrorIds.UNKNOWN_PRESET, preset=repr(token))
        raise InvalidRangeError(f"Unsupported range spec: {token!r}")
    try:
        return RangePreset(token.strip().lower())
    except ValueError:
        logger.warning("Unknown date range preset", error_id=ErrorIds.UNKNOWN_PRESET, preset=token)
        raise InvalidRangeError(f"Unsupported range preset: {token}") from None


def _check_explicit(spec: DateRange) -> DateRange:
    # model_construct() skips validation, so the invariant is re-checked here
    if spec.start > spec.end:
        logger.warning(
            "Inverted date range",
            error_id=ErrorIds.INVALID_RANGE,
            start=spec.start.isoformat(),
            end=spec.end.isoformat(),
        )
        raise InvalidRangeError(f"start ({spec.start}) must not be after end ({spec.end})")
    return spec


class DateRangeResolver:
    """Turns range specs into concrete date windows.

    Presets are evaluated against the ``now`` passed in, so resolution is
    deterministic for a fixed clock. Every preset except ``ly`` ends on
    ``now``; ``ly`` is the last fully elapsed calendar year.
    """

    def resolve(self, spec: RangeSpec, now: date | datetime) -> DateRange:
        if isinstance(spec, DateRange):
            return _check_explicit(spec)

        today = _as_date(now)
        preset = _parse_preset(spec)

        if preset is RangePreset.LAST_7_DAYS:
            return DateRange(start=today - timedelta(days=7), end=today)
        if preset is RangePreset.LAST_30_DAYS:
            return DateRange(start=today - timedelta(days=30), end=today)
        if preset is RangePreset.LAST_3_MONTHS:
            return DateRange(start=_add_months(today, -3), end=today)
        if preset is RangePreset.LAST_6_MONTHS:
            return DateRange(start=_add_months(today, -6), end=today)
        if preset is RangePreset.YEAR_TO_DATE:
            return DateRange(start=date(today.year, 1, 1), end=today)
        # LAST_YEAR
        return DateRange(start=date(today.year - 1, 1, 1), end=date(today.year - 1, 12, 31))

    def previous_period_of(self, period: DateRange) -> DateRange:
        """Window of equal duration ending the day before ``period.start``."""
        end = period.start - timedelta(days=1)
        return DateRange(start=end - period.duration, end=end)

    def comparison_period(
        self,
        period: DateRange,
        previous: ComparisonBasis | RangeSpec | None,
        now: date | datetime,
    ) -> DateRange:
        """Resolve the baseline a report compares ``period`` against.

        ``None`` and ``ComparisonBasis.ADJACENT`` give the adjacent window of
        equal length; ``PRIOR_YEAR`` shifts both bounds back twelve months;
        any other spec is resolved exactly like a current-period spec.
        """
        if previous is None:
            return self.previous_period_of(period)
        if isinstance(previous, str) and not isinstance(previous, RangePreset):
            try:
                previous = ComparisonBasis(previous)
            except ValueError:
                pass
        if previous is ComparisonBasis.ADJACENT:
            return self.previous_period_of(period)
        if previous is ComparisonBasis.PRIOR_YEAR:
            return DateRange(start=_add_months(period.start, -12), end=_add_months(period.end, -12))
        return self.resolve(previous, now)
