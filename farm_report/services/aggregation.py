"""Aggregation of raw farm records into period summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from farm_report.config import settings
from farm_report.constants.error_ids import ErrorIds
from farm_report.logger import get_logger, log_timing
from farm_report.schemas.reporting import (
    AggregationResult,
    DateRange,
    DistributionGroup,
    MonthlyBucket,
    RankedEntry,
)
from farm_report.services.profiles import (
    DistributionDefinition,
    MetricAggregate,
    MetricDefinition,
    RankingDefinition,
    ReportProfile,
)
from farm_report.utils.exceptions import ReportError

logger = get_logger(__name__)

_ZERO = Decimal("0")
UNKNOWN_KEY = "Unknown"


def _read_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _to_decimal(value: Any, field_name: str) -> Decimal:
    """Numeric field as Decimal; missing values count as zero."""
    if value is None or value == "":
        return _ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ReportError(f"Non-numeric value for {field_name}: {value!r}") from None
    if not amount.is_finite():
        raise ReportError(f"Non-finite value for {field_name}: {value!r}")
    return amount


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            if len(value) == 10:
                return date.fromisoformat(value)
            return datetime.fromisoformat(value).date()
        except ValueError:
            return None
    return None


def _group_key(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if value is None or value == "":
        return UNKNOWN_KEY
    return str(value)


def _quantize_percent(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"))


def _passes_filters(definition: MetricDefinition, record: Any) -> bool:
    if definition.where is not None:
        value = _read_field(record, definition.where.field)
        if value is None or _group_key(value).upper() not in definition.where.values:
            return False
    return all(
        _to_decimal(_read_field(record, field), field) > _ZERO for field in definition.positive_fields
    )


def _record_value(definition: MetricDefinition, record: Any) -> Decimal:
    """Per-record value of a metric: 1 for counts, else the product of its factors."""
    if not definition.factors:
        return Decimal("1")
    product = Decimal("1")
    for factor in definition.factors:
        product *= _to_decimal(_read_field(record, factor), factor)
    return product


@dataclass(frozen=True)
class _DatedRecord:
    on: date
    record: Any


class RecordAggregator:
    """Reduces a record set to the summary a profile declares.

    Aggregation is a pure function of the records and the period: the same
    input always yields the same AggregationResult.
    """

    def __init__(self, profile: ReportProfile, monthly_window: int | None = None) -> None:
        window = settings.monthly_bucket_window if monthly_window is None else monthly_window
        if window < 1:
            raise ReportError("monthly_window must be at least 1")
        self.profile = profile
        self.monthly_window = window

    def aggregate(self, records: Iterable[Any], period: DateRange) -> AggregationResult:
        with log_timing(
            "aggregate_records",
            logger=logger,
            level="debug",
            kind=self.profile.kind,
            start=period.start.isoformat(),
            end=period.end.isoformat(),
        ) as timing:
            in_range = self._select(records, period)

            metrics: dict[str, Decimal] = {
                definition.name: self._metric_value(definition, in_range) for definition in self.profile.metrics
            }
            for derived in self.profile.derived:
                metrics[derived.name] = derived.compute(metrics)

            units = {
                definition.name: definition.unit
                for definition in (*self.profile.metrics, *self.profile.derived)
                if definition.unit
            }
            distributions = {
                definition.name: self._distribution(definition, in_range)
                for definition in self.profile.distributions
            }
            rankings = {
                definition.name: self._ranking(definition, in_range) for definition in self.profile.rankings
            }
            timing["record_count"] = len(in_range)

            return AggregationResult(
                metrics=metrics,
                units=units,
                distributions=distributions,
                rankings=rankings,
                monthly=self._monthly(in_range),
                record_count=len(in_range),
            )

    def _select(self, records: Iterable[Any], period: DateRange) -> list[_DatedRecord]:
        selected: list[_DatedRecord] = []
        date_field = self.profile.date_field
        for record in records:
            raw = _read_field(record, date_field)
            record_date = _to_date(raw)
            if record_date is None:
                logger.debug(
                    "Record skipped, date unreadable",
                    error_id=ErrorIds.RECORD_DATE_UNREADABLE,
                    kind=self.profile.kind,
                    field=date_field,
                    value=repr(raw),
                )
                continue
            if period.contains(record_date):
                selected.append(_DatedRecord(on=record_date, record=record))
        return selected

    def _metric_value(self, definition: MetricDefinition, in_range: list[_DatedRecord]) -> Decimal:
        total = _ZERO
        matched = 0
        for item in in_range:
            if not _passes_filters(definition, item.record):
                continue
            matched += 1
            total += _record_value(definition, item.record)
        if definition.aggregate is MetricAggregate.AVERAGE:
            return total / matched if matched else _ZERO
        return total

    def _ranking(self, definition: RankingDefinition, in_range: list[_DatedRecord]) -> tuple[RankedEntry, ...]:
        units = {
            value.name: value.unit for value in (*definition.values, *definition.derived) if value.unit
        }
        entries: list[RankedEntry] = []
        for item in in_range:
            values = {value.name: _record_value(value, item.record) for value in definition.values}
            for derived in definition.derived:
                values[derived.name] = derived.compute(values)
            if definition.positive_only and values[definition.order_by] <= _ZERO:
                continue
            group = _read_field(item.record, definition.group_field) if definition.group_field else None
            entries.append(
                RankedEntry(
                    key=_group_key(_read_field(item.record, definition.label_field)),
                    group=None if group is None else _group_key(group),
                    values=values,
                    units=units,
                )
            )

        entries.sort(key=lambda entry: (-entry.values[definition.order_by], entry.key))
        return tuple(entries[: definition.limit])

    def _distribution(
        self, definition: DistributionDefinition, in_range: list[_DatedRecord]
    ) -> tuple[DistributionGroup, ...]:
        counts: dict[str, int] = {}
        sums: dict[str, Decimal] = {}
        for item in in_range:
            key = _group_key(_read_field(item.record, definition.key_field))
            counts[key] = counts.get(key, 0) + 1
            sums[key] = sums.get(key, _ZERO) + _to_decimal(
                _read_field(item.record, definition.value_field), definition.value_field
            )

        grand_total = sum(sums.values(), _ZERO)
        ordered = sorted(counts, key=lambda key: (-counts[key], key))
        return tuple(
            DistributionGroup(
                key=key,
                count=counts[key],
                sum=sums[key],
                share_percent=_quantize_percent(sums[key] / grand_total * 100) if grand_total else _ZERO,
            )
            for key in ordered
        )

    def _monthly(self, in_range: list[_DatedRecord]) -> tuple[MonthlyBucket, ...]:
        value_field = self.profile.monthly_value_field
        totals: dict[str, Decimal] = {}
        counts: dict[str, int] = {}
        for item in in_range:
            month = f"{item.on.year:04d}-{item.on.month:02d}"
            totals[month] = totals.get(month, _ZERO) + _to_decimal(_read_field(item.record, value_field), value_field)
            counts[month] = counts.get(month, 0) + 1

        months = sorted(totals, reverse=True)[: self.monthly_window]
        return tuple(MonthlyBucket(month=month, total=totals[month], count=counts[month]) for month in months)
