"""Pydantic schemas for farm financial reports."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, Field, WrapSerializer, model_validator

from farm_report.schemas.base import FrozenModel, read_only_mapping, serialize_mapping
from farm_report.utils.exceptions import InvalidRangeError, MetricNotFoundError


class RangePreset(str, Enum):
    """Named shorthands for commonly requested date ranges."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_3_MONTHS = "3m"
    LAST_6_MONTHS = "6m"
    YEAR_TO_DATE = "ytd"
    LAST_YEAR = "ly"


class ComparisonBasis(str, Enum):
    """How the baseline period for trend comparison is derived."""

    ADJACENT = "adjacent"
    PRIOR_YEAR = "prior_year"


class TrendClassification(str, Enum):
    """Period-over-period trend of a metric."""

    NEW = "new"
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class DateRange(FrozenModel):
    """Inclusive date window."""

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> DateRange:
        if self.start > self.end:
            raise InvalidRangeError(f"start ({self.start}) must not be after end ({self.end})")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


class Metric(FrozenModel):
    """Named numeric observation for one reporting period."""

    name: str
    value: Decimal
    unit: str | None = None


class DistributionGroup(FrozenModel):
    """One group of a distribution (e.g. all expenses of one category)."""

    key: str
    count: int = Field(ge=0)
    sum: Decimal
    share_percent: Decimal


class MonthlyBucket(FrozenModel):
    """Records of one calendar month."""

    month: str = Field(pattern=r"^\d{4}-\d{2}$")
    total: Decimal
    count: int = Field(ge=0)


MetricMap = Annotated[dict[str, Decimal], AfterValidator(read_only_mapping), WrapSerializer(serialize_mapping)]
UnitMap = Annotated[dict[str, str], AfterValidator(read_only_mapping), WrapSerializer(serialize_mapping)]


class RankedEntry(FrozenModel):
    """One record of a ranking, with the values computed for it."""

    key: str
    group: str | None = None
    values: MetricMap
    units: UnitMap = Field(default_factory=dict, validate_default=True)


DistributionMap = Annotated[
    dict[str, tuple[DistributionGroup, ...]],
    AfterValidator(read_only_mapping),
    WrapSerializer(serialize_mapping),
]
RankingMap = Annotated[
    dict[str, tuple[RankedEntry, ...]],
    AfterValidator(read_only_mapping),
    WrapSerializer(serialize_mapping),
]


class AggregationResult(FrozenModel):
    """Summary statistics of one record set over one period.

    Mapping fields are read-only views; a result never changes after it is built.
    """

    metrics: MetricMap
    units: UnitMap = Field(default_factory=dict, validate_default=True)
    distributions: DistributionMap = Field(default_factory=dict, validate_default=True)
    rankings: RankingMap = Field(default_factory=dict, validate_default=True)
    monthly: tuple[MonthlyBucket, ...] = ()
    record_count: int = Field(default=0, ge=0)

    def get_metric(self, name: str) -> Decimal:
        try:
            return self.metrics[name]
        except KeyError:
            raise MetricNotFoundError(name, list(self.metrics)) from None

    def as_metrics(self) -> tuple[Metric, ...]:
        return tuple(
            Metric(name=name, value=value, unit=self.units.get(name)) for name, value in self.metrics.items()
        )


class TrendResult(FrozenModel):
    """Comparison of one metric between the current and previous period."""

    metric: str
    current: Decimal
    previous: Decimal
    classification: TrendClassification
    # None when the previous value is zero (classification "new")
    change_percent: Decimal | None = None


class Report(FrozenModel):
    """Comparative report for one record kind."""

    kind: str
    period: DateRange
    previous_period: DateRange
    aggregation: AggregationResult
    previous_aggregation: AggregationResult
    trends: tuple[TrendResult, ...]
