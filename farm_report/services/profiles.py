"""Aggregation profiles for each kind of farm record.

A profile declares which field dates a record, which summary metrics,
distributions and rankings are computed, and which field feeds the monthly
rollup. The aggregator itself knows nothing about crops or expenses.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from farm_report.config import settings
from farm_report.utils.exceptions import ReportError


class MetricAggregate(str, Enum):
    """How per-record values of a metric are combined."""

    SUM = "sum"
    AVERAGE = "avg"


@dataclass(frozen=True)
class FieldFilter:
    """Keeps records whose ``field`` (compared case-insensitively) is in ``values``."""

    field: str
    values: frozenset[str]


@dataclass(frozen=True)
class MetricDefinition:
    """Summary metric over the records in range.

    No factors counts records; one factor uses that field; several factors use
    their per-record product. Records are skipped when they fail ``where`` or
    when any ``positive_fields`` value is not above zero. ``AVERAGE`` divides
    by the number of records kept and is 0 when none are.
    """

    name: str
    factors: tuple[str, ...] = ()
    where: FieldFilter | None = None
    unit: str | None = None
    aggregate: MetricAggregate = MetricAggregate.SUM
    positive_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.aggregate is MetricAggregate.AVERAGE and not self.factors:
            raise ReportError(f"Average metric {self.name} needs at least one factor")


@dataclass(frozen=True)
class DerivedMetric:
    """Metric computed from already aggregated metrics of the same period."""

    name: str
    compute: Callable[[Mapping[str, Decimal]], Decimal]
    unit: str | None = None


@dataclass(frozen=True)
class DistributionDefinition:
    name: str
    key_field: str
    value_field: str


@dataclass(frozen=True)
class RankingDefinition:
    """Per-record league table, e.g. crops ordered by projected profit.

    ``values`` are evaluated for each record on its own (factors only,
    ``aggregate`` is ignored), then ``derived`` on top of them. Entries are
    ordered by ``order_by`` descending, ties by label. ``positive_only`` drops
    entries whose ``order_by`` value is not above zero.
    """

    name: str
    label_field: str
    values: tuple[MetricDefinition, ...]
    order_by: str
    derived: tuple[DerivedMetric, ...] = ()
    group_field: str | None = None
    limit: int | None = None
    positive_only: bool = False

    def __post_init__(self) -> None:
        names = {m.name for m in self.values} | {d.name for d in self.derived}
        if self.order_by not in names:
            raise ReportError(f"Ranking {self.name} orders by unknown value: {self.order_by}")
        if self.limit is not None and self.limit < 1:
            raise ReportError(f"Ranking {self.name} limit must be at least 1")


@dataclass(frozen=True)
class ReportProfile:
    kind: str
    date_field: str
    monthly_value_field: str
    metrics: tuple[MetricDefinition, ...]
    derived: tuple[DerivedMetric, ...] = ()
    distributions: tuple[DistributionDefinition, ...] = ()
    rankings: tuple[RankingDefinition, ...] = ()
    default_metric_names: tuple[str, ...] = ()

    @property
    def metric_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.metrics) + tuple(d.name for d in self.derived)

    def trend_metric_names(self) -> tuple[str, ...]:
        return self.default_metric_names or self.metric_names


# Top crops by expense are capped like the dashboard's table
TOP_CROPS_LIMIT = 5

_CROP_EXPENSES = MetricDefinition("total_expenses", ("total_expenses",), unit="currency")
_PROJECTED_REVENUE = MetricDefinition("projected_revenue", ("expected_yield", "market_price"), unit="currency")
_PROJECTED_PROFIT = DerivedMetric(
    "projected_profit",
    lambda m: m["projected_revenue"] - m["total_expenses"],
    unit="currency",
)


def _status_filter(statuses: list[str]) -> FieldFilter:
    return FieldFilter("status", frozenset(s.upper() for s in statuses))


def crop_profile(
    active_statuses: list[str] | None = None,
    harvested_statuses: list[str] | None = None,
) -> ReportProfile:
    active = active_statuses if active_statuses is not None else settings.active_crop_statuses
    harvested = _status_filter(
        harvested_statuses if harvested_statuses is not None else settings.harvested_crop_statuses
    )
    return ReportProfile(
        kind="crops",
        date_field="planting_date",
        monthly_value_field="area",
        metrics=(
            MetricDefinition("total_crops"),
            MetricDefinition("active_crops", where=_status_filter(active)),
            MetricDefinition("total_area", ("area",)),
            _CROP_EXPENSES,
            _PROJECTED_REVENUE,
            MetricDefinition("harvested_count", where=harvested, positive_fields=("yield",)),
            MetricDefinition("total_yield", ("yield",), where=harvested, positive_fields=("yield",)),
            MetricDefinition(
                "avg_yield",
                ("yield",),
                where=harvested,
                aggregate=MetricAggregate.AVERAGE,
                positive_fields=("yield",),
            ),
        ),
        derived=(_PROJECTED_PROFIT,),
        distributions=(
            DistributionDefinition("by_type", "type", "area"),
            DistributionDefinition("by_status", "status", "area"),
        ),
        rankings=(
            RankingDefinition(
                "performance",
                label_field="name",
                group_field="type",
                values=(_PROJECTED_REVENUE, _CROP_EXPENSES),
                derived=(_PROJECTED_PROFIT,),
                order_by="projected_profit",
            ),
            RankingDefinition(
                "top_by_expense",
                label_field="name",
                group_field="type",
                values=(_CROP_EXPENSES,),
                order_by="total_expenses",
                limit=TOP_CROPS_LIMIT,
                positive_only=True,
            ),
        ),
        default_metric_names=("total_crops", "active_crops", "total_area", "projected_revenue"),
    )


def expense_profile() -> ReportProfile:
    return ReportProfile(
        kind="expenses",
        date_field="date",
        monthly_value_field="amount",
        metrics=(
            MetricDefinition("expense_count"),
            MetricDefinition("total_expenses", ("amount",), unit="currency"),
        ),
        distributions=(
            DistributionDefinition("by_category", "category", "amount"),
            DistributionDefinition("by_crop", "crop_id", "amount"),
        ),
    )


def livestock_expense_profile() -> ReportProfile:
    return ReportProfile(
        kind="livestock_expenses",
        date_field="date",
        monthly_value_field="amount",
        metrics=(
            MetricDefinition("expense_count"),
            MetricDefinition("total_expenses", ("amount",), unit="currency"),
        ),
        distributions=(
            DistributionDefinition("by_category", "category", "amount"),
            DistributionDefinition("by_flock", "flock_id", "amount"),
        ),
    )


_PROFILE_FACTORIES: dict[str, Callable[[], ReportProfile]] = {
    "crops": crop_profile,
    "expenses": expense_profile,
    "livestock_expenses": livestock_expense_profile,
}


def get_profile(kind: str) -> ReportProfile:
    """Look up the built-in profile for a record kind."""
    try:
        return _PROFILE_FACTORIES[kind]()
    except KeyError:
        raise ReportError(f"Unsupported report kind: {kind}") from None
