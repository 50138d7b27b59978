"""Services package."""

from farm_report.services.aggregation import RecordAggregator
from farm_report.services.comparison import STABLE_BAND_PERCENT, ComparativeAnalyzer, classify_trend
from farm_report.services.date_ranges import DateRangeResolver, RangeSpec
from farm_report.services.profiles import (
    DerivedMetric,
    DistributionDefinition,
    FieldFilter,
    MetricAggregate,
    MetricDefinition,
    RankingDefinition,
    ReportProfile,
    crop_profile,
    expense_profile,
    get_profile,
    livestock_expense_profile,
)
from farm_report.services.reporting import FetchRecords, ReportAssembler

__all__ = [
    "ComparativeAnalyzer",
    "DateRangeResolver",
    "DerivedMetric",
    "DistributionDefinition",
    "FetchRecords",
    "FieldFilter",
    "MetricAggregate",
    "MetricDefinition",
    "RankingDefinition",
    "RangeSpec",
    "RecordAggregator",
    "ReportAssembler",
    "ReportProfile",
    "STABLE_BAND_PERCENT",
    "classify_trend",
    "crop_profile",
    "expense_profile",
    "get_profile",
    "livestock_expense_profile",
]
