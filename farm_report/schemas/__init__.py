from farm_report.schemas.base import FrozenModel
from farm_report.schemas.reporting import (
    AggregationResult,
    ComparisonBasis,
    DateRange,
    DistributionGroup,
    Metric,
    MonthlyBucket,
    RankedEntry,
    RangePreset,
    Report,
    TrendClassification,
    TrendResult,
)

__all__ = [
    "AggregationResult",
    "ComparisonBasis",
    "DateRange",
    "DistributionGroup",
    "FrozenModel",
    "Metric",
    "MonthlyBucket",
    "RankedEntry",
    "RangePreset",
    "Report",
    "TrendClassification",
    "TrendResult",
]
