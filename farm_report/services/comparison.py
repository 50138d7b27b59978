"""Period-over-period trend classification."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from farm_report.constants.error_ids import ErrorIds
from farm_report.logger import get_logger
from farm_report.schemas.reporting import AggregationResult, TrendClassification, TrendResult
from farm_report.utils.exceptions import MetricNotFoundError

logger = get_logger(__name__)

# Changes within +/- this many percent are reported as stable
STABLE_BAND_PERCENT = Decimal("5")

_ZERO = Decimal("0")


def classify_trend(metric: str, current: Decimal, previous: Decimal) -> TrendResult:
    """Classify the change of one metric from ``previous`` to ``current``."""
    if previous == _ZERO:
        return TrendResult(
            metric=metric,
            current=current,
            previous=previous,
            classification=TrendClassification.NEW,
        )

    change_percent = (current - previous) / previous * 100
    if change_percent > STABLE_BAND_PERCENT:
        classification = TrendClassification.UP
    elif change_percent < -STABLE_BAND_PERCENT:
        classification = TrendClassification.DOWN
    else:
        classification = TrendClassification.STABLE

    return TrendResult(
        metric=metric,
        current=current,
        previous=previous,
        classification=classification,
        change_percent=change_percent,
    )


class ComparativeAnalyzer:
    """Builds trend results for a caller-chosen list of metrics."""

    def compare(
        self,
        current: AggregationResult,
        previous: AggregationResult,
        metric_names: Sequence[str],
    ) -> tuple[TrendResult, ...]:
        # All names are checked first so a bad request yields no partial results
        missing = [name for name in metric_names if name not in current.metrics]
        if missing:
            logger.error(
                "Requested metric not in current aggregation",
                error_id=ErrorIds.METRIC_NOT_FOUND,
                missing=missing,
                available=sorted(current.metrics),
            )
            raise MetricNotFoundError(missing[0], list(current.metrics))

        return tuple(
            classify_trend(name, current.metrics[name], previous.metrics.get(name, _ZERO))
            for name in metric_names
        )
