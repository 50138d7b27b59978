"""Tests for period-over-period trend classification."""

from decimal import Decimal

import pytest

from farm_report.schemas.reporting import AggregationResult, TrendClassification
from farm_report.services.comparison import STABLE_BAND_PERCENT, ComparativeAnalyzer, classify_trend
from farm_report.utils.exceptions import MetricNotFoundError


def _aggregation(**metrics) -> AggregationResult:
    return AggregationResult(metrics={name: Decimal(str(value)) for name, value in metrics.items()})


@pytest.fixture
def analyzer() -> ComparativeAnalyzer:
    return ComparativeAnalyzer()


class TestClassifyTrend:
    @pytest.mark.parametrize(
        ("current", "previous", "expected_change", "expected_class"),
        [
            (120, 100, Decimal("20"), TrendClassification.UP),
            (90, 100, Decimal("-10"), TrendClassification.DOWN),
            (101, 100, Decimal("1"), TrendClassification.STABLE),
            (105, 100, Decimal("5"), TrendClassification.STABLE),
            (95, 100, Decimal("-5"), TrendClassification.STABLE),
            (100, 100, Decimal("0"), TrendClassification.STABLE),
        ],
    )
    def test_classification(self, current, previous, expected_change, expected_class):
        result = classify_trend("total_expenses", Decimal(current), Decimal(previous))
        assert result.change_percent == expected_change
        assert result.classification is expected_class

    def test_band_is_five_percent(self):
        assert STABLE_BAND_PERCENT == Decimal("5")
        assert classify_trend("m", Decimal("105.01"), Decimal("100")).classification is TrendClassification.UP
        assert classify_trend("m", Decimal("94.99"), Decimal("100")).classification is TrendClassification.DOWN

    @pytest.mark.parametrize("current", [0, 50, -3])
    def test_zero_previous_is_new(self, current):
        result = classify_trend("m", Decimal(current), Decimal("0"))
        assert result.classification is TrendClassification.NEW
        assert result.change_percent is None


class TestComparativeAnalyzer:
    def test_order_follows_requested_names(self, analyzer):
        current = _aggregation(a=1, b=2, c=3)
        previous = _aggregation(a=1, b=2, c=3)
        trends = analyzer.compare(current, previous, ["c", "a", "b"])
        assert [t.metric for t in trends] == ["c", "a", "b"]

    def test_values_are_carried(self, analyzer):
        trends = analyzer.compare(_aggregation(total=120), _aggregation(total=100), ["total"])
        assert len(trends) == 1
        assert (trends[0].current, trends[0].previous) == (Decimal("120"), Decimal("100"))
        assert trends[0].classification is TrendClassification.UP

    def test_metric_missing_from_previous_is_new(self, analyzer):
        trends = analyzer.compare(_aggregation(total=10), _aggregation(), ["total"])
        assert trends[0].previous == Decimal("0")
        assert trends[0].classification is TrendClassification.NEW

    def test_metric_missing_from_current_fails(self, analyzer):
        with pytest.raises(MetricNotFoundError) as exc_info:
            analyzer.compare(_aggregation(a=1), _aggregation(a=1, ghost=4), ["a", "ghost"])
        assert exc_info.value.metric == "ghost"
        assert exc_info.value.available == ["a"]

    def test_empty_request_gives_empty_result(self, analyzer):
        assert analyzer.compare(_aggregation(a=1), _aggregation(a=1), []) == ()
