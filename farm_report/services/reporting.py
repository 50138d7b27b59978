"""Comparative report generation for farm records."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, datetime
from typing import Any

from farm_report.config import settings
from farm_report.constants.error_ids import ErrorIds
from farm_report.logger import async_log_timing, get_logger, log_exception
from farm_report.schemas.reporting import ComparisonBasis, DateRange, Report
from farm_report.services.aggregation import RecordAggregator
from farm_report.services.comparison import ComparativeAnalyzer
from farm_report.services.date_ranges import DateRangeResolver, RangeSpec
from farm_report.services.profiles import ReportProfile, get_profile
from farm_report.utils.exceptions import FetchFailedError

logger = get_logger(__name__)

FetchRecords = Callable[[DateRange], Awaitable[Sequence[Any]] | Sequence[Any]]

CURRENT_PERIOD = "current"
PREVIOUS_PERIOD = "previous"


def _is_async_callable(func: Any) -> bool:
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(getattr(func, "__call__", None))


class ReportAssembler:
    """Generates a comparative report for one record kind.

    The record source is passed to every ``generate`` call; the assembler
    holds no connection and no state between calls.

    ``fetch_timeout`` bounds each fetch. A synchronous source runs in a worker
    thread, which cannot be interrupted: on timeout the report fails with
    FetchFailedError but the thread keeps running until the source returns.

    Usage:
        assembler = ReportAssembler("expenses")
        report = await assembler.generate("30d", ["total_expenses"], repository.fetch_expenses)
    """

    def __init__(
        self,
        profile: ReportProfile | str,
        *,
        clock: Callable[[], date | datetime] = date.today,
        monthly_window: int | None = None,
        concurrent_fetch: bool | None = None,
        fetch_timeout: float | None = None,
    ) -> None:
        self.profile = get_profile(profile) if isinstance(profile, str) else profile
        self.clock = clock
        self.aggregator = RecordAggregator(self.profile, monthly_window)
        self.concurrent_fetch = settings.concurrent_fetch if concurrent_fetch is None else concurrent_fetch
        self.fetch_timeout = settings.fetch_timeout_seconds if fetch_timeout is None else fetch_timeout
        self.resolver = DateRangeResolver()
        self.analyzer = ComparativeAnalyzer()

    async def generate(
        self,
        spec: RangeSpec | None,
        metric_names: Sequence[str] | None,
        fetch_records: FetchRecords,
        *,
        previous: ComparisonBasis | RangeSpec | None = None,
    ) -> Report:
        """Build the report for ``spec`` compared against its baseline period.

        Args:
            spec: Current period as preset token or explicit DateRange
                (None uses the configured default preset)
            metric_names: Metrics to compare, in output order
                (None uses the profile's default trend metrics)
            fetch_records: Record source called once per period
            previous: Baseline period; adjacent window of equal length by default

        Raises:
            InvalidRangeError: If a range is inverted or a preset unknown
            FetchFailedError: If either record fetch fails
            MetricNotFoundError: If a requested metric is not aggregated
            asyncio.CancelledError: If the caller cancels generation. It is re-raised
                unchanged, so an enclosing asyncio.timeout() still reports TimeoutError
        """
        spec = settings.default_range_preset if spec is None else spec
        names = tuple(metric_names) if metric_names is not None else self.profile.trend_metric_names()

        try:
            async with async_log_timing("generate_report", logger=logger, kind=self.profile.kind) as timing:
                now = self.clock()
                period = self.resolver.resolve(spec, now)
                previous_period = self.resolver.comparison_period(period, previous, now)
                timing["start"] = period.start.isoformat()
                timing["end"] = period.end.isoformat()

                current_records, previous_records = await self._fetch_periods(
                    fetch_records, period, previous_period
                )

                aggregation = self.aggregator.aggregate(current_records, period)
                previous_aggregation = self.aggregator.aggregate(previous_records, previous_period)
                trends = self.analyzer.compare(aggregation, previous_aggregation, names)
                timing["record_count"] = aggregation.record_count
                timing["previous_record_count"] = previous_aggregation.record_count

                return Report(
                    kind=self.profile.kind,
                    period=period,
                    previous_period=previous_period,
                    aggregation=aggregation,
                    previous_aggregation=previous_aggregation,
                    trends=trends,
                )
        except asyncio.CancelledError:
            logger.warning(
                "Report generation cancelled",
                error_id=ErrorIds.REPORT_CANCELLED,
                kind=self.profile.kind,
            )
            raise

    async def _fetch_periods(
        self,
        fetch_records: FetchRecords,
        period: DateRange,
        previous_period: DateRange,
    ) -> tuple[list[Any], list[Any]]:
        if not self.concurrent_fetch:
            current = await self._fetch(fetch_records, period, CURRENT_PERIOD)
            previous = await self._fetch(fetch_records, previous_period, PREVIOUS_PERIOD)
            return current, previous

        tasks = (
            asyncio.create_task(self._fetch(fetch_records, period, CURRENT_PERIOD)),
            asyncio.create_task(self._fetch(fetch_records, previous_period, PREVIOUS_PERIOD)),
        )
        try:
            current, previous = await asyncio.gather(*tasks)
        except BaseException:
            # A partial report is never valid: stop the sibling fetch before propagating
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return current, previous

    async def _fetch(self, fetch_records: FetchRecords, period: DateRange, label: str) -> list[Any]:
        try:
            if _is_async_callable(fetch_records):
                pending = fetch_records(period)
            else:
                pending = asyncio.to_thread(fetch_records, period)
            if self.fetch_timeout is not None:
                result = await asyncio.wait_for(pending, timeout=self.fetch_timeout)
            else:
                result = await pending
            if inspect.isawaitable(result):
                result = await result
        except FetchFailedError as exc:
            if exc.period is None:
                exc.period = label
            log_exception(
                logger,
                exc,
                "Record fetch failed",
                include_traceback=False,
                error_id=ErrorIds.RECORD_FETCH_FAILED,
                kind=self.profile.kind,
                period=label,
            )
            raise
        except TimeoutError as exc:
            logger.error(
                "Record fetch timed out",
                error_id=ErrorIds.RECORD_FETCH_TIMEOUT,
                kind=self.profile.kind,
                period=label,
                timeout_seconds=self.fetch_timeout,
            )
            raise FetchFailedError(f"Timed out fetching {label} period records", period=label) from exc
        except Exception as exc:
            log_exception(
                logger,
                exc,
                "Record fetch failed",
                error_id=ErrorIds.RECORD_FETCH_FAILED,
                kind=self.profile.kind,
                period=label,
            )
            raise FetchFailedError(f"Could not fetch {label} period records: {exc}", period=label) from exc

        if result is None:
            raise FetchFailedError(f"Record source returned nothing for the {label} period", period=label)
        return list(result)
