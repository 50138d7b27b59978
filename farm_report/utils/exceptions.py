"""Exceptions raised by the reporting core."""

from __future__ import annotations


class ReportError(Exception):
    """Raised when report generation fails or input is invalid."""

    pass


class InvalidRangeError(ReportError):
    """Raised when a date range is inverted or a preset token is unknown."""

    pass


class MetricNotFoundError(ReportError):
    """Raised when a requested metric is not produced by the current aggregation."""

    def __init__(self, metric: str, available: list[str] | None = None) -> None:
        self.metric = metric
        self.available = sorted(available or [])
        message = f"Metric not found: {metric}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class FetchFailedError(ReportError):
    """Raised when the record source could not return a record set."""

    def __init__(self, message: str, *, period: str | None = None) -> None:
        self.period = period
        super().__init__(message)

