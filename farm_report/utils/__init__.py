"""Utility functions and helpers."""

from .exceptions import (
    FetchFailedError,
    InvalidRangeError,
    MetricNotFoundError,
    ReportError,
)

__all__ = [
    "FetchFailedError",
    "InvalidRangeError",
    "MetricNotFoundError",
    "ReportError",
]
