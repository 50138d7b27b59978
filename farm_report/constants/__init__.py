"""Shared constants."""

from farm_report.constants.error_ids import ErrorIds

__all__ = ["ErrorIds"]
