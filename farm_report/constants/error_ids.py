"""Stable identifiers attached to error log events.

Log queries and alerts key on these values, so existing identifiers must not
be renamed.
"""


class ErrorIds:
    INVALID_RANGE = "REPORT_INVALID_RANGE"
    UNKNOWN_PRESET = "REPORT_UNKNOWN_PRESET"
    METRIC_NOT_FOUND = "REPORT_METRIC_NOT_FOUND"
    RECORD_FETCH_FAILED = "REPORT_RECORD_FETCH_FAILED"
    RECORD_FETCH_TIMEOUT = "REPORT_RECORD_FETCH_TIMEOUT"
    REPORT_CANCELLED = "REPORT_CANCELLED"
    RECORD_DATE_UNREADABLE = "REPORT_RECORD_DATE_UNREADABLE"
