"""Test fixtures and configuration."""

import logging
import sys
from datetime import date
from decimal import Decimal

import pytest
import structlog

from farm_report.schemas.reporting import DateRange
from tests.factories import make_expense


# --- Structlog Configuration for Tests ---
@pytest.fixture(autouse=True, scope="session")
def configure_structlog_for_tests():
    """Configure structlog for proper capsys/caplog capture in tests."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=processors[:-1],
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    yield

    structlog.reset_defaults()


# --- Clock ---
@pytest.fixture
def today() -> date:
    return date(2025, 6, 15)


@pytest.fixture
def fixed_clock(today):
    return lambda: today


@pytest.fixture
def june_2025() -> DateRange:
    return DateRange(start=date(2025, 6, 1), end=date(2025, 6, 30))


# --- Records ---
@pytest.fixture
def june_expenses() -> list[dict]:
    return [
        make_expense("2025-06-02", Decimal("40.00"), "FEED"),
        make_expense("2025-06-10", Decimal("60.00"), "VETERINARY"),
        make_expense("2025-06-20", Decimal("20.00"), "FEED"),
    ]
