"""Reporting configuration using Pydantic Settings.

Environment Variable Strategy:
- Every field has a development default so the library works without a .env
- Deployments override values through the process environment
"""

from functools import cached_property

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_comma_list(value: str | list[str] | None, default: list[str]) -> list[str]:
    """Parse comma-separated string into list."""
    if value is None:
        return default
    if isinstance(value, list):
        return value
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Reporting settings loaded from environment variables.

    Optional (with defaults):
        All fields
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    environment: str = Field(
        default="development", validation_alias=AliasChoices("ENVIRONMENT", "ENV")
    )
    debug: bool = False
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # ================================================================
    # REPORTING - aggregation and comparison behaviour
    # ================================================================

    # Number of most recent months kept in a report's monthly rollup
    monthly_bucket_window: int = Field(default=12, ge=1, validation_alias="MONTHLY_BUCKET_WINDOW")

    # Preset used when a caller does not name a date range
    default_range_preset: str = Field(default="30d", validation_alias="DEFAULT_RANGE_PRESET")

    # Current and previous period records are fetched in parallel when enabled
    concurrent_fetch: bool = Field(default=True, validation_alias="CONCURRENT_FETCH")

    # None = wait for the record source as long as it takes
    fetch_timeout_seconds: float | None = Field(
        default=None, gt=0, validation_alias="FETCH_TIMEOUT_SECONDS"
    )

    # Crop statuses counted as "active" - stored as string, parsed via property
    # Env format: ACTIVE_CROP_STATUSES="PLANTED,GROWING,READY_FOR_HARVEST"
    active_crop_statuses_str: str | None = Field(default=None, validation_alias="ACTIVE_CROP_STATUSES")

    @cached_property
    def active_crop_statuses(self) -> list[str]:
        """Parse active crop statuses from env string or use defaults."""
        return [
            status.upper()
            for status in parse_comma_list(
                self.active_crop_statuses_str,
                ["PLANTED", "GROWING", "READY_FOR_HARVEST"],
            )
        ]

    # Crop statuses whose actual yield feeds the harvest statistics
    # Env format: HARVESTED_CROP_STATUSES="HARVESTED,SOLD"
    harvested_crop_statuses_str: str | None = Field(default=None, validation_alias="HARVESTED_CROP_STATUSES")

    @cached_property
    def harvested_crop_statuses(self) -> list[str]:
        """Parse harvested crop statuses from env string or use defaults."""
        return [
            status.upper()
            for status in parse_comma_list(self.harvested_crop_statuses_str, ["HARVESTED", "SOLD"])
        ]


settings = Settings()
