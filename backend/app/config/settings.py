"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ledger_analytics.cost_basis import DEFAULT_DUST_THRESHOLD


class AppSettings(BaseSettings):
    """Configuration options for the ledger analytics service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Ledger Analytics")
    log_level: str = Field(default="INFO")

    lot_dust_threshold: float = Field(
        default=DEFAULT_DUST_THRESHOLD,
        ge=0.0,
        description="Lots whose remaining quantity falls to this size or below are closed.",
    )

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="ledger-analytics")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)
    telemetry_logs_enabled: bool = Field(
        default=True,
        description="Also ship log records over OTLP when telemetry is enabled.",
    )

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a dict suitable for startup logging."""

        return self.model_dump()


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return cached application settings."""

    return AppSettings()


__all__ = ["AppSettings", "get_settings"]
