"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_DATA_BASE_PATH = "./data"
DEFAULT_PRICES_FILE = "prices.ndjson"


class AppSettings(BaseSettings):
    """Configuration options for the DCA dashboard service."""

    app_name: str = Field(default="DCA Bot Dashboard")

    data_base_path: str = Field(
        default=DEFAULT_DATA_BASE_PATH,
        description="URL or directory holding the bot's output files.",
    )
    prices_file: str = Field(
        default=DEFAULT_PRICES_FILE,
        description="Price feed file name; some deployments publish snapshots.ndjson.",
    )
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    refresh_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Suggested polling interval for dashboard clients.",
    )

    log_level: str = Field(default="INFO", description="Root log level name, e.g. DEBUG or WARNING.")

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="dca-dashboard")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_headers: str | None = Field(
        default=None,
        description="Comma separated key=value headers sent to the OTLP collector.",
    )
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"telemetry_otlp_headers"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_DATA_BASE_PATH",
    "DEFAULT_PRICES_FILE",
    "get_settings",
]
