"""Environment-driven settings for the dashboard service."""

from .settings import DEFAULT_DATA_BASE_PATH, DEFAULT_PRICES_FILE, AppSettings, get_settings

__all__ = ["AppSettings", "DEFAULT_DATA_BASE_PATH", "DEFAULT_PRICES_FILE", "get_settings"]
