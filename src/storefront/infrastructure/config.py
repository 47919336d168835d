"""Runtime settings, read from environment variables.

Every setting has a default so the CLI works out of the box; invalid
values fail fast with a ConfigurationError.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from storefront.domain.exceptions import ConfigurationError

# Resolve the data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DB_PATH = Path(__file__).resolve().parents[3] / "data" / "storefront.db"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    db_path: str = str(_DEFAULT_DB_PATH)
    order_cache_capacity: int = 50
    notification_interval: float = 5.0
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if self.order_cache_capacity <= 0:
            raise ConfigurationError("Order cache capacity must be positive")
        if self.notification_interval <= 0:
            raise ConfigurationError("Notification interval must be positive")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = Settings()
        return Settings(
            db_path=env.get("STOREFRONT_DB_PATH", defaults.db_path),
            order_cache_capacity=_int(env, "STOREFRONT_ORDER_CACHE_CAPACITY", defaults.order_cache_capacity),
            notification_interval=_float(env, "STOREFRONT_NOTIFICATION_INTERVAL", defaults.notification_interval),
            log_level=env.get("STOREFRONT_LOG_LEVEL", defaults.log_level).upper(),
            log_json=_bool(env, "STOREFRONT_LOG_JSON", defaults.log_json),
        )


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
