from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Dict, List, Optional

from services.errors import ConfigError

DEFAULT_API_BASE_URL = "https://api2.arduino.cc/iot"
DEFAULT_WINDOW_MINUTES = 100
DEFAULT_HTTP_TIMEOUT = 30.0

_REQUIRED_ENV: Dict[str, str] = {
    "client_id": "clientID",
    "client_secret": "clientSecret",
    "audience": "audience",
    "token_url": "tokenUrl",
    "thing_id": "thingID",
    "property_id": "pid",
    "sensor_id": "sensorID",
    "post_url": "postUrl",
}

_API_BASE_URL_ENV = "IOT_API_BASE_URL"
_WINDOW_MINUTES_ENV = "TIMESERIES_WINDOW_MINUTES"
_HTTP_TIMEOUT_ENV = "HTTP_TIMEOUT"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_LOG_LEVELS = frozenset(
    {"CRITICAL", "FATAL", "ERROR", "WARN", "WARNING", "INFO", "DEBUG", "NOTSET"}
)


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    audience: str
    token_url: str
    thing_id: str
    property_id: str
    sensor_id: str
    post_url: str
    api_base_url: str = DEFAULT_API_BASE_URL
    window_minutes: int = DEFAULT_WINDOW_MINUTES
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    @property
    def timeseries_window(self) -> timedelta:
        return timedelta(minutes=self.window_minutes)


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def read_log_level(default: str = "INFO") -> str:
    return _read_str_env(_LOG_LEVEL_ENV, default).upper()


def load_settings(
    window_minutes: Optional[int] = None,
    http_timeout: Optional[float] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Read and validate configuration from the environment.

    Explicit arguments override their environment counterparts. Every
    required variable that is unset or blank is reported in a single
    ``ConfigError``.
    """
    required: Dict[str, str] = {}
    missing: List[str] = []
    for field_name, env_name in _REQUIRED_ENV.items():
        value = (os.getenv(env_name) or "").strip()
        if not value:
            missing.append(env_name)
            continue
        required[field_name] = value

    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    if window_minutes is not None and window_minutes <= 0:
        raise ConfigError("window_minutes must be a positive integer.")
    if http_timeout is not None and http_timeout <= 0:
        raise ConfigError("http_timeout must be positive.")

    level = log_level.strip().upper() if log_level else read_log_level()
    if level not in _LOG_LEVELS:
        raise ConfigError(
            f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}, got {level!r}."
        )

    return Settings(
        api_base_url=_read_str_env(_API_BASE_URL_ENV, DEFAULT_API_BASE_URL).rstrip("/"),
        window_minutes=window_minutes
        or _read_positive_int(_WINDOW_MINUTES_ENV, DEFAULT_WINDOW_MINUTES),
        http_timeout=http_timeout
        or _read_positive_float(_HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT),
        log_level=level,
        **required,
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
