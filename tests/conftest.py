from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator

import pytest

from settings import Settings, get_settings

FIXED_NOW = datetime.fromtimestamp(1700000000, tz=timezone.utc)

REQUIRED_ENV = {
    "clientID": "client-abc",
    "clientSecret": "secret-xyz",
    "audience": "https://api2.arduino.cc/iot",
    "tokenUrl": "https://auth.example.test/token",
    "thingID": "T1",
    "pid": "P1",
    "sensorID": "S1",
    "postUrl": "https://forward.example.test/submit",
}


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        client_id="client-abc",
        client_secret="secret-xyz",
        audience="https://api2.arduino.cc/iot",
        token_url="https://auth.example.test/token",
        thing_id="T1",
        property_id="P1",
        sensor_id="S1",
        post_url="https://forward.example.test/submit",
        api_base_url="https://api.example.test/iot",
    )


@pytest.fixture()
def relay_env(monkeypatch) -> Iterator[dict[str, str]]:
    for name, value in REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    for name in ("IOT_API_BASE_URL", "TIMESERIES_WINDOW_MINUTES", "HTTP_TIMEOUT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield dict(REQUIRED_ENV)
    get_settings.cache_clear()


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW
