from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from models.records import AccessToken
from services.errors import UpstreamError
from services.iot_client import IoTClient, format_from_filter

BASE_URL = "https://api.example.test/iot"


def _iot_client(handler) -> IoTClient:
    token = AccessToken(access_token="tok-1", expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc))
    return IoTClient(BASE_URL, token, transport=httpx.MockTransport(handler))


def test_format_from_filter_uses_utc() -> None:
    moment = datetime(2024, 3, 5, 9, 7, 1, tzinfo=timezone(timedelta(hours=2)))

    assert format_from_filter(moment) == "2024-03-05T07:07:01Z"


def test_list_devices_sends_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"id": "d-1", "name": "Greenhouse", "type": "mkrwifi1010"},
                {"id": "d-2", "name": "Cellar"},
            ],
        )

    with _iot_client(handler) as client:
        devices = client.list_devices()

    assert [device.name for device in devices] == ["Greenhouse", "Cellar"]
    assert seen[0].url.path == "/iot/v2/devices"
    assert seen[0].headers["Authorization"] == "Bearer tok-1"


def test_show_thing_parses_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/iot/v2/things/T1"
        return httpx.Response(200, json={"id": "T1", "name": "Humidity", "device_id": "d-1"})

    with _iot_client(handler) as client:
        thing = client.show_thing("T1")

    assert thing.id == "T1"
    assert thing.device_id == "d-1"


def test_property_timeseries_filters_from_and_keeps_order() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "count_values": 3,
                "data": [
                    {"time": "2024-01-01T10:00:00Z", "value": 40.5},
                    {"time": "2024-01-01T10:05:00Z", "value": 41},
                    {"time": "2024-01-01T10:10:00Z", "value": 39.5},
                ],
            },
        )

    since = datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)
    with _iot_client(handler) as client:
        samples = client.property_timeseries("T1", "P1", since)

    assert [sample.value for sample in samples] == [40.5, 41.0, 39.5]
    assert samples[0].time < samples[1].time < samples[2].time
    assert seen[0].url.path == "/iot/v2/things/T1/properties/P1/timeseries"
    assert seen[0].url.params["from"] == "2024-01-01T08:30:00Z"


@pytest.mark.parametrize("status_code", [401, 404, 500])
def test_error_status_raises_upstream_error(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text="boom")

    with _iot_client(handler) as client, pytest.raises(UpstreamError) as excinfo:
        client.show_thing("T1")

    assert excinfo.value.operation == "getting thing T1"
    assert str(status_code) in str(excinfo.value)


def test_unexpected_payload_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"time": "yesterday", "value": "n/a"}]})

    with _iot_client(handler) as client, pytest.raises(UpstreamError):
        client.property_timeseries("T1", "P1", datetime.now(timezone.utc))


def test_transport_failure_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _iot_client(handler) as client, pytest.raises(UpstreamError):
        client.list_devices()
