from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from models.records import AccessToken, TimeSeriesSample
from models.schemas import Device, Thing, TimeseriesResponse
from services.errors import UpstreamError

FROM_FILTER_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_ModelT = TypeVar("_ModelT", bound=BaseModel)
_DEVICE_LIST = TypeAdapter(List[Device])


def format_from_filter(moment: datetime) -> str:
    """Render ``moment`` in UTC the way the time-series ``from`` filter expects."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(FROM_FILTER_FORMAT)


class IoTClient:
    """Read-only client for the IoT Cloud v2 REST API."""

    def __init__(
        self,
        base_url: str,
        token: AccessToken,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {token.access_token}"},
        )

    def __enter__(self) -> "IoTClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def list_devices(self) -> List[Device]:
        payload = self._get("getting devices", "/v2/devices")
        try:
            return _DEVICE_LIST.validate_python(payload)
        except ValidationError as exc:
            raise UpstreamError("getting devices", str(exc)) from exc

    def show_thing(self, thing_id: str) -> Thing:
        operation = f"getting thing {thing_id}"
        payload = self._get(operation, f"/v2/things/{thing_id}")
        return self._parse(operation, Thing, payload)

    def property_timeseries(
        self, thing_id: str, property_id: str, since: datetime
    ) -> List[TimeSeriesSample]:
        """Fetch samples recorded for one property from ``since`` until now."""
        operation = f"getting prop {property_id}"
        payload = self._get(
            operation,
            f"/v2/things/{thing_id}/properties/{property_id}/timeseries",
            params={"from": format_from_filter(since)},
        )
        series = self._parse(operation, TimeseriesResponse, payload)
        return [TimeSeriesSample(time=point.time, value=point.value) for point in series.data]

    def _get(self, operation: str, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text.strip() or "no detail provided."
            raise UpstreamError(
                operation, f"status {exc.response.status_code}: {detail}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamError(operation, str(exc)) from exc
        except ValueError as exc:
            raise UpstreamError(operation, f"invalid JSON payload: {exc}") from exc

    @staticmethod
    def _parse(operation: str, model: Type[_ModelT], payload: Any) -> _ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError(operation, str(exc)) from exc
