"""Single-pass orchestration: token, devices, thing, series, mean, forward."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

import httpx

from models.records import AccessToken, RelayResult
from models.schemas import Device
from services.aggregator import Aggregator
from services.credentials import fetch_access_token
from services.errors import EmptySeriesError
from services.forwarder import Forwarder, build_submission
from services.iot_client import IoTClient
from settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RelayPipeline:
    """Runs the relay once; the first failure propagates to the caller."""

    def __init__(
        self,
        settings: Settings,
        aggregator: Optional[Aggregator] = None,
        clock: Clock = utc_now,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.aggregator = aggregator or Aggregator()
        self.clock = clock
        self._transport = transport

    def run(self, dry_run: bool = False) -> RelayResult:
        """Execute every step in order and return what was produced.

        With ``dry_run`` the submission is built but not posted.
        """
        settings = self.settings
        with self._http_client() as http:
            token = fetch_access_token(http, settings, now=self.clock())

            with self._iot_client(token) as iot:
                devices = self._log_devices(iot.list_devices())
                thing = iot.show_thing(settings.thing_id)
                since = self.clock() - settings.timeseries_window
                samples = iot.property_timeseries(thing.id, settings.property_id, since)

            summary = self.aggregator.aggregate(samples)
            if summary.mean_value is None:
                raise EmptySeriesError(
                    f"Property {settings.property_id} returned no samples since {since.isoformat()}"
                )
            logger.info(
                "Prop found, mean value is %s",
                summary.mean_value,
                extra={
                    "thing_id": thing.id,
                    "property_id": settings.property_id,
                    "sample_count": summary.sample_count,
                    "mean_value": summary.mean_value,
                },
            )

            submission = build_submission(
                thing.id, settings.sensor_id, summary.mean_value, self.clock()
            )
            result = RelayResult(
                token_expires_at=token.expires_at,
                thing_id=thing.id,
                sample_count=summary.sample_count,
                mean_value=summary.mean_value,
                submission=submission,
                device_names=[device.name for device in devices],
            )
            if dry_run:
                logger.info("Dry run, skipping submission to %s", settings.post_url)
                return result

            result.forward = Forwarder(http, settings.post_url).submit(submission)
        return result

    def list_devices(self) -> List[Device]:
        with self._http_client() as http:
            token = fetch_access_token(http, self.settings, now=self.clock())
            with self._iot_client(token) as iot:
                return self._log_devices(iot.list_devices())

    def _http_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.settings.http_timeout, transport=self._transport)

    def _iot_client(self, token: AccessToken) -> IoTClient:
        return IoTClient(
            base_url=self.settings.api_base_url,
            token=token,
            timeout=self.settings.http_timeout,
            transport=self._transport,
        )

    @staticmethod
    def _log_devices(devices: List[Device]) -> List[Device]:
        if not devices:
            logger.info("No device found", extra={"device_count": 0})
        for device in devices:
            logger.info("Device found: %s", device.name)
        return devices


def build_default_pipeline(settings: Settings) -> RelayPipeline:
    """Factory that wires the pipeline with real HTTP transports."""
    return RelayPipeline(settings=settings)
