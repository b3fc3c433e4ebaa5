"""Relay of the aggregated value to the downstream form endpoint."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Tuple

import httpx

from models.records import FormSubmission, ForwardResult
from services.errors import EncodingError, ForwardingError

logger = logging.getLogger(__name__)

READING_TYPE = "2"
VALUE_SCALE = 10

MultipartParts = List[Tuple[str, Tuple[None, str]]]


def build_submission(
    thing_id: str,
    sensor_id: str,
    mean_value: float,
    submitted_at: datetime,
) -> FormSubmission:
    """Assemble the five form fields in wire order.

    ``value`` is the mean scaled by ten and truncated toward zero; a mean
    that cannot be represented as an integer raises ``EncodingError``.
    """
    scaled = mean_value * VALUE_SCALE
    if not math.isfinite(scaled):
        raise EncodingError(f"Error adding field value: mean {mean_value!r} is not finite.")
    return FormSubmission(
        fields=(
            ("apikey", thing_id),
            ("iddevice", sensor_id),
            ("value", str(int(scaled))),
            ("type", READING_TYPE),
            ("timestamp", str(int(submitted_at.timestamp()))),
        )
    )


def encode_submission(submission: FormSubmission) -> MultipartParts:
    # A ``None`` filename makes httpx emit a plain form field, not a file part.
    parts: MultipartParts = []
    for name, value in submission.fields:
        if not name:
            raise EncodingError("Error adding field: empty field name.")
        if not isinstance(value, str):
            raise EncodingError(
                f"Error adding field {name}: expected str, got {type(value).__name__}"
            )
        parts.append((name, (None, value)))
    return parts


class Forwarder:
    """Posts a form submission as multipart/form-data."""

    def __init__(self, client: httpx.Client, post_url: str) -> None:
        self._client = client
        self._post_url = post_url

    def submit(self, submission: FormSubmission) -> ForwardResult:
        parts = encode_submission(submission)
        try:
            response = self._client.post(self._post_url, files=parts)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ForwardingError(f"Error sending request: {exc}") from exc

        result = ForwardResult(
            status_code=response.status_code,
            status_line=f"{response.status_code} {response.reason_phrase}".strip(),
        )
        if result.is_success:
            logger.info(
                "Response status: %s",
                result.status_line,
                extra={"status": result.status_code},
            )
        else:
            logger.warning(
                "Response status: %s",
                result.status_line,
                extra={"status": result.status_code, "reason": "non-2xx response"},
            )
        return result
