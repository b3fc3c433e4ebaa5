"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token obtained through the client-credentials grant."""

    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class TimeSeriesSample:
    """A single reading from a property time-series."""

    time: datetime
    value: float


@dataclass(frozen=True, slots=True)
class FormSubmission:
    """Ordered multipart form fields sent to the forwarding endpoint."""

    fields: Tuple[Tuple[str, str], ...]

    def as_dict(self) -> dict[str, str]:
        return dict(self.fields)


@dataclass(frozen=True, slots=True)
class ForwardResult:
    status_code: int
    status_line: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(slots=True)
class RelayResult:
    """Everything a single relay run produced."""

    token_expires_at: datetime
    thing_id: str
    sample_count: int
    mean_value: float
    submission: FormSubmission
    device_names: list[str] = field(default_factory=list)
    forward: Optional[ForwardResult] = None
