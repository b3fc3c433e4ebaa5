"""Pydantic schemas for payloads returned by the IoT Cloud API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Body of a successful client-credentials token exchange."""

    access_token: str = Field(..., min_length=1)
    token_type: str = "Bearer"
    expires_in: Optional[int] = Field(
        default=None, description="Token lifetime in seconds."
    )


class Device(BaseModel):
    """Device registered on the account."""

    id: str
    name: str
    type: Optional[str] = None
    serial: Optional[str] = None


class Thing(BaseModel):
    """Logical grouping of properties bound to a device."""

    id: str
    name: Optional[str] = None
    device_id: Optional[str] = None


class TimeseriesPoint(BaseModel):
    time: datetime
    value: float


class TimeseriesResponse(BaseModel):
    """Response for a single property's time-series query."""

    data: List[TimeseriesPoint] = Field(default_factory=list)
    count_values: Optional[int] = None
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
