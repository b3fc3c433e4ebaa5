"""Error hierarchy for the relay pipeline.

Library code raises these; only the CLI decides how they map to exit codes.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for every failure that aborts a relay run."""


class ConfigError(RelayError):
    """Configuration is missing or malformed."""


class AuthenticationError(RelayError):
    """The client-credentials token exchange failed."""


class UpstreamError(RelayError):
    """A device, thing or property request to the IoT API failed."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"Error {operation}: {message}")
        self.operation = operation


class EmptySeriesError(RelayError):
    """The time-series query returned no samples to aggregate."""


class EncodingError(RelayError):
    """The multipart form body could not be built."""


class ForwardingError(RelayError):
    """The outbound submission could not be constructed or sent."""
