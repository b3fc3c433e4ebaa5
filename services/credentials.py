"""OAuth2 client-credentials exchange."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from models.records import AccessToken
from models.schemas import TokenResponse
from services.errors import AuthenticationError
from settings import Settings

logger = logging.getLogger(__name__)


def fetch_access_token(
    client: httpx.Client,
    settings: Settings,
    now: Optional[datetime] = None,
) -> AccessToken:
    """Exchange the client ID and secret for a bearer token.

    The ``audience`` setting is sent as an extra form parameter alongside the
    standard grant fields.
    """
    form = {
        "grant_type": "client_credentials",
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        "audience": settings.audience,
    }
    try:
        response = client.post(
            settings.token_url,
            data=form,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        payload = TokenResponse.model_validate(response.json())
    except httpx.HTTPStatusError as exc:
        raise AuthenticationError(
            f"Error retrieving access token, status {exc.response.status_code}: "
            f"{exc.response.text.strip() or 'no detail provided.'}"
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise AuthenticationError(f"Error retrieving access token, {exc}") from exc
    except (ValueError, ValidationError) as exc:
        raise AuthenticationError(
            f"Error retrieving access token, unexpected response payload: {exc}"
        ) from exc

    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(seconds=payload.expires_in or 0)
    logger.info("Got an access token, will expire on %s", expires_at.isoformat())
    return AccessToken(
        access_token=payload.access_token,
        token_type=payload.token_type,
        expires_at=expires_at,
    )
