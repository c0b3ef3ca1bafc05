from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx

from caption_gateway.log_config import logger


class PlatformAPIError(Exception):
    """A social platform API answered with a non-success status."""


def build_authorize_url(base_url: str, params: dict[str, str | None]) -> str:
    query = {key: value for key, value in params.items() if value is not None}
    return f"{base_url}?{urlencode(query)}"


def graph_error_message(response: httpx.Response) -> str | None:
    """Pull ``error.message`` out of a Graph API error body when present."""
    try:
        payload: Any = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def ensure_success(response: httpx.Response, action: str) -> dict[str, Any]:
    """Return the JSON body of a successful call, else raise PlatformAPIError."""
    if response.is_error:
        message = graph_error_message(response)
        logger.warning(
            "%s failed status=%s body=%s",
            action,
            response.status_code,
            response.text[:500],
        )
        raise PlatformAPIError(f"{action}: {message or 'Unknown error'}")
    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning(
            "%s returned a non-JSON body status=%s body=%s",
            action,
            response.status_code,
            response.text[:500],
        )
        raise PlatformAPIError(f"{action}: Unexpected response") from exc
    if not isinstance(payload, dict):
        raise PlatformAPIError(f"{action}: Unexpected response")
    return payload
