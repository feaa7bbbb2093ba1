"""Error types and normalization for the expiring cache."""

from __future__ import annotations

import json
import math
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests

HINT_KEY = "Cache keys must be non-empty strings."
HINT_TTL = "TTL must be a positive number of seconds."
HINT_TIMEOUT = "Upstream did not respond in time; retry later or raise the timeout."
HINT_CONNECTION = "Upstream is unreachable; check the URL and network."
HINT_RATE_LIMIT = "Rate limit exceeded; retry with backoff."
HINT_UPSTREAM = "Upstream server error; retry later."
HINT_PAYLOAD = "Response body is not valid JSON."
HINT_URL = "URL is malformed or uses an unsupported scheme; pass an absolute http(s) URL."


class InvalidKeyError(ValueError):
    def __init__(self, key: Any) -> None:
        super().__init__(f"Invalid cache key: {key!r}")
        self.key = key


class InvalidTTLError(ValueError):
    def __init__(self, ttl: Any) -> None:
        super().__init__(f"Invalid TTL: {ttl!r}")
        self.ttl = ttl


def _sanitize_url(url: str | None) -> str | None:
    if not url:
        return None
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _extract_http_info(exc: Exception) -> dict[str, Any]:
    response = getattr(exc, "response", None)
    if response is None:
        return {}

    info: dict[str, Any] = {}
    status_code = getattr(response, "status_code", None)
    reason = getattr(response, "reason", None)
    endpoint = _sanitize_url(getattr(response, "url", None))

    if status_code is not None:
        info["http_status"] = status_code
    if reason:
        info["http_reason"] = reason
    if endpoint:
        info["endpoint"] = endpoint
    return info


def _http_hint(status_code: Any) -> str | None:
    if not isinstance(status_code, int):
        return None
    if status_code == 429:
        return HINT_RATE_LIMIT
    if 500 <= status_code <= 599:
        return HINT_UPSTREAM
    return None


def normalize_error(operation: str, exc: Exception) -> dict[str, Any]:
    payload: dict[str, Any] = {"operation": operation, "type": exc.__class__.__name__}
    payload.update(_extract_http_info(exc))
    payload["message"] = str(exc) or exc.__class__.__name__

    if isinstance(exc, InvalidKeyError):
        payload["hint"] = HINT_KEY
    elif isinstance(exc, InvalidTTLError):
        payload["hint"] = HINT_TTL
    elif isinstance(exc, requests.Timeout):
        payload["hint"] = HINT_TIMEOUT
    elif isinstance(exc, requests.ConnectionError):
        payload["hint"] = HINT_CONNECTION
    elif isinstance(exc, requests.HTTPError):
        hint = _http_hint(payload.get("http_status"))
        if hint:
            payload["hint"] = hint
    elif isinstance(
        exc,
        (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ),
    ):
        payload["hint"] = HINT_URL
    elif isinstance(exc, (requests.exceptions.JSONDecodeError, json.JSONDecodeError)):
        payload["hint"] = HINT_PAYLOAD

    return {"error": payload}


def check_ttl(ttl: Any) -> float:
    """Return ``ttl`` as float seconds or raise InvalidTTLError."""
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise InvalidTTLError(ttl)
    if not math.isfinite(ttl) or ttl <= 0:
        raise InvalidTTLError(ttl)
    return float(ttl)
