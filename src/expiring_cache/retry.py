"""Retry helpers for transient upstream failures."""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

import requests

T = TypeVar("T")

logger = logging.getLogger("expiring-cache")


def _sleep_seconds(
    attempt: int,
    base_delay: float,
    max_delay: float,
) -> float:
    delay = min(max_delay, base_delay * (2 ** max(0, attempt - 1)))
    # small jitter to avoid herd behaviour
    delay *= 0.8 + random.random() * 0.4  # noqa: S311 - non-crypto jitter
    return max(0.0, delay)


def is_transient_error(exc: Exception) -> bool:
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True

    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int) and (status_code == 429 or 500 <= status_code <= 599):
        return True

    return False


def with_retries(
    func: Callable[[], T],
    *,
    max_attempts: int,
    base_delay_seconds: float,
    max_delay_seconds: float,
    sleep: Callable[[float], None] | None = None,
) -> T:
    if max_attempts <= 1:
        return func()

    sleep_fn = sleep or time.sleep

    attempt = 1
    while True:
        try:
            return func()
        except Exception as exc:
            if attempt >= max_attempts or not is_transient_error(exc):
                raise
            delay = _sleep_seconds(attempt, base_delay_seconds, max_delay_seconds)
            logger.debug(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt,
                max_attempts,
                exc.__class__.__name__,
                delay,
            )
            sleep_fn(delay)
            attempt += 1
