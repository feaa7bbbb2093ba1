"""Validate cache environment variables without building a cache."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from expiring_cache.config import load_config  # noqa: E402

_NUMERIC_VARS = (
    "CACHE_DEFAULT_TTL_SECONDS",
    "CACHE_SWEEP_INTERVAL_SECONDS",
    "CACHE_FETCH_TIMEOUT_SECONDS",
    "CACHE_RETRY_BASE_DELAY_SECONDS",
    "CACHE_RETRY_MAX_DELAY_SECONDS",
)
_INTEGER_VARS = ("CACHE_RETRY_MAX_ATTEMPTS",)


def main() -> int:
    load_dotenv()
    config = load_config()
    errors: list[str] = []
    warnings: list[str] = []

    for name in _NUMERIC_VARS:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            continue
        try:
            float(raw)
        except ValueError:
            errors.append(f"{name} must be a number (got {raw!r})")
    for name in _INTEGER_VARS:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            continue
        try:
            int(raw)
        except ValueError:
            errors.append(f"{name} must be an integer (got {raw!r})")

    if config.default_ttl_seconds <= 0:
        errors.append("CACHE_DEFAULT_TTL_SECONDS must be positive")
    if config.sweep_interval_seconds <= 0:
        errors.append("CACHE_SWEEP_INTERVAL_SECONDS must be positive")
    if config.request_timeout_seconds <= 0:
        errors.append("CACHE_FETCH_TIMEOUT_SECONDS must be positive")

    if not config.sweep_enabled:
        warnings.append("Background sweep disabled; stale entries are only removed on access")
    elif config.sweep_interval_seconds < config.default_ttl_seconds:
        warnings.append("CACHE_SWEEP_INTERVAL_SECONDS is shorter than the default TTL")
    if config.retry_max_attempts < 1:
        warnings.append("CACHE_RETRY_MAX_ATTEMPTS < 1; requests are attempted once")
    if config.retry_base_delay_seconds > config.retry_max_delay_seconds:
        warnings.append("CACHE_RETRY_BASE_DELAY_SECONDS exceeds CACHE_RETRY_MAX_DELAY_SECONDS")

    if errors:
        print("Errors:")
        for item in errors:
            print(f"- {item}")

    if warnings:
        print("Warnings:")
        for item in warnings:
            print(f"- {item}")

    if errors:
        return 1

    print("OK: environment looks valid")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
