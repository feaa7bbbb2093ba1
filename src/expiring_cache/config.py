"""Configuration helpers for the expiring cache."""

from dataclasses import asdict, dataclass
import logging
import os
from typing import Any

from .cache import DEFAULT_SWEEP_INTERVAL_SECONDS, DEFAULT_TTL_SECONDS, ExpiringCache

logger = logging.getLogger("expiring-cache")

_TRUTHY = {"1", "true", "yes"}


@dataclass(frozen=True)
class CacheConfig:
    default_ttl_seconds: float = float(DEFAULT_TTL_SECONDS)
    sweep_interval_seconds: float = float(DEFAULT_SWEEP_INTERVAL_SECONDS)
    sweep_enabled: bool = True
    request_timeout_seconds: float = 30.0
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.5
    retry_max_delay_seconds: float = 8.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def load_config() -> CacheConfig:
    defaults = CacheConfig()
    return CacheConfig(
        default_ttl_seconds=_env_float("CACHE_DEFAULT_TTL_SECONDS", defaults.default_ttl_seconds),
        sweep_interval_seconds=_env_float(
            "CACHE_SWEEP_INTERVAL_SECONDS", defaults.sweep_interval_seconds
        ),
        sweep_enabled=_env_flag("CACHE_SWEEP_ENABLED", defaults.sweep_enabled),
        request_timeout_seconds=_env_float(
            "CACHE_FETCH_TIMEOUT_SECONDS", defaults.request_timeout_seconds
        ),
        retry_max_attempts=_env_int("CACHE_RETRY_MAX_ATTEMPTS", defaults.retry_max_attempts),
        retry_base_delay_seconds=_env_float(
            "CACHE_RETRY_BASE_DELAY_SECONDS", defaults.retry_base_delay_seconds
        ),
        retry_max_delay_seconds=_env_float(
            "CACHE_RETRY_MAX_DELAY_SECONDS", defaults.retry_max_delay_seconds
        ),
    )


def build_cache(config: CacheConfig, **kwargs: Any) -> ExpiringCache:
    """Construct (but do not start) a cache from ``config``."""
    return ExpiringCache(
        config.default_ttl_seconds,
        sweep_interval_seconds=config.sweep_interval_seconds,
        **kwargs,
    )
