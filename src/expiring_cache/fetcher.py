"""Memoize JSON GET responses in an ExpiringCache."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import requests

from .cache import ExpiringCache, LookupStatus
from .config import CacheConfig, build_cache
from .retry import with_retries

logger = logging.getLogger("expiring-cache")


class CachedFetcher:
    def __init__(
        self,
        cache: ExpiringCache,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 30.0,
        retry_max_attempts: int = 3,
        retry_base_delay_seconds: float = 0.5,
        retry_max_delay_seconds: float = 8.0,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.cache = cache
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._retry_max_attempts = retry_max_attempts
        self._retry_base_delay_seconds = retry_base_delay_seconds
        self._retry_max_delay_seconds = retry_max_delay_seconds
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        config: CacheConfig,
        cache: ExpiringCache | None = None,
        session: requests.Session | None = None,
    ) -> CachedFetcher:
        return cls(
            cache if cache is not None else build_cache(config),
            session=session,
            timeout_seconds=config.request_timeout_seconds,
            retry_max_attempts=config.retry_max_attempts,
            retry_base_delay_seconds=config.retry_base_delay_seconds,
            retry_max_delay_seconds=config.retry_max_delay_seconds,
        )

    @staticmethod
    def cache_key(url: str, params: dict[str, Any] | None = None) -> str:
        return f"GET:{url}:{json.dumps(params or {}, sort_keys=True, ensure_ascii=True)}"

    def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        ttl_seconds: float | None = None,
        *,
        refresh: bool = False,
    ) -> Any:
        key = self.cache_key(url, params)
        if not refresh:
            status, cached = self.cache.lookup(key)
            if status is LookupStatus.HIT:
                logger.debug("Cache hit: %s", key)
                return cached

        def _call() -> Any:
            response = self._session.get(url, params=params or None, timeout=self._timeout_seconds)
            response.raise_for_status()
            return response.json()

        data = with_retries(
            _call,
            max_attempts=self._retry_max_attempts,
            base_delay_seconds=self._retry_base_delay_seconds,
            max_delay_seconds=self._retry_max_delay_seconds,
            sleep=self._sleep,
        )
        self.cache.set(key, data, ttl_seconds)
        return data

    def invalidate(self, url: str, params: dict[str, Any] | None = None) -> bool:
        return self.cache.delete(self.cache_key(url, params))

    def close(self) -> None:
        self._session.close()
