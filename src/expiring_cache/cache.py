"""In-memory TTL cache with lazy expiry and an optional background sweep.

Entries live until ``stored_at + ttl``; expiry is absolute from the last
``set`` and is never extended by reads. Stale entries are dropped the next
time they are accessed, by ``cleanup()``, or by the background sweeper
started with ``start()``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import enum
import logging
import threading
import time
from typing import Any, Callable

from .errors import InvalidKeyError, check_ttl
from .sweeper import PeriodicSweeper

logger = logging.getLogger("expiring-cache")

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 10 * 60


class LookupStatus(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    EXPIRED = "expired"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    expirations: int = 0
    swept: int = 0
    sweeps: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses + self.expirations

    @property
    def hit_ratio(self) -> float:
        lookups = self.lookups
        return self.hits / lookups if lookups else 0.0


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(key)
    return key


class ExpiringCache:
    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        now: Callable[[], float] | None = None,
    ) -> None:
        self._default_ttl_seconds = check_ttl(default_ttl_seconds)
        self._now = now or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._stats = CacheStats()
        # cleanup()/size() and get_or_set() re-enter the lock through _remove_expired()/set()
        self._lock = threading.RLock()
        self._sweeper = PeriodicSweeper(self.cleanup, sweep_interval_seconds)

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl_seconds

    @property
    def sweep_interval_seconds(self) -> float:
        return self._sweeper.interval_seconds

    @property
    def running(self) -> bool:
        return self._sweeper.running

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        key = _check_key(key)
        ttl = self._default_ttl_seconds if ttl_seconds is None else check_ttl(ttl_seconds)
        with self._lock:
            now = self._now()
            self._entries[key] = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)

    def lookup(self, key: str) -> tuple[LookupStatus, Any]:
        """Return the entry status and its value (``None`` unless a hit).

        An expired entry is removed as part of the lookup, so a second
        lookup of the same key reports ``MISS``.
        """
        key = _check_key(key)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return LookupStatus.MISS, None
            if entry.is_expired(self._now()):
                del self._entries[key]
                self._stats.expirations += 1
                logger.debug("Cache entry expired: %s", key)
                return LookupStatus.EXPIRED, None
            self._stats.hits += 1
            return LookupStatus.HIT, entry.value

    def get(self, key: str, default: Any = None) -> Any:
        status, value = self.lookup(key)
        if status is LookupStatus.HIT:
            return value
        return default

    def has(self, key: str) -> bool:
        status, _ = self.lookup(key)
        return status is LookupStatus.HIT

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], Any],
        ttl_seconds: float | None = None,
    ) -> Any:
        status, cached = self.lookup(key)
        if status is LookupStatus.HIT:
            return cached
        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    def delete(self, key: str) -> bool:
        key = _check_key(key)
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _remove_expired(self) -> int:
        with self._lock:
            now = self._now()
            stale = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in stale:
                del self._entries[key]
            self._stats.swept += len(stale)
        if stale:
            logger.debug("Swept %d expired cache entries", len(stale))
        return len(stale)

    def cleanup(self) -> int:
        # only explicit and background cleanups count as sweeps, not size()
        with self._lock:
            self._stats.sweeps += 1
            return self._remove_expired()

    def size(self) -> int:
        with self._lock:
            self._remove_expired()
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return replace(self._stats)

    def reset_stats(self) -> None:
        with self._lock:
            self._stats = CacheStats()

    def start(self) -> None:
        self._sweeper.start()

    def stop(self, timeout: float | None = None) -> None:
        self._sweeper.stop(timeout)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(key) and self.has(key)

    def __enter__(self) -> ExpiringCache:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
