"""insee_sirene.token_store

Bearer-token cache. A backend is any object implementing `TokenStore`
(Redis, memcached, Django/Flask cache wrappers...); `InMemoryTokenStore` is
the process-local default shared by every client that is not given one.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

__all__ = [
    "CACHE_KEY",
    "Token",
    "TokenStore",
    "InMemoryTokenStore",
    "CachedTokenStore",
    "default_store",
]

logger = logging.getLogger(__name__)

CACHE_KEY = "inesee-sirene-token"


@dataclass(frozen=True)
class Token:
    value: str
    expires_in: int


class TokenStore(Protocol):
    """Key/value cache with per-entry time-to-live."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class InMemoryTokenStore:
    """Thread-safe dict-backed TTL cache.

    ``clock`` returns seconds as a float; it defaults to ``time.monotonic``
    and can be replaced to move time forward in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if self._clock() >= deadline:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class CachedTokenStore:
    """Holds the single SIRENE bearer token under `CACHE_KEY`."""

    def __init__(self, backend: TokenStore, key: str = CACHE_KEY) -> None:
        self.backend = backend
        self.key = key

    def get(self) -> Optional[str]:
        value = self.backend.get(self.key)
        logger.debug("Token cache %s for key %s", "hit" if value else "miss", self.key)
        return value or None

    def put(self, token: Token, ttl_seconds: Optional[int] = None) -> None:
        ttl = token.expires_in if ttl_seconds is None else ttl_seconds
        self.backend.put(self.key, token.value, ttl)


default_store = InMemoryTokenStore()
