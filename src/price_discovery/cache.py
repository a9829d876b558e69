"""In-memory TTL cache for price results."""

from __future__ import annotations

import time
from collections.abc import Callable

from .domain import PriceResult


class PriceCache:
    """Caches PriceResults per (snapshot version, token id).

    Entries expire after ``ttl_seconds``. A zero TTL disables caching.
    Switching to a new snapshot version drops every entry of older versions.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[tuple[str, str], tuple[float, PriceResult]] = {}
        self._version: str | None = None

    def __len__(self) -> int:
        return len(self._store)

    def get(self, version: str, token_id: str) -> PriceResult | None:
        key = (version, token_id)
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, result = entry
        if expires_at > self._clock():
            return result
        del self._store[key]
        return None

    def set(self, version: str, token_id: str, result: PriceResult) -> None:
        if self.ttl_seconds <= 0:
            return
        if version != self._version:
            self._store = {
                key: entry for key, entry in self._store.items() if key[0] == version
            }
            self._version = version
        self._store[(version, token_id)] = (self._clock() + self.ttl_seconds, result)

    def clear(self) -> None:
        self._store.clear()
        self._version = None
