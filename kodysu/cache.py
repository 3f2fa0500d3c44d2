# file: kodysu/cache.py
"""
In-memory TTL cache for search responses.

Responses are cached per request URL (normalized number + access key), so a
repeated lookup of the same number inside the TTL does not spend quota. Only
successfully decoded responses are stored; errors always reach the caller.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Iterable

from kodysu.client import KodySuClient
from kodysu.core.search import search_many, search_one
from kodysu.errors import KodySuConfigurationError
from kodysu.models import SearchResponse, SearchResult

logger = logging.getLogger(__name__)


def make_cache_key(namespace: str, *parts: str) -> str:
    """
    Make a stable cache key.

    Keys are hashed so the access key embedded in a URL is never kept verbatim.
    """

    raw = "|".join((namespace, *parts)).encode("utf-8")
    digest = hashlib.sha256(raw).hexdigest()
    return f"{namespace}:{digest}"


@dataclass(frozen=True, slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0


class TTLCache:
    """
    Bounded key/value cache with a per-entry expiry.

    When full, the least recently used entry is evicted.
    """

    def __init__(self, *, max_entries: int = 1000, ttl_seconds: int = 600) -> None:
        if max_entries <= 0:
            raise KodySuConfigurationError("cache max_entries must be > 0")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        value, expires_at = entry
        if expires_at <= time.time():
            del self._entries[key]
            self._misses += 1
            return None
        self._entries.move_to_end(key)
        self._hits += 1
        return value

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return
        self._entries[key] = (value, time.time() + ttl)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def delete_expired(self) -> int:
        now = time.time()
        expired = [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()


class CachedKodySuClient:
    """
    `KodySuClient` variant that answers repeated lookups from a `TTLCache`.

    The wrapped client still does the HTTP work and response decoding; this
    class only decides whether a request is needed.
    """

    def __init__(self, client: KodySuClient, *, cache: TTLCache) -> None:
        if client is None:
            raise KodySuConfigurationError("A KodySuClient is required")
        if cache is None:
            raise KodySuConfigurationError("A TTLCache is required")
        self._client = client
        self._cache = cache

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def fetch(self, url: str) -> SearchResponse:
        key = make_cache_key("search", url)
        cached = self._cache.get(key)
        if isinstance(cached, SearchResponse):
            logger.debug("Cache hit for %s", key)
            return cached

        search_response = await self._client.fetch(url)
        self._cache.set(key, search_response)
        return search_response

    async def search_phone(self, phone_number: str | None) -> SearchResult | None:
        """Same contract as `KodySuClient.search_phone`, served from cache when possible."""

        return await search_one(
            self.fetch,
            phone_number,
            base_url=self._client.base_url,
            api_key=self._client.api_key,
            logger=logger,
        )

    async def search_phones(self, phone_numbers: Iterable[str | None] | None) -> list[SearchResult]:
        return await search_many(self.search_phone, phone_numbers, logger=logger)
