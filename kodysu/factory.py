# file: kodysu/factory.py
"""Build ready-to-use clients from `KodySuSettings`."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from kodysu.cache import CachedKodySuClient, TTLCache
from kodysu.client import KodySuClient
from kodysu.config import KodySuSettings, load_settings
from kodysu.core.search import validate_client_options
from kodysu.logging_config import configure_logging
from kodysu.net.http import PerHostRateLimiter, build_async_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_client(
    settings: KodySuSettings | None = None,
    *,
    cache: TTLCache | None = None,
    configure_logs: bool = False,
) -> AsyncIterator[KodySuClient | CachedKodySuClient]:
    """
    Open a client session.

    A fresh httpx client is built from `settings` on every call, so settings
    changes take effect for the next session. When `settings.cache_enabled`
    is set (or a `cache` is passed) the cached variant is returned; pass the
    same `cache` to several sessions to share it.

    With `configure_logs=True` root logging is set up from
    `settings.log_level` and `settings.json_logging` first.

    Raises:
        KodySuConfigurationError: if the settings are unusable.
    """

    if settings is None:
        settings = load_settings()
    if configure_logs:
        configure_logging(level=settings.log_level, json_logging=settings.json_logging)
    validate_client_options(base_url=settings.base_url, api_key=settings.api_key)

    http_config = settings.http_config()
    rate_limiter = PerHostRateLimiter(rate_per_second=http_config.rate_limit_per_host_per_second)

    async with build_async_client(http_config) as http:
        client = KodySuClient(
            client=http,
            http_config=http_config,
            api_key=settings.api_key,
            base_url=settings.base_url,
            rate_limiter=rate_limiter if rate_limiter.enabled else None,
        )
        if cache is None and settings.cache_enabled:
            cache = TTLCache(
                max_entries=settings.cache_max_entries, ttl_seconds=settings.cache_ttl_seconds
            )
        if cache is not None:
            logger.debug("Opening cached kody.su client (ttl=%ss)", cache.ttl_seconds)
            yield CachedKodySuClient(client, cache=cache)
        else:
            yield client
