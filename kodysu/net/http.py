# file: kodysu/net/http.py
"""
Async HTTP transport (httpx) with retries, exponential backoff, and optional
per-host throttling.

Unlike a plain `raise_for_status` helper, `request_with_retries` hands the
final response back as-is so the response handler can classify the status.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


def _host_for_url(url: str) -> str:
    parsed = urlparse(url)
    return parsed.netloc or parsed.path


class PerHostRateLimiter:
    """
    Minimum-interval limiter keyed by host.

    A rate of zero (or less) disables throttling.
    """

    def __init__(self, *, rate_per_second: float = 0.0) -> None:
        self._min_interval = 0.0 if rate_per_second <= 0 else (1.0 / rate_per_second)
        self._locks: dict[str, asyncio.Lock] = {}
        self._next_allowed: dict[str, float] = {}

    @property
    def enabled(self) -> bool:
        return self._min_interval > 0

    async def wait(self, host: str) -> None:
        if self._min_interval <= 0:
            return

        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            now = time.monotonic()
            next_allowed = self._next_allowed.get(host, now)
            if next_allowed > now:
                await asyncio.sleep(next_allowed - now)
                now = next_allowed
            self._next_allowed[host] = now + self._min_interval


@dataclass(frozen=True, slots=True)
class HttpClientConfig:
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0
    rate_limit_per_host_per_second: float = 0.0
    user_agent: str = "kodysu-client/1.0"


@asynccontextmanager
async def build_async_client(config: HttpClientConfig) -> AsyncIterator[httpx.AsyncClient]:
    timeout = httpx.Timeout(config.timeout_seconds)
    headers = {"User-Agent": config.user_agent} if config.user_agent else {}
    async with httpx.AsyncClient(timeout=timeout, headers=headers) as client:
        yield client


def _compute_backoff(attempt: int, *, base: float, cap: float) -> float:
    raw = min(cap, base * (2**attempt))
    return float(raw * random.uniform(0.8, 1.2))


def _retry_after_seconds(resp: httpx.Response) -> float | None:
    value = resp.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    config: HttpClientConfig,
    rate_limiter: PerHostRateLimiter | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send a request, retrying transient failures.

    Retries on:
    - network/transport errors (re-raised once attempts run out)
    - HTTP 429 and 5xx responses (the last response is returned once attempts run out)
    """

    if config.max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    host = _host_for_url(url)

    for attempt in range(config.max_retries + 1):
        if rate_limiter is not None:
            await rate_limiter.wait(host)

        try:
            resp = await client.request(method, url, **kwargs)
        except asyncio.CancelledError:
            raise
        except httpx.TransportError as exc:
            if attempt >= config.max_retries:
                raise
            logger.debug("%s %s failed (%s), retrying", method, host, type(exc).__name__)
            await asyncio.sleep(
                _compute_backoff(
                    attempt, base=config.backoff_base_seconds, cap=config.backoff_max_seconds
                )
            )
            continue

        if resp.status_code not in RETRY_STATUSES or attempt >= config.max_retries:
            return resp

        sleep_for = _retry_after_seconds(resp)
        if sleep_for is None:
            sleep_for = _compute_backoff(
                attempt, base=config.backoff_base_seconds, cap=config.backoff_max_seconds
            )
        logger.debug(
            "%s %s returned HTTP %s, retrying in %.2fs", method, host, resp.status_code, sleep_for
        )

        # Drain the body so the connection can be reused.
        await resp.aread()
        await resp.aclose()
        await asyncio.sleep(sleep_for)

    # Unreachable.
    raise RuntimeError("request_with_retries: exhausted attempts without a response")
