# file: kodysu/core/search.py
"""
Search orchestration shared by the plain and cached clients.

Everything here is stateless: the clients compose these helpers rather than
inheriting them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from kodysu.core.phone import normalize, normalize_all
from kodysu.errors import KodySuConfigurationError
from kodysu.models import SearchResponse, SearchResult

SEARCH_PATH = "/api/v2.1/search.json"

Fetch = Callable[[str], Awaitable[SearchResponse]]
SearchOne = Callable[[str], Awaitable[SearchResult | None]]


def validate_client_options(*, base_url: str | None, api_key: str | None) -> None:
    """Raise `KodySuConfigurationError` if the connection options are unusable."""

    if not api_key or not api_key.strip():
        raise KodySuConfigurationError(
            "kody.su API key is not configured. Set `KODYSU_API_KEY` in your environment or .env."
        )
    if not base_url or not base_url.strip():
        raise KodySuConfigurationError("kody.su base URL is not configured.")
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise KodySuConfigurationError(f"Invalid kody.su base URL: {base_url!r}")


def build_search_url(base_url: str, phone_number: str, api_key: str) -> str:
    """
    Build the search URL for an already-normalized number.

    The endpoint path replaces whatever path `base_url` carries; both query
    values are percent-encoded.
    """

    parts = urlsplit(base_url)
    query = urlencode({"q": phone_number, "key": api_key}, quote_via=quote)
    return urlunsplit((parts.scheme, parts.netloc, SEARCH_PATH, query, ""))


def extract_phone_result(response: SearchResponse, normalized_number: str) -> SearchResult | None:
    """Return the first successful entry matching `normalized_number`, if any."""

    for result in response.numbers:
        if result.success and normalize(result.phone_number) == normalized_number:
            return result
    return None


def log_response(logger: logging.Logger, response: SearchResponse) -> None:
    for failed in response.failed_numbers():
        logger.warning(
            "Lookup failed for %s: %s - %s",
            failed.phone_number,
            failed.error_code,
            failed.error_message,
        )
    logger.debug(
        "Request succeeded. Quota: %d, numbers returned: %d", response.quota, len(response.numbers)
    )


def log_single_result(
    logger: logging.Logger, normalized_number: str, result: SearchResult | None
) -> None:
    if result is not None:
        logger.debug("Found %s: %s", normalized_number, result.display_operator)
    else:
        logger.debug("No information found for %s", normalized_number)


async def search_one(
    fetch: Fetch,
    phone_number: str | None,
    *,
    base_url: str,
    api_key: str,
    logger: logging.Logger,
) -> SearchResult | None:
    """
    Look up a single number through `fetch` (URL -> decoded response).

    Returns None without calling `fetch` when the input has no digits.
    """

    normalized = normalize(phone_number)
    if not normalized:
        return None

    url = build_search_url(base_url, normalized, api_key)
    try:
        search_response = await fetch(url)
    except asyncio.CancelledError:
        logger.debug("Lookup of %s was cancelled", normalized)
        raise
    except Exception:
        logger.exception("Lookup of %s failed", normalized)
        raise

    log_response(logger, search_response)
    result = extract_phone_result(search_response, normalized)
    log_single_result(logger, normalized, result)
    return result


async def search_many(
    lookup: SearchOne,
    phone_numbers: Iterable[str | None] | None,
    *,
    logger: logging.Logger,
) -> list[SearchResult]:
    """
    Look up many numbers concurrently.

    Inputs are normalized and deduplicated first, so each distinct number is
    requested once. Results come back in completion order; numbers that were
    not found are left out. The first error cancels the remaining lookups and
    is re-raised unchanged.
    """

    if phone_numbers is None:
        raise KodySuConfigurationError("phone_numbers must not be None")
    if isinstance(phone_numbers, str):
        raise KodySuConfigurationError("phone_numbers must be a collection, not a single string")

    raw = list(phone_numbers)
    unique = normalize_all(raw)
    if not unique:
        return []

    logger.debug("Searching %d unique numbers out of %d given", len(unique), len(raw))

    tasks = [asyncio.create_task(lookup(number)) for number in unique]
    results: list[SearchResult] = []
    try:
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if result is not None:
                results.append(result)
    finally:
        for t in tasks:
            if not t.done():
                t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    logger.debug("Batch search finished: found %d of %d unique numbers", len(results), len(unique))
    return results
