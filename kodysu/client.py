# file: kodysu/client.py
"""
kody.su API client (no caching).

Lookups are async and cancellable: cancelling the awaiting task cancels the
in-flight request(s), including every per-number request of a batch.
"""

from __future__ import annotations

import logging
from typing import Iterable

import httpx

from kodysu.core.search import search_many, search_one, validate_client_options
from kodysu.decoder import SearchResponseHandler
from kodysu.errors import KodySuConfigurationError
from kodysu.models import SearchResponse, SearchResult
from kodysu.net.http import HttpClientConfig, PerHostRateLimiter, request_with_retries

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.kody.su"


class KodySuClient:
    """
    Look up phone numbers through `/api/v2.1/search.json`.

    Numbers may be passed in any format; they are normalized to digits before
    the request is made.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        http_config: HttpClientConfig,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        response_handler: SearchResponseHandler | None = None,
        rate_limiter: PerHostRateLimiter | None = None,
    ) -> None:
        if client is None:
            raise KodySuConfigurationError("An httpx.AsyncClient is required")
        if http_config is None:
            raise KodySuConfigurationError("An HttpClientConfig is required")
        validate_client_options(base_url=base_url, api_key=api_key)

        self._client = client
        self._http_config = http_config
        self._api_key = str(api_key)
        self._base_url = base_url
        self._handler = response_handler or SearchResponseHandler()
        self._rate_limiter = rate_limiter

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> str:
        return self._api_key

    async def fetch(self, url: str) -> SearchResponse:
        """Send one GET to `url` and decode the response."""

        response = await request_with_retries(
            self._client,
            "GET",
            url,
            config=self._http_config,
            rate_limiter=self._rate_limiter,
        )
        try:
            return await self._handler.handle(response)
        finally:
            await response.aclose()

    async def search_phone(self, phone_number: str | None) -> SearchResult | None:
        """
        Look up a single number.

        Returns None when the input has no digits or the service has no
        successful entry for the number.

        Raises:
            KodySuAuthenticationError: if the access key is rejected.
            KodySuValidationError: for API-reported errors (e.g. quota exhausted).
            KodySuHttpError: for HTTP errors and unreadable responses.
            httpx.TransportError: for network failures left after retries.
        """

        return await search_one(
            self.fetch,
            phone_number,
            base_url=self._base_url,
            api_key=self._api_key,
            logger=logger,
        )

    async def search_phones(self, phone_numbers: Iterable[str | None] | None) -> list[SearchResult]:
        """
        Look up many numbers concurrently, one request per distinct number.

        The returned list holds only numbers that were found, in the order
        their lookups completed. Any error fails the whole batch.
        """

        return await search_many(self.search_phone, phone_numbers, logger=logger)
