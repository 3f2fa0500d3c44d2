# file: kodysu/decoder.py
"""
HTTP response handling for the search endpoint.

`SearchResponseHandler.handle` turns an `httpx.Response` into a
`SearchResponse` or raises. Checks run in a fixed order and the first one that
fires wins:

1. HTTP status (401/403 -> authentication, anything else -> HTTP error)
2. empty body
3. JSON decoding / structure
4. API-level `error_code` / `error_message`
"""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from kodysu.errors import (
    KodySuAuthenticationError,
    KodySuErrorCode,
    KodySuHttpError,
    KodySuValidationError,
)
from kodysu.models import SearchResponse

logger = logging.getLogger(__name__)

_AUTH_ERROR_CODES = frozenset({KodySuErrorCode.AUTH_REQUIRED, KodySuErrorCode.AUTH_FAILED})


def status_description(status_code: int) -> str:
    reason = httpx.codes.get_reason_phrase(status_code)
    return f"HTTP {status_code} {reason}".rstrip()


def raise_for_http_status(response: httpx.Response, content: str) -> None:
    """Raise the taxonomy error for a non-success HTTP status."""

    status = response.status_code
    if status == httpx.codes.UNAUTHORIZED:
        raise KodySuAuthenticationError("Authentication failed. Check the API key.")
    if status == httpx.codes.FORBIDDEN:
        raise KodySuAuthenticationError("Access denied. Check the API key permissions.")

    # 429 should have been retried by the transport; if it gets here, it is just an HTTP error.
    message = status_description(status)
    if content.strip():
        message += f". Response body: {content}"
    raise KodySuHttpError(message, status)


def raise_for_api_error(search_response: SearchResponse) -> None:
    """Raise the taxonomy error for a response-level API error."""

    code = search_response.error_code
    if not code or not code.strip():
        code = KodySuErrorCode.UNKNOWN_ERROR
    message = search_response.error_message or "Unknown error"

    if code in _AUTH_ERROR_CODES:
        raise KodySuAuthenticationError(f"Authentication error: {message}")
    if code == KodySuErrorCode.LIMIT_EXCEEDED:
        raise KodySuValidationError(code, f"Request limit exceeded: {message}")
    raise KodySuValidationError(code, message)


def parse_search_response(content: str, *, status_code: int | None = None) -> SearchResponse:
    """Decode a JSON body into a `SearchResponse` without API-error classification."""

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise KodySuHttpError("Failed to decode API response", status_code) from exc

    if payload is None:
        raise KodySuHttpError("API returned a null response", status_code)
    if not isinstance(payload, dict):
        raise KodySuHttpError(
            f"Expected a JSON object, got {type(payload).__name__}", status_code
        )

    try:
        return SearchResponse.from_payload(payload)
    except ValidationError as exc:
        raise KodySuHttpError("Failed to decode API response", status_code) from exc


class SearchResponseHandler:
    """
    Stateless response handler, safe to share between concurrent lookups.
    """

    name = "kodysu"

    async def handle(self, response: httpx.Response) -> SearchResponse:
        # Transport errors while reading the body propagate unchanged.
        await response.aread()
        content = response.text

        logger.debug(
            "%s response: HTTP %s (%d bytes)", self.name, response.status_code, len(response.content)
        )

        if not response.is_success:
            raise_for_http_status(response, content)

        if not content.strip():
            raise KodySuHttpError("API returned an empty response", response.status_code)

        search_response = parse_search_response(content, status_code=response.status_code)

        if search_response.has_error:
            raise_for_api_error(search_response)

        return search_response
