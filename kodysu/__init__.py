# file: kodysu/__init__.py
"""
kodysu - async client for the kody.su phone number lookup API.

Looks up operator, region and number-type metadata for phone numbers, with
input normalization, batched deduplicated lookups, optional response caching
and a closed set of error types.
"""

from __future__ import annotations

from kodysu.cache import CachedKodySuClient, TTLCache
from kodysu.client import KodySuClient
from kodysu.config import KodySuSettings, load_settings
from kodysu.core.phone import PhoneNumber, normalize, normalize_all
from kodysu.core.phone_type import PhoneType
from kodysu.errors import (
    KodySuAuthenticationError,
    KodySuConfigurationError,
    KodySuError,
    KodySuErrorCode,
    KodySuHttpError,
    KodySuValidationError,
)
from kodysu.factory import open_client
from kodysu.logging_config import configure_logging
from kodysu.models import SearchResponse, SearchResult

__all__ = [
    "__version__",
    "CachedKodySuClient",
    "KodySuAuthenticationError",
    "KodySuClient",
    "KodySuConfigurationError",
    "KodySuError",
    "KodySuErrorCode",
    "KodySuHttpError",
    "KodySuSettings",
    "KodySuValidationError",
    "PhoneNumber",
    "PhoneType",
    "SearchResponse",
    "SearchResult",
    "TTLCache",
    "configure_logging",
    "load_settings",
    "normalize",
    "normalize_all",
    "open_client",
]

__version__ = "1.0.0"
