# file: tests/conftest.py
from __future__ import annotations

from typing import Any

import httpx
import pytest_asyncio

from fakes import API_KEY, BASE_URL, FakeKodySu, Responder
from kodysu.client import KodySuClient
from kodysu.net.http import HttpClientConfig


@pytest_asyncio.fixture
async def make_client():
    """Factory for a `KodySuClient` wired to a `FakeKodySu` (no retries)."""

    opened: list[httpx.AsyncClient] = []

    def _make(responder: Responder, **kwargs: Any) -> tuple[KodySuClient, FakeKodySu]:
        fake = FakeKodySu(responder)
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake))
        opened.append(http)
        client = KodySuClient(
            client=http,
            http_config=HttpClientConfig(max_retries=0),
            api_key=API_KEY,
            base_url=BASE_URL,
            **kwargs,
        )
        return client, fake

    yield _make
    for http in opened:
        await http.aclose()
