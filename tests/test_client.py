# file: tests/test_client.py
from __future__ import annotations

import asyncio

import httpx
import pytest

from fakes import API_KEY, BASE_URL, echo_found, json_response, number_entry
from kodysu.client import KodySuClient
from kodysu.core.phone_type import PhoneType
from kodysu.core.search import build_search_url
from kodysu.errors import (
    KodySuAuthenticationError,
    KodySuConfigurationError,
    KodySuHttpError,
    KodySuValidationError,
)
from kodysu.net.http import HttpClientConfig


@pytest.mark.asyncio
async def test_search_phone_returns_matching_result(make_client) -> None:
    client, fake = make_client(
        lambda request: json_response(
            {
                "quota": 485,
                "numbers": [
                    number_entry(
                        "79161234567", operator="MTS", number_type=1, number_type_str="ru_mobile"
                    )
                ],
            }
        )
    )

    result = await client.search_phone("+7 916 123-45-67")

    assert result is not None
    assert result.phone_number == "79161234567"
    assert result.success is True
    assert result.operator == "MTS"
    assert result.phone_type is PhoneType.RUSSIAN_MOBILE
    assert fake.queried_numbers == ["79161234567"]


@pytest.mark.asyncio
async def test_request_url_shape(make_client) -> None:
    client, fake = make_client(echo_found)
    await client.search_phone("8 (916) 123-45-67")

    url = fake.requests[0].url
    assert fake.requests[0].method == "GET"
    assert url.host == "kody.test"
    assert url.path == "/api/v2.1/search.json"
    assert url.params["q"] == "89161234567"
    assert url.params["key"] == API_KEY


def test_build_search_url_encodes_and_replaces_path() -> None:
    url = build_search_url("https://kody.test/some/prefix", "79161234567", "a key&x=1")
    assert url == "https://kody.test/api/v2.1/search.json?q=79161234567&key=a%20key%26x%3D1"


@pytest.mark.asyncio
async def test_search_phone_not_found_returns_none(make_client) -> None:
    client, _ = make_client(lambda request: json_response({"quota": 484, "numbers": []}))
    assert await client.search_phone("79161234567") is None


@pytest.mark.parametrize("raw", ["", "   ", None, "no digits"])
@pytest.mark.asyncio
async def test_search_phone_without_digits_makes_no_request(make_client, raw) -> None:
    client, fake = make_client(echo_found)
    assert await client.search_phone(raw) is None
    assert fake.requests == []


@pytest.mark.asyncio
async def test_unsuccessful_entries_are_logged_and_skipped(make_client, caplog) -> None:
    client, _ = make_client(
        lambda request: json_response(
            {
                "quota": 10,
                "numbers": [
                    number_entry(
                        "79161234567",
                        success=False,
                        error_code="NOT_FOUND",
                        error_message="unknown range",
                    )
                ],
            }
        )
    )

    with caplog.at_level("WARNING", logger="kodysu"):
        result = await client.search_phone("79161234567")

    assert result is None
    assert "NOT_FOUND" in caplog.text


@pytest.mark.asyncio
async def test_result_for_a_different_number_is_not_returned(make_client) -> None:
    client, _ = make_client(
        lambda request: json_response({"quota": 1, "numbers": [number_entry("70000000000")]})
    )
    assert await client.search_phone("79161234567") is None


@pytest.mark.asyncio
async def test_server_echo_in_other_format_still_matches(make_client) -> None:
    client, _ = make_client(
        lambda request: json_response({"quota": 1, "numbers": [number_entry("+7 (916) 123-45-67")]})
    )
    result = await client.search_phone("79161234567")
    assert result is not None


@pytest.mark.asyncio
async def test_unauthorized_raises_authentication_error(make_client) -> None:
    client, _ = make_client(lambda request: httpx.Response(401, text="Invalid API key"))
    with pytest.raises(KodySuAuthenticationError):
        await client.search_phone("79161234567")


@pytest.mark.asyncio
async def test_limit_exceeded_raises_validation_error(make_client) -> None:
    client, _ = make_client(
        lambda request: json_response(
            {"error_code": "LIMIT_EXCEEDED", "error_message": "Daily quota used up"}
        )
    )
    with pytest.raises(KodySuValidationError) as exc_info:
        await client.search_phone("79161234567")
    assert exc_info.value.error_code == "LIMIT_EXCEEDED"


@pytest.mark.asyncio
async def test_server_error_raises_http_error(make_client) -> None:
    client, _ = make_client(lambda request: httpx.Response(500, text="Internal Server Error"))
    with pytest.raises(KodySuHttpError) as exc_info:
        await client.search_phone("79161234567")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_transport_errors_propagate_unchanged(make_client) -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_client(boom)
    with pytest.raises(httpx.ConnectError):
        await client.search_phone("79161234567")


@pytest.mark.asyncio
async def test_search_phones_with_duplicates_requests_each_number_once(make_client) -> None:
    client, fake = make_client(echo_found)

    results = await client.search_phones(["79991234567", "79991234567", "79992345678"])

    assert len(results) == 2
    assert sorted(fake.queried_numbers) == ["79991234567", "79992345678"]
    assert {r.phone_number for r in results} == {"79991234567", "79992345678"}


@pytest.mark.asyncio
async def test_search_phones_dedups_differently_formatted_numbers(make_client) -> None:
    client, fake = make_client(echo_found)

    results = await client.search_phones(["+7 916 123-45-67", "79161234567", "7-916-123-4567"])

    assert fake.queried_numbers == ["79161234567"]
    assert [r.phone_number for r in results] == ["79161234567"]


@pytest.mark.asyncio
async def test_search_phones_skips_not_found_numbers(make_client) -> None:
    def only_first(request: httpx.Request) -> httpx.Response:
        number = request.url.params["q"]
        numbers = [number_entry(number)] if number == "79991234567" else []
        return json_response({"quota": 5, "numbers": numbers})

    client, fake = make_client(only_first)
    results = await client.search_phones(["79991234567", "79992345678", "79993456789"])

    assert [r.phone_number for r in results] == ["79991234567"]
    assert len(fake.requests) == 3


@pytest.mark.asyncio
async def test_search_phones_empty_input_makes_no_request(make_client) -> None:
    client, fake = make_client(echo_found)
    assert await client.search_phones([]) == []
    assert await client.search_phones(["", "  ", "abc"]) == []
    assert fake.requests == []


@pytest.mark.asyncio
async def test_search_phones_none_input_is_rejected(make_client) -> None:
    client, fake = make_client(echo_found)
    with pytest.raises(KodySuConfigurationError):
        await client.search_phones(None)
    assert fake.requests == []


@pytest.mark.asyncio
async def test_search_phones_runs_lookups_concurrently(make_client) -> None:
    in_flight = 0
    peak = 0

    async def slow(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return echo_found(request)

    client, _ = make_client(slow)
    results = await client.search_phones([f"7999000000{i}" for i in range(5)])

    assert len(results) == 5
    assert peak == 5


@pytest.mark.asyncio
async def test_search_phones_fails_fast_and_cancels_the_rest(make_client) -> None:
    cancelled: list[str] = []

    async def responder(request: httpx.Request) -> httpx.Response:
        number = request.url.params["q"]
        if number == "79990000000":
            # Give the other lookups time to reach the server first.
            await asyncio.sleep(0.05)
            return httpx.Response(401)
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(number)
            raise
        return echo_found(request)

    client, _ = make_client(responder)
    with pytest.raises(KodySuAuthenticationError):
        await client.search_phones(["79990000000", "79990000001", "79990000002"])

    assert sorted(cancelled) == ["79990000001", "79990000002"]


@pytest.mark.asyncio
async def test_cancelling_a_batch_cancels_every_lookup(make_client) -> None:
    started: list[str] = []
    all_started = asyncio.Event()
    cancelled: list[str] = []

    async def hang(request: httpx.Request) -> httpx.Response:
        started.append(request.url.params["q"])
        if len(started) == 2:
            all_started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(request.url.params["q"])
            raise
        return echo_found(request)

    client, _ = make_client(hang)
    task = asyncio.create_task(client.search_phones(["79990000001", "79990000002"]))
    await all_started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert sorted(cancelled) == ["79990000001", "79990000002"]


@pytest.mark.asyncio
async def test_constructor_validates_configuration() -> None:
    async with httpx.AsyncClient() as http:
        with pytest.raises(KodySuConfigurationError):
            KodySuClient(client=http, http_config=HttpClientConfig(), api_key="")
        with pytest.raises(KodySuConfigurationError):
            KodySuClient(client=http, http_config=HttpClientConfig(), api_key=None)
        with pytest.raises(KodySuConfigurationError):
            KodySuClient(
                client=http, http_config=HttpClientConfig(), api_key="k", base_url="kody.su"
            )
        with pytest.raises(KodySuConfigurationError):
            KodySuClient(client=None, http_config=HttpClientConfig(), api_key="k")  # type: ignore[arg-type]

        client = KodySuClient(
            client=http, http_config=HttpClientConfig(), api_key="k", base_url=BASE_URL
        )
        assert client.base_url == BASE_URL
