"""Tests for the paced NWS request helper."""

import httpx
import pytest

from weather.nws import DEFAULT_RETRY_AFTER, MAX_RETRY_AFTER, REQUEST_DELAY, USER_AGENT, make_nws_request

pytestmark = pytest.mark.anyio

URL = "https://api.weather.gov/alerts/active?area=CA"


class Recorder:
    def __init__(self):
        self.sleeps = []

    async def __call__(self, seconds):
        self.sleeps.append(seconds)


def mock_client(*responses):
    seen = []
    queue = list(responses)

    def handler(request):
        seen.append(request)
        return queue.pop(0)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


async def test_success_sends_headers_after_pacing_delay():
    client, seen = mock_client(httpx.Response(200, json={"features": []}))
    sleep = Recorder()

    data = await make_nws_request(URL, client=client, sleep=sleep)

    assert data == {"features": []}
    assert sleep.sleeps == [REQUEST_DELAY]
    assert seen[0].headers["User-Agent"] == USER_AGENT
    assert seen[0].headers["Accept"] == "application/geo+json"


async def test_429_waits_retry_after_then_returns_retried_data():
    client, seen = mock_client(
        httpx.Response(429, headers={"Retry-After": "2"}),
        httpx.Response(200, json={"ok": True}),
    )
    sleep = Recorder()

    data = await make_nws_request(URL, client=client, sleep=sleep)

    assert data == {"ok": True}
    assert sleep.sleeps == [REQUEST_DELAY, 2.0, REQUEST_DELAY]
    assert [str(r.url) for r in seen] == [URL, URL]


async def test_429_without_retry_after_uses_default():
    client, _ = mock_client(httpx.Response(429), httpx.Response(200, json={}))
    sleep = Recorder()

    await make_nws_request(URL, client=client, sleep=sleep)

    assert DEFAULT_RETRY_AFTER in sleep.sleeps


async def test_retries_are_capped():
    client, seen = mock_client(*[httpx.Response(429, headers={"Retry-After": "1"}) for _ in range(3)])

    data = await make_nws_request(URL, client=client, sleep=Recorder(), max_attempts=3)

    assert data is None
    assert len(seen) == 3


async def test_http_error_returns_none():
    client, seen = mock_client(httpx.Response(404, json={"detail": "not found"}))

    assert await make_nws_request(URL, client=client, sleep=Recorder()) is None
    assert len(seen) == 1


async def test_transport_error_returns_none():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    assert await make_nws_request(URL, client=client, sleep=Recorder()) is None


@pytest.mark.parametrize("value", ["inf", "nan", "-inf"])
async def test_non_finite_retry_after_uses_default(value):
    client, seen = mock_client(
        httpx.Response(429, headers={"Retry-After": value}),
        httpx.Response(200, json={"ok": True}),
    )
    sleep = Recorder()

    data = await make_nws_request(URL, client=client, sleep=sleep)

    assert data == {"ok": True}
    assert sleep.sleeps == [REQUEST_DELAY, DEFAULT_RETRY_AFTER, REQUEST_DELAY]
    assert len(seen) == 2


async def test_oversized_retry_after_gives_up_without_waiting():
    client, seen = mock_client(httpx.Response(429, headers={"Retry-After": "1e12"}))
    sleep = Recorder()

    assert await make_nws_request(URL, client=client, sleep=sleep) is None
    assert sleep.sleeps == [REQUEST_DELAY]
    assert all(s <= MAX_RETRY_AFTER for s in sleep.sleeps)
    assert len(seen) == 1
