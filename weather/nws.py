"""
Paced requests against the National Weather Service API.

Every request waits ``REQUEST_DELAY`` seconds first. A 429 answer is retried
after its ``Retry-After`` delay, at most ``MAX_ATTEMPTS`` times in total;
a server asking for more than ``MAX_RETRY_AFTER`` seconds is not waited for.
Failures are logged and reported to the caller as ``None``.
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

NWS_API_BASE = "https://api.weather.gov"
USER_AGENT = "weather-app/1.0"
REQUEST_DELAY = 0.5
DEFAULT_RETRY_AFTER = 5.0
MAX_RETRY_AFTER = 60.0
MAX_ATTEMPTS = 5
TIMEOUT = 30.0

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/geo+json",
}


class HttpError(Exception):
    def __init__(self, status: int, url: str):
        super().__init__(f"HTTP error {status} for {url}")
        self.status = status
        self.url = url


class RateLimitExceeded(Exception):
    def __init__(self, url: str, attempts: int, reason: str = ""):
        super().__init__(reason or f"still rate limited after {attempts} attempts: {url}")
        self.url = url
        self.attempts = attempts


def retry_after_seconds(response: httpx.Response) -> float:
    value = response.headers.get("Retry-After")
    if not value:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER
    if not math.isfinite(seconds):
        return DEFAULT_RETRY_AFTER
    return max(seconds, 0.0)


async def _fetch(
    client: httpx.AsyncClient,
    url: str,
    sleep: Callable[[float], Awaitable[Any]],
    max_attempts: int,
) -> Dict[str, Any]:
    for attempt in range(1, max_attempts + 1):
        await sleep(REQUEST_DELAY)
        r = await client.get(url, headers=HEADERS)
        if r.status_code == 429:
            if attempt == max_attempts:
                break
            delay = retry_after_seconds(r)
            if delay > MAX_RETRY_AFTER:
                raise RateLimitExceeded(url, attempt, f"Retry-After of {delay}s exceeds {MAX_RETRY_AFTER}s: {url}")
            logger.warning("Rate limited, retrying in %ss: %s", delay, url)
            await sleep(delay)
            continue
        if not r.is_success:
            raise HttpError(r.status_code, url)
        return r.json()
    raise RateLimitExceeded(url, max_attempts)


async def make_nws_request(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    max_attempts: int = MAX_ATTEMPTS,
) -> Optional[Dict[str, Any]]:
    """GET ``url`` and return its decoded JSON, or None on any failure."""
    logger.debug("Requesting %s", url)
    try:
        if client is not None:
            data = await _fetch(client, url, sleep, max_attempts)
        else:
            async with httpx.AsyncClient(follow_redirects=True, timeout=TIMEOUT) as owned:
                data = await _fetch(owned, url, sleep, max_attempts)
    except (HttpError, RateLimitExceeded, httpx.HTTPError, ValueError) as e:
        logger.error("NWS request failed: %s (%s)", url, e)
        return None
    logger.debug("Request succeeded: %s", url)
    return data
