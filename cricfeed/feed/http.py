"""
Thin httpx transport for the upstream pages.

Bounded attempts through tenacity, with a per-request timeout. Only 408, 429
and 5xx responses (and transport errors) are retried; anything else fails
straight away.
"""

import json
import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from cricfeed.config import settings
from cricfeed.errors import PayloadParseError, UpstreamFetchError

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
JSON_ACCEPT = "application/json,text/plain,*/*"


def should_retry(status_code: int) -> bool:
    return status_code in (408, 429) or status_code >= 500


def make_client() -> httpx.AsyncClient:
    """Client with browser-like default headers; the caller owns its lifetime."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept-Language": settings.accept_language,
            "Cache-Control": "no-cache",
        },
    )


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return should_retry(error.response.status_code)
    return isinstance(error, httpx.TransportError)


async def fetch_text(client: httpx.AsyncClient, url: str, accept: str) -> str:
    attempts = max(1, settings.max_attempts)

    def log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            f"Retrying {url} after {retry_state.outcome.exception()!r} "
            f"(attempt {retry_state.attempt_number}/{attempts})"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=settings.retry_backoff_seconds),
        retry=retry_if_exception(_is_retryable),
        before_sleep=log_retry,
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                response = await client.get(url, headers={"Accept": accept})
                response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        logger.error(f"Fetch failed for {url} with status {status_code}")
        raise UpstreamFetchError(f"Failed to fetch {url} ({status_code})") from e
    except httpx.TransportError as e:
        logger.error(f"Fetch failed for {url}: {e}")
        raise UpstreamFetchError(f"Failed to fetch {url}: {e}") from e

    return response.text


async def fetch_html(client: httpx.AsyncClient, url: str) -> str:
    return await fetch_text(client, url, HTML_ACCEPT)


async def fetch_json(client: httpx.AsyncClient, url: str) -> Any:
    text = await fetch_text(client, url, JSON_ACCEPT)
    try:
        return json.loads(text)
    except ValueError as e:
        logger.error(f"Unparsable JSON from {url}: {e}")
        raise PayloadParseError(f"Failed to parse JSON response from {url}: {e}") from e
