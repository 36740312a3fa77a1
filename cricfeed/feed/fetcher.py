"""
Fetch-then-parse orchestration.

Fetches run concurrently and tolerate partial failure: a failed optional
source is logged and left out, and only the mandatory ones (one of the two
list pages, the scorecard page) can fail a request.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from cricfeed import service
from cricfeed.config import settings
from cricfeed.errors import CricketDataError, UpstreamFetchError
from cricfeed.extract.match_links import to_scorecard_url
from cricfeed.feed.http import fetch_html, fetch_json, make_client
from cricfeed.models import MatchDetailData, MatchesData

logger = logging.getLogger(__name__)


def scorecard_url(match_id: int) -> str:
    return f"{settings.cricbuzz_base_url}/live-cricket-scorecard/{match_id}"


def live_page_url(match_id: int) -> str:
    return f"{settings.cricbuzz_base_url}/live-cricket-scores/{match_id}"


def commentary_urls(match_id: int) -> list[str]:
    return [
        f"{settings.cricbuzz_base_url}/match-api/{match_id}/commentary.json",
        f"{settings.cricbuzz_base_url}/match-api/{match_id}/commentary-full.json",
    ]


def _ok_or_none(result: Any, label: str) -> Any:
    if isinstance(result, BaseException):
        logger.warning(f"{label} unavailable: {result}")
        return None
    return result


async def _fetch_list_pages(client: httpx.AsyncClient) -> tuple[Optional[str], Optional[str]]:
    live, upcoming = await asyncio.gather(
        fetch_html(client, settings.live_url),
        fetch_html(client, settings.upcoming_url),
        return_exceptions=True,
    )
    return _ok_or_none(live, "Live list page"), _ok_or_none(upcoming, "Upcoming list page")


async def _first_successful_page(client: httpx.AsyncClient, urls: list[str]) -> tuple[Optional[str], Optional[Exception]]:
    """Try ``urls`` in order; return the first page fetched and the last error seen."""
    last_error: Optional[Exception] = None
    for url in dict.fromkeys(urls):
        try:
            return await fetch_html(client, url), None
        except CricketDataError as e:
            logger.warning(f"Page candidate failed: {url}")
            last_error = e
    return None, last_error


async def fetch_matches_data(client: Optional[httpx.AsyncClient] = None) -> MatchesData:
    if client is None:
        async with make_client() as owned:
            return await fetch_matches_data(owned)

    live_html, upcoming_html = await _fetch_list_pages(client)
    return service.get_matches_data(live_html, upcoming_html)


async def fetch_match_detail(match_id: Any, client: Optional[httpx.AsyncClient] = None) -> MatchDetailData:
    numeric_id = service.parse_match_id(match_id)

    if client is None:
        async with make_client() as owned:
            return await fetch_match_detail(numeric_id, owned)

    live_html, upcoming_html = await _fetch_list_pages(client)
    link, summary = service.find_match_context(numeric_id, live_html, upcoming_html)

    scorecard_candidates = ([to_scorecard_url(link.url)] if link else []) + [scorecard_url(numeric_id)]
    scorecard_html, error = await _first_successful_page(client, scorecard_candidates)
    if scorecard_html is None:
        logger.error(f"No scorecard page could be fetched for match {numeric_id}")
        raise error or UpstreamFetchError(f"Could not fetch scorecard for match {numeric_id}")

    live_candidates = ([link.url] if link else []) + [live_page_url(numeric_id)]
    live_result, *commentary_results = await asyncio.gather(
        _first_successful_page(client, live_candidates),
        *(fetch_json(client, url) for url in commentary_urls(numeric_id)),
        return_exceptions=True,
    )
    live_page = _ok_or_none(live_result, "Live page")
    live_page_html = live_page[0] if live_page else None
    commentary_payloads = [
        payload
        for payload in (_ok_or_none(result, "Commentary payload") for result in commentary_results)
        if payload is not None
    ]

    return service.get_match_detail(
        numeric_id,
        scorecard_html,
        live_page_html=live_page_html,
        commentary_payloads=commentary_payloads,
        fallback_summary=summary,
        fallback_title=link.title if link else None,
    )
