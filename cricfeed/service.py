"""
Pure entry points: raw page text in, typed match views out.

Nothing here performs I/O. ``cricfeed.feed.fetcher`` fetches the pages and
calls these functions; tests and the snapshot script call them directly with
saved HTML/JSON.
"""

import json
import logging
import math
from typing import Any, Iterable, Optional

from cricfeed.errors import InvalidMatchIdError, UpstreamFetchError
from cricfeed.extract.flags import get_team_flag_url
from cricfeed.extract.live_state import (
    derive_live_state_from_innings,
    parse_live_state_from_commentary_payload,
    parse_live_state_from_html,
    pick_preferred_live_state,
)
from cricfeed.extract.match_links import (
    build_live_url,
    extract_match_id_from_url,
    get_short_name,
    normalize_title,
    parse_match_links,
    parse_title_meta,
)
from cricfeed.extract.players import (
    extract_team_players_from_commentary_payload,
    extract_team_players_from_html,
    merge_team_players,
)
from cricfeed.extract.scorecard import parse_scorecard_details
from cricfeed.extract.status import derive_status_type, has_usable_status, pick_best_status
from cricfeed.extract.summaries import parse_embedded_summaries
from cricfeed.extract.text import normalize_player_key, safe_text, team_names_likely_match
from cricfeed.extract.win_prediction import parse_win_prediction_from_html
from cricfeed.models import (
    MatchDetailData,
    MatchesData,
    MatchInnings,
    MatchLink,
    MatchListItem,
    MatchStatusType,
    MatchSummary,
    TeamPlayer,
    TeamSnapshot,
)

logger = logging.getLogger(__name__)

LIST_FLAG_SIZE = 40


# =========================================================================== #
#  Match list
# =========================================================================== #


def _team_snapshot(name: str, short_name: str, score: str) -> TeamSnapshot:
    return TeamSnapshot(
        name=name,
        short_name=short_name,
        score=score,
        flag_url=get_team_flag_url(name, short_name, LIST_FLAG_SIZE),
    )


def build_match_item(link: MatchLink, summary: Optional[MatchSummary] = None) -> Optional[MatchListItem]:
    """List item from an anchor, enriched by the embedded summary when one exists."""
    match_id = extract_match_id_from_url(link.url)
    if match_id is None:
        return None

    meta = parse_title_meta(link.title)
    team1 = safe_text(summary.team1 if summary else None) or safe_text(meta.team1)
    team2 = safe_text(summary.team2 if summary else None) or safe_text(meta.team2)
    team1_short = safe_text(summary.team1_short_name if summary else None) or get_short_name(team1)
    team2_short = safe_text(summary.team2_short_name if summary else None) or get_short_name(team2)
    team1_score = safe_text(summary.team1_score if summary else None)
    team2_score = safe_text(summary.team2_score if summary else None)

    state = safe_text(summary.state if summary else None)
    status = pick_best_status(summary.status if summary else None, meta.status, state)
    match_desc = safe_text(summary.match_desc if summary else None) or safe_text(meta.match_desc)

    return MatchListItem(
        id=str(match_id),
        title=normalize_title(link.title, match_desc),
        match_desc=match_desc,
        series=safe_text(summary.series_name if summary else None),
        venue=safe_text(summary.venue if summary else None),
        team1=_team_snapshot(team1 or "Team 1", team1_short, team1_score),
        team2=_team_snapshot(team2 or "Team 2", team2_short, team2_score),
        status=status,
        state=state,
        status_type=derive_status_type(status, state, link.title, bool(team1_score or team2_score)),
        match_url=link.url,
    )


def build_match_item_from_summary(summary: MatchSummary) -> MatchListItem:
    team1 = safe_text(summary.team1) or "Team 1"
    team2 = safe_text(summary.team2) or "Team 2"
    match_desc = safe_text(summary.match_desc)
    state = safe_text(summary.state)
    status = pick_best_status(summary.status, summary.state)
    title = f"{team1} vs {team2}" + (f", {match_desc}" if match_desc else "")
    team1_score = safe_text(summary.team1_score)
    team2_score = safe_text(summary.team2_score)

    return MatchListItem(
        id=str(summary.match_id),
        title=title,
        match_desc=match_desc,
        series=safe_text(summary.series_name),
        venue=safe_text(summary.venue),
        team1=_team_snapshot(team1, safe_text(summary.team1_short_name) or get_short_name(team1), team1_score),
        team2=_team_snapshot(team2, safe_text(summary.team2_short_name) or get_short_name(team2), team2_score),
        status=status,
        state=state,
        status_type=derive_status_type(status, state, title, bool(team1_score or team2_score)),
        match_url=build_live_url(summary.match_id, team1, team2, match_desc),
    )


def count_filled_fields(item: MatchListItem) -> int:
    fields = (
        item.match_desc,
        item.series,
        item.venue,
        item.team1.name,
        item.team2.name,
        item.team1.score,
        item.team2.score,
        item.status,
        item.state,
    )
    return sum(1 for value in fields if value.strip())


def is_live_like(item: MatchListItem) -> bool:
    return item.status_type == MatchStatusType.LIVE or bool(item.team1.score or item.team2.score)


def pick_better_match(current: MatchListItem, incoming: MatchListItem) -> MatchListItem:
    """Live signals beat none; otherwise the item with more filled fields wins (``current`` on ties)."""
    if is_live_like(incoming) and not is_live_like(current):
        return incoming
    if is_live_like(current) and not is_live_like(incoming):
        return current
    return incoming if count_filled_fields(incoming) > count_filled_fields(current) else current


def upsert_match(matches: dict[str, MatchListItem], item: MatchListItem) -> None:
    existing = matches.get(item.id)
    matches[item.id] = item if existing is None else pick_better_match(existing, item)


def _match_id_sort_key(item: MatchListItem) -> int:
    return int(item.id) if item.id.isdigit() else 0


def get_matches_data(live_html: Optional[str], upcoming_html: Optional[str]) -> MatchesData:
    """
    Reconcile both list pages into live/upcoming/recent lists, newest id first.

    ``None`` marks a page that could not be fetched. One page is enough; both
    missing raises ``UpstreamFetchError``.
    """
    if live_html is None and upcoming_html is None:
        raise UpstreamFetchError("Both the live and upcoming list pages are unavailable")

    pages = [html for html in (live_html, upcoming_html) if html]
    summary_maps = [parse_embedded_summaries(html) for html in pages]
    matches: dict[str, MatchListItem] = {}

    for html in pages:
        for link in parse_match_links(html):
            match_id = extract_match_id_from_url(link.url)
            if match_id is None:
                continue
            summary = next((summaries[match_id] for summaries in summary_maps if match_id in summaries), None)
            item = build_match_item(link, summary)
            if item is not None:
                upsert_match(matches, item)

    for summaries in summary_maps:
        for summary in summaries.values():
            upsert_match(matches, build_match_item_from_summary(summary))

    items = sorted(
        (item for item in matches.values() if has_usable_status(item.status)),
        key=_match_id_sort_key,
        reverse=True,
    )
    logger.info(f"Reconciled {len(items)} matches from {len(pages)} list page(s)")

    return MatchesData(
        live=[item for item in items if item.status_type == MatchStatusType.LIVE],
        upcoming=[item for item in items if item.status_type == MatchStatusType.UPCOMING],
        recent=[item for item in items if item.status_type == MatchStatusType.COMPLETE],
    )


def find_match_context(
    match_id: int, live_html: Optional[str], upcoming_html: Optional[str]
) -> tuple[Optional[MatchLink], Optional[MatchSummary]]:
    """
    The list-page anchor and embedded summary for ``match_id``.

    When no anchor exists but a summary does, a link is synthesized from the
    summary so callers still get a title and a canonical URL.
    """
    pages = [html for html in (live_html, upcoming_html) if html]

    link = next(
        (
            candidate
            for html in pages
            for candidate in parse_match_links(html)
            if extract_match_id_from_url(candidate.url) == match_id
        ),
        None,
    )

    summary = None
    for html in pages:
        summary = parse_embedded_summaries(html).get(match_id)
        if summary is not None:
            break

    if link is None and summary is not None:
        link = MatchLink(
            title=build_match_item_from_summary(summary).title,
            url=build_live_url(
                summary.match_id, summary.team1 or "team-1", summary.team2 or "team-2", summary.match_desc or ""
            ),
        )

    return link, summary


# =========================================================================== #
#  Match detail
# =========================================================================== #


def parse_match_id(match_id: Any) -> int:
    """Positive whole number given as an int or as text ("123", "123.0")."""
    text = str(match_id).strip() if match_id is not None else ""
    try:
        value = float(text)
    except ValueError:
        raise InvalidMatchIdError(f"Invalid match id: {match_id!r}") from None
    if not math.isfinite(value) or not value.is_integer() or value <= 0:
        raise InvalidMatchIdError(f"Invalid match id: {match_id!r}")
    return int(value)


def _batting_squad(
    innings: MatchInnings, team1: TeamSnapshot, team2: TeamSnapshot, squads: tuple[list, list]
) -> list[TeamPlayer]:
    if team_names_likely_match(innings.batting_team, team1.name, team1.short_name):
        return squads[0]
    if team_names_likely_match(innings.batting_team, team2.name, team2.short_name):
        return squads[1]
    return []


def add_yet_to_bat(
    innings: list[MatchInnings],
    team1: TeamSnapshot,
    team2: TeamSnapshot,
    team1_players: list[TeamPlayer],
    team2_players: list[TeamPlayer],
) -> list[MatchInnings]:
    """Fill each innings' yet-to-bat list: the batting side's non-substitutes who have not batted."""
    result = []
    for entry in innings:
        squad = _batting_squad(entry, team1, team2, (team1_players, team2_players))
        if not squad:
            result.append(entry)
            continue

        batted = {normalize_player_key(batter.name) for batter in entry.batsmen}
        seen: set[str] = set()
        yet_to_bat = []
        for player in squad:
            key = normalize_player_key(player.name)
            if player.substitute or not key or key in batted or key in seen:
                continue
            seen.add(key)
            yet_to_bat.append(player.name)

        result.append(entry.model_copy(update={"yet_to_bat": yet_to_bat}))
    return result


def _load_payload(payload: Any) -> Any:
    if not isinstance(payload, (str, bytes)):
        return payload
    try:
        return json.loads(payload)
    except ValueError as e:
        logger.warning(f"Skipping unparsable commentary payload: {e}")
        return None


def get_match_detail(
    match_id: Any,
    scorecard_html: Optional[str],
    live_page_html: Optional[str] = None,
    commentary_payloads: Iterable[Any] = (),
    fallback_summary: Optional[MatchSummary] = None,
    fallback_title: Optional[str] = None,
) -> MatchDetailData:
    """
    Full detail view for one match.

    Only the scorecard page is mandatory. The live page and commentary
    payloads (JSON text or already-decoded objects) each add what they can;
    a missing or broken one is skipped.
    """
    numeric_id = parse_match_id(match_id)
    if not scorecard_html:
        raise UpstreamFetchError(f"No scorecard page for match {numeric_id}")

    detail = parse_scorecard_details(str(numeric_id), scorecard_html, fallback_summary, fallback_title)
    is_live = detail.status_type == MatchStatusType.LIVE

    team1_players = detail.team1_players
    team2_players = detail.team2_players
    # Mini-score blobs are trusted whatever the status says (toss stage, just finished).
    live_state = parse_live_state_from_html(scorecard_html)
    if live_page_html:
        live_state = pick_preferred_live_state(live_state, parse_live_state_from_html(live_page_html))

    if live_page_html:
        page_team1, page_team2 = extract_team_players_from_html(live_page_html)
        team1_players = merge_team_players(team1_players, page_team1)
        team2_players = merge_team_players(team2_players, page_team2)

    for raw_payload in commentary_payloads:
        payload = _load_payload(raw_payload)
        if payload is None:
            continue

        if is_live:
            live_state = pick_preferred_live_state(live_state, parse_live_state_from_commentary_payload(payload))

        payload_team1, payload_team2 = extract_team_players_from_commentary_payload(payload)
        team1_players = merge_team_players(team1_players, payload_team1)
        team2_players = merge_team_players(team2_players, payload_team2)

    win_prediction = None
    if is_live:
        live_state = pick_preferred_live_state(live_state, derive_live_state_from_innings(detail.innings))
        win_prediction = parse_win_prediction_from_html(
            live_page_html or scorecard_html, detail.team1, detail.team2
        ) or (
            parse_win_prediction_from_html(scorecard_html, detail.team1, detail.team2) if live_page_html else None
        )

    innings = add_yet_to_bat(detail.innings, detail.team1, detail.team2, team1_players, team2_players)

    return detail.model_copy(
        update={
            "innings": innings,
            "team1_players": team1_players,
            "team2_players": team2_players,
            "live_state": live_state,
            "win_prediction": win_prediction,
        }
    )
