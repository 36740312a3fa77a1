"""
Per-match summaries embedded in the list pages.

Each match on a list page is backed by a ``matchInfo`` blob, usually followed
shortly by a ``matchScore`` blob for the same match. We pair them by
position: the score must appear before the next ``matchInfo`` (or within a
fixed window when there is none).
"""

import logging
import re
from typing import Any, Optional

from cricfeed.extract.json_blobs import extract_balanced, parse_escaped_json
from cricfeed.extract.overs import format_overs_label
from cricfeed.extract.probes import first_text, is_record, to_text
from cricfeed.models import MatchSummary

logger = logging.getLogger(__name__)

SCORE_WINDOW_CHARS = 4000

_MATCH_INFO_TOKEN = re.compile(r'(?:\\"matchInfo\\"|"matchInfo"):\{')
_MATCH_SCORE_TOKEN = re.compile(r'(?:\\"matchScore\\"|"matchScore"):\{')


def format_team_score(team_score: Any) -> Optional[str]:
    """``{"inngs1": {...}, "inngs2": {...}}`` -> "250/4 (50 Overs) & 120/3 (30.2 Overs)"."""
    if not is_record(team_score):
        return None

    innings = [entry for entry in team_score.values() if is_record(entry)]
    if not innings:
        return None

    return " & ".join(
        f"{to_text(entry.get('runs')) or '-'}/{to_text(entry.get('wickets')) or '-'} "
        f"({format_overs_label(entry.get('overs'))})"
        for entry in innings
    )


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(to_text(value))
    except ValueError:
        return None


def _build_summary(match_id: int, info: dict, score: Optional[dict]) -> MatchSummary:
    team1 = info.get("team1") if is_record(info.get("team1")) else {}
    team2 = info.get("team2") if is_record(info.get("team2")) else {}
    venue_info = info.get("venueInfo") if is_record(info.get("venueInfo")) else {}
    venue = ", ".join(
        part for part in (first_text(venue_info, (key,)) for key in ("ground", "city", "country")) if part
    )
    score = score or {}

    return MatchSummary(
        match_id=match_id,
        team1=first_text(team1, ("teamName", "teamSName")) or None,
        team2=first_text(team2, ("teamName", "teamSName")) or None,
        team1_short_name=first_text(team1, ("teamSName",)) or None,
        team2_short_name=first_text(team2, ("teamSName",)) or None,
        team1_score=format_team_score(score.get("team1Score")),
        team2_score=format_team_score(score.get("team2Score")),
        series_name=first_text(info, ("seriesName",)) or None,
        match_desc=first_text(info, ("matchDesc",)) or None,
        match_format=first_text(info, ("matchFormat",)) or None,
        state=first_text(info, ("state",)) or None,
        status=first_text(info, ("status",)) or None,
        venue=venue or None,
        start_date=_to_float(info.get("startDate")),
    )


def parse_embedded_summaries(html: str) -> dict[int, MatchSummary]:
    """
    Summaries keyed by match id. A later summary for the same id replaces the
    earlier one only if the earlier has no team-1 score and the later does.
    """
    summaries: dict[int, MatchSummary] = {}
    if not html:
        return summaries

    for token in _MATCH_INFO_TOKEN.finditer(html):
        info_chunk = extract_balanced(html, token.end() - 1)
        if info_chunk is None:
            continue

        info = parse_escaped_json(info_chunk.text)
        if not is_record(info):
            continue

        match_id_text = to_text(info.get("matchId"))
        if not match_id_text.isdigit():
            continue
        match_id = int(match_id_text)

        next_info = _MATCH_INFO_TOKEN.search(html, info_chunk.end_index)
        window_end = next_info.start() if next_info else info_chunk.end_index + SCORE_WINDOW_CHARS
        score_token = _MATCH_SCORE_TOKEN.search(html, info_chunk.end_index, window_end)

        score = None
        if score_token:
            score_chunk = extract_balanced(html, score_token.end() - 1)
            if score_chunk is not None:
                parsed = parse_escaped_json(score_chunk.text)
                score = parsed if is_record(parsed) else None

        summary = _build_summary(match_id, info, score)
        existing = summaries.get(match_id)
        if existing is None or (not existing.team1_score and summary.team1_score):
            summaries[match_id] = summary

    logger.debug(f"Parsed {len(summaries)} embedded match summaries")
    return summaries
