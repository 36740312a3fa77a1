"""
Small string helpers shared by every extractor: entity decoding, slugs,
normalized keys for fuzzy team/player matching, and the generic
"pick the best of N candidates" reduction.
"""

import html
import re
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

_CAPTAIN_KEEPER_SUFFIX = re.compile(r"\s*\((?:c|wk|c,\s*wk|wk,\s*c)\)\s*$", re.IGNORECASE)


def decode_html_entities(value: str) -> str:
    return html.unescape(value)


def clean_text(value: str) -> str:
    """Decode entities and collapse runs of whitespace."""
    return re.sub(r"\s+", " ", decode_html_entities(value)).strip()


def safe_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip()


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    slug = re.sub(r"-{2,}", "-", slug)
    return slug or "match"


def fallback_id_from_name(name: str) -> str:
    """Derive an id from a display name. Not stable if upstream reformats the name."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower())


def normalize_team_key(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (value or "").lower())


def normalize_player_name(value: str) -> str:
    """Strip a trailing captain/keeper tag: 'Rohit Sharma (c)' -> 'Rohit Sharma'."""
    return _CAPTAIN_KEEPER_SUFFIX.sub("", value or "").strip()


def normalize_player_key(value: str) -> str:
    return re.sub(r"\s+", " ", normalize_player_name(value).lower())


def team_names_likely_match(innings_team: str, team_name: str, team_short: str = "") -> bool:
    """
    Equality-or-containment match between a scorecard team label and a known team.

    Containment against the full name needs more than 3 characters and against
    the short name more than 1; shorter keys ("A", "SA") match everything.
    """
    innings_key = normalize_team_key(innings_team)
    team_key = normalize_team_key(team_name)
    short_key = normalize_team_key(team_short)

    if not innings_key:
        return False

    if innings_key == team_key or innings_key == short_key:
        return True

    if len(team_key) > 3 and (team_key in innings_key or innings_key in team_key):
        return True

    if len(short_key) > 1 and (short_key in innings_key or innings_key in short_key):
        return True

    return False


def select_best(candidates: Iterable[T], score_fn: Callable[[T], float]) -> Optional[T]:
    """Highest-scoring candidate; the earliest one wins ties. None when empty."""
    best: Optional[T] = None
    best_score: Optional[float] = None

    for candidate in candidates:
        score = score_fn(candidate)
        if best_score is None or score > best_score:
            best = candidate
            best_score = score

    return best
