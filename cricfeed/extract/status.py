"""
Status text heuristics.

Upstream exposes several status strings per match (list page, header, mini
score) with different levels of detail. We keep the most informative one and
classify the match lifecycle from the combined text.
"""

import re
from typing import Optional

from cricfeed.extract.text import select_best
from cricfeed.models import MatchStatusType

_SPECIAL_FINISH = re.compile(r"super over|bowl out|eliminator")
_RESULT = re.compile(
    r"(won by|won|beats|beat|defeat|defeated|match over|result|by\s+\d+\s+runs|by\s+\d+\s+wickets)"
)
_TIED = re.compile(r"(match tied|tied|tie)")
_IN_PROGRESS = re.compile(r"(stumps|day\s*\d|innings|need|trail|lead|lunch|tea)")

_COMPLETE_TEXT = re.compile(
    r"(won|drawn|tied|abandoned|abandon|no result|match over|complete|completed)"
)
_UPCOMING_TEXT = re.compile(
    r"(preview|upcoming|yet to begin|scheduled|schedule|starts at|start at)"
)
_LIVE_TEXT = re.compile(r"(stumps|day\s*\d|innings|need|trail|lead|lunch|tea|live)")


def normalize_status(value: Optional[str]) -> str:
    if not value:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def status_priority(status: str) -> int:
    normalized = status.lower()
    if not normalized or normalized == "-":
        return -1

    score = len(normalized)
    if _SPECIAL_FINISH.search(normalized):
        score += 120
    if _RESULT.search(normalized):
        score += 60
    if _TIED.search(normalized):
        score += 8
    if _IN_PROGRESS.search(normalized):
        score += 20
    return score


def pick_best_status(*candidates: Optional[str]) -> str:
    """
    Most informative status among ``candidates``, or "-" if none is usable.

    Candidates are deduplicated case-insensitively; on a duplicate the later
    spelling is kept. Ties go to the first distinct status seen.
    """
    unique: dict[str, str] = {}
    for value in candidates:
        normalized = normalize_status(value)
        if normalized:
            unique[normalized.lower()] = normalized

    scored = [status for status in unique.values() if status_priority(status) >= 0]
    return select_best(scored, status_priority) or "-"


def has_usable_status(status: Optional[str]) -> bool:
    normalized = normalize_status(status)
    return bool(normalized) and normalized != "-" and "status unavailable" not in normalized.lower()


def derive_status_type(
    status: Optional[str] = "",
    state: Optional[str] = "",
    title: Optional[str] = "",
    has_score: bool = False,
) -> MatchStatusType:
    """
    complete > upcoming > live (score present or in-play words) > upcoming.

    Completion words win even when live words are also present, since a
    finished match's text often still mentions "need" or "innings".
    """
    text = f"{status or ''} {state or ''} {title or ''}".lower()

    if _COMPLETE_TEXT.search(text):
        return MatchStatusType.COMPLETE
    if _UPCOMING_TEXT.search(text):
        return MatchStatusType.UPCOMING
    if has_score:
        return MatchStatusType.LIVE
    if _LIVE_TEXT.search(text):
        return MatchStatusType.LIVE
    return MatchStatusType.UPCOMING
