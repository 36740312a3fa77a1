"""
Win probability scraped from page text.

The widget renders something like "IND 62% ... AUS 38%". We read a percent
next to each team's label and accept the pair only if it plausibly sums to
100; failing that we look inside "win ... prediction/probability" snippets
for two distinct percentages.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup

from cricfeed.extract.text import clean_text
from cricfeed.models import MatchWinPrediction, TeamSnapshot

_PERCENT = re.compile(r"(\d{1,3}(?:\.\d+)?)\s*%")
_CONTEXT = re.compile(
    r"(win[^.]{0,160}prediction[^.]{0,160}|win[^.]{0,160}probability[^.]{0,160}|prediction[^.]{0,120}win[^.]{0,120})",
    re.IGNORECASE,
)


def normalize_percent(value: str) -> Optional[str]:
    try:
        parsed = float(value)
    except ValueError:
        return None

    if parsed < 0 or parsed > 100:
        return None

    if parsed.is_integer():
        return f"{int(parsed)}%"
    return f"{parsed:.1f}".removesuffix(".0") + "%"


def _read_percent_near_label(text: str, label: str) -> Optional[str]:
    if not label:
        return None

    escaped = re.escape(label)
    patterns = (
        re.compile(rf"{escaped}[^\d%]{{0,24}}(\d{{1,3}}(?:\.\d+)?)\s*%", re.IGNORECASE),
        re.compile(rf"(\d{{1,3}}(?:\.\d+)?)\s*%[^a-z0-9]{{0,24}}{escaped}", re.IGNORECASE),
    )
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            percent = normalize_percent(match.group(1))
            if percent:
                return percent
    return None


def _read_percent_by_team(text: str, team: TeamSnapshot) -> Optional[str]:
    labels = sorted(
        (label for label in (clean_text(team.short_name), clean_text(team.name)) if label),
        key=len,
        reverse=True,
    )
    for label in labels:
        found = _read_percent_near_label(text, label)
        if found:
            return found
    return None


def _is_likely_pair(first: str, second: str) -> bool:
    total = float(first.rstrip("%")) + float(second.rstrip("%"))
    return 90 <= total <= 110


def _two_percents(snippet: str) -> list[str]:
    values: list[str] = []
    for match in _PERCENT.finditer(snippet):
        percent = normalize_percent(match.group(1))
        if percent and percent not in values:
            values.append(percent)
    return values[:2]


def parse_win_prediction_from_html(
    html: str, team1: TeamSnapshot, team2: TeamSnapshot
) -> Optional[MatchWinPrediction]:
    if not html:
        return None

    plain_text = clean_text(BeautifulSoup(html, "html.parser").get_text(" "))
    if not plain_text:
        return None

    team1_percent = _read_percent_by_team(plain_text, team1)
    team2_percent = _read_percent_by_team(plain_text, team2)
    if team1_percent and team2_percent and _is_likely_pair(team1_percent, team2_percent):
        return MatchWinPrediction(team1_percent=team1_percent, team2_percent=team2_percent)

    for match in _CONTEXT.finditer(plain_text):
        percents = _two_percents(match.group(0))
        if len(percents) == 2 and _is_likely_pair(*percents):
            return MatchWinPrediction(team1_percent=percents[0], team2_percent=percents[1])

    return None
