"""
Match links on the list pages: ``<a href="/live-cricket-scores/{id}/{slug}">``
anchors, their titles, and the URL/title conventions built on them.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup

from cricfeed.config import settings
from cricfeed.extract.text import clean_text, slugify
from cricfeed.models import MatchLink, TitleMeta

_LIVE_PATH = "/live-cricket-scores/"
_MATCH_PATH = re.compile(r"^/live-cricket-scores/\d+/.+")
_MATCH_ID = re.compile(r"/live-cricket-scores/(\d+)/")


def extract_match_id_from_url(url: str) -> Optional[int]:
    match = _MATCH_ID.search(url or "")
    return int(match.group(1)) if match else None


def to_scorecard_url(live_url: str) -> str:
    return live_url.replace(_LIVE_PATH, "/live-cricket-scorecard/", 1)


def build_live_url(match_id: int, team1: str, team2: str, match_desc: str = "") -> str:
    slug_source = " ".join(part for part in (team1, "vs", team2, match_desc) if part)
    return f"{settings.cricbuzz_base_url}{_LIVE_PATH}{match_id}/{slugify(slug_source)}"


def _title_from_path(path: str) -> str:
    slug = re.sub(r"^/live-cricket-scores/\d+/", "", path).rstrip("/")
    return slug.replace("-", " ")


def parse_match_links(html: str) -> list[MatchLink]:
    """
    Every match anchor on the page, one per URL. The title attribute is
    preferred over the slug; the longest title seen for a URL wins and
    generic "Live Score" anchors are ignored.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    by_url: dict[str, MatchLink] = {}

    for anchor in soup.find_all("a", href=True):
        path = anchor["href"].strip()
        if not _MATCH_PATH.match(path):
            continue

        title = clean_text(anchor.get("title") or _title_from_path(path))
        if not title or title.lower() == "live score":
            continue

        url = f"{settings.cricbuzz_base_url}{path}"
        existing = by_url.get(url)
        if existing is None or len(title) > len(existing.title):
            by_url[url] = MatchLink(title=title, url=url)

    return list(by_url.values())


def parse_title_meta(title: str) -> TitleMeta:
    """
    "India vs Australia, 3rd ODI - India won by 5 wkts" ->
    team1="India", team2="Australia", match_desc="3rd ODI", status="India won by 5 wkts".
    """
    before_status, *status_parts = (title or "").split(" - ")
    status = " - ".join(status_parts).strip() or None

    teams_text, *desc_parts = before_status.split(",")
    match_desc = ",".join(desc_parts).strip() or None

    vs_match = re.match(r"^(.+?)\s+vs\s+(.+)$", teams_text, re.IGNORECASE)
    if not vs_match:
        return TitleMeta(match_desc=match_desc, status=status)

    return TitleMeta(
        team1=clean_text(vs_match.group(1)) or None,
        team2=clean_text(vs_match.group(2)) or None,
        match_desc=match_desc,
        status=status,
    )


def normalize_title(title: str, match_desc: str) -> str:
    if not match_desc:
        return title
    teams_part = title.split(",")[0].strip()
    return f"{teams_part}, {match_desc}"


def get_short_name(name: str) -> str:
    """'New Zealand' -> 'NZ', 'India' -> 'IND'."""
    words = (name or "").split()
    if not words:
        return ""
    if len(words) == 1:
        return words[0][:3].upper()
    return "".join(word[0] for word in words)[:3].upper()
