"""
Field probes: for each concept, the raw field names it has been seen under,
in priority order. Upstream spells the same thing several ways depending on
which page or endpoint produced the blob, so every lookup goes through one of
these tables instead of an ad-hoc chain of ``.get()`` calls.
"""

from typing import Any, Iterable


def is_record(value: Any) -> bool:
    return isinstance(value, dict)


def to_text(value: Any) -> str:
    """Trimmed string for str/int/float values; "" for anything else."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return ""
        return str(int(value)) if value.is_integer() else str(value)
    return ""


def first_non_empty(*values: Any) -> str:
    for value in values:
        text = to_text(value)
        if text:
            return text
    return ""


def first_text(record: Any, fields: Iterable[str]) -> str:
    """First non-empty value among ``fields`` of ``record``, in order."""
    if not is_record(record):
        return ""
    return first_non_empty(*(record.get(field) for field in fields))


def stat_text(record: Any, fields: Iterable[str]) -> str:
    return first_text(record, fields) or "-"


def first_flag(record: Any, fields: Iterable[str], default: bool = False) -> bool:
    """First field that is present (not None) decides the flag."""
    if not is_record(record):
        return default
    for field in fields:
        value = record.get(field)
        if value is not None:
            return bool(value)
    return default


# --------------------------------------------------------------------------- #
#  Live batters / bowlers
# --------------------------------------------------------------------------- #

LIVE_BATTER = {
    "id": ("id", "batId"),
    "name": ("batName", "name"),
    "runs": ("runs", "batRuns"),
    "balls": ("balls", "batBalls"),
    "fours": ("fours", "batFours"),
    "sixes": ("sixes", "batSixes"),
    "strike_rate": ("strikeRate", "batStrikeRate"),
    "on_strike": ("isOnStrike", "isStriker"),
    "dismissal": ("outDesc",),
}

LIVE_BOWLER = {
    "id": ("id", "bowlId"),
    "name": ("bowlName", "name"),
    "overs": ("overs", "bowlOvs"),
    "maidens": ("maidens", "bowlMaidens"),
    "runs": ("runs", "bowlRuns"),
    "wickets": ("wickets", "bowlWkts"),
    "economy": ("economy", "bowlEcon"),
}

# Candidate-level slots, tried in order. The flag says whether the slot is the
# striker when nothing earlier has been found.
BATTER_SLOTS = (
    ("batsmanStriker", "striker"),
    ("batsmanNonStriker", "non_striker"),
    ("striker", "striker"),
    ("nonStriker", "non_striker"),
    ("batsman1", "first"),
    ("batsman2", "second"),
    ("currentBatter", "first"),
)

BOWLER_SLOTS = ("currentBowler", "bowlerStriker", "bowler")

CURRENT_OVER_SOURCES = (
    "currentOver",
    "thisOver",
    "overSummary",
    "overSummaryList",
    "currOver",
    "thisOverStats",
    "recentOvsStatsArr",
)

CURRENT_OVER_TEXT_SOURCES = (
    "currentOver",
    "thisOver",
    "overSummary",
    "recentOvsStats",
    "currOver",
    "thisOverStats",
)

RECENT_BALL_SOURCES = (
    "recentBalls",
    "latestBalls",
    "lastTenBalls",
    "last10Balls",
    "recentOvsStatsArr",
)

RECENT_BALL_TEXT_SOURCES = (
    "recentBalls",
    "latestBalls",
    "lastTenBalls",
    "last10Balls",
    "recentOvsStats",
)

BALL_ENTRY_VALUE = ("value", "result", "ballResult", "event", "eventType", "runs", "runsScored")

RUN_RATE = ("crr", "currentRunRate")
REQUIRED_RUN_RATE = ("reqRate", "requiredRunRate")

# Keys under which a mini-score blob is embedded in page HTML.
MINI_SCORE_KEYS = ("miniScore", "miniscore", "miniScoreCard", "miniScorecard")

# --------------------------------------------------------------------------- #
#  Commentary lines
# --------------------------------------------------------------------------- #

COMMENTARY_OVER = ("overNumber", "overNum", "o_no")
COMMENTARY_BALL = ("ballNbr", "ballNumber", "ball")
COMMENTARY_TEXT = ("eventType", "event", "commText", "comm", "commentary")
COMMENTARY_RUNS = ("runsScored", "runs")

# --------------------------------------------------------------------------- #
#  Players
# --------------------------------------------------------------------------- #

PLAYER = {
    "id": ("id",),
    "name": ("fullName", "name", "f_name", "shortName", "nickName"),
    "role": ("role", "specialist", "roleDesc"),
    "batting_style": ("battingStyle", "batStyle", "bat_style"),
    "bowling_style": ("bowlingStyle", "bowlStyle", "bowl_style"),
    "captain": ("isCaptain", "captain"),
    "keeper": ("isKeeper", "keeper"),
    "substitute": ("substitute",),
    "team_id": ("teamId", "team_id"),
}

PLAYER_IMAGE_URL = ("imageUrl", "imgUrl", "image", "headshot")
PLAYER_IMAGE_ID = ("faceImageId", "face_image_id", "imageId", "image_id", "imageID", "id")

TEAM_ROSTER_SOURCES = (
    "playerDetails",
    "players",
    "squad",
    "playingXI",
    "playingXi",
    "playing11",
    "xi",
)
