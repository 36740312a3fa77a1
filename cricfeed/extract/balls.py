"""
Ball tokens: classify raw delivery tokens ("4", "Wd", "W", "1lb", ".") and
label them with their position inside an over.
"""

import re
from typing import Any, Optional

from cricfeed.extract.probes import BALL_ENTRY_VALUE, first_text, is_record, to_text
from cricfeed.models import BallKind, BallOutcome, LiveOverBall

RECENT_BALLS_LIMIT = 10
CURRENT_OVER_LIMIT = 8
BALLS_PER_OVER = 6

_EDGE_PUNCTUATION = re.compile(r"^[^a-z0-9]+|[^a-z0-9+.\-]+$", re.IGNORECASE)
_WIDE = re.compile(r"wide|\bwd\b")
_NO_BALL = re.compile(r"no[\s-]*ball|\bnb\b")
_WICKET = re.compile(r"\bw\b|wicket|\bout\b")
_FOUR = re.compile(r"four|boundary")
_SIX = re.compile(r"six")
_DOT = re.compile(r"dot")
_LEG_BYE = re.compile(r"leg[\s-]*bye|\blb\b")
_BYE = re.compile(r"\bbye\b")
_OVER_WORD = re.compile(r"^(ov|over)$", re.IGNORECASE)


def normalize_ball_token(token: str) -> str:
    return _EDGE_PUNCTUATION.sub("", token or "").strip()


def classify_ball_token(raw_token: Any) -> BallOutcome:
    """
    Map one raw token to a ball outcome.

    Priority: wide, no-ball, wicket, four, six, dot, leg-bye, bye, plain runs,
    then "other" echoing the cleaned token. Wides and no-balls are the only
    outcomes that do not use up a legal delivery.
    """
    raw = to_text(raw_token) if not isinstance(raw_token, str) else raw_token.strip()
    if raw == ".":
        return BallOutcome(value="0", kind=BallKind.DOT)

    cleaned = normalize_ball_token(raw)
    token = cleaned.lower()

    if not token:
        return BallOutcome(value="-", kind=BallKind.OTHER)

    run_match = re.search(r"\d+", token)
    runs = run_match.group(0) if run_match else ""

    if _WIDE.search(token):
        return BallOutcome(value=f"Wd+{runs}" if runs else "Wd", kind=BallKind.EXTRA, is_legal_delivery=False)

    if _NO_BALL.search(token):
        return BallOutcome(value=f"Nb+{runs}" if runs else "Nb", kind=BallKind.EXTRA, is_legal_delivery=False)

    if token == "w" or _WICKET.search(token):
        return BallOutcome(value="W", kind=BallKind.WICKET)

    if token == "4" or _FOUR.search(token):
        return BallOutcome(value="4", kind=BallKind.FOUR)

    if token == "6" or _SIX.search(token):
        return BallOutcome(value="6", kind=BallKind.SIX)

    if token in (".", "0") or _DOT.search(token):
        return BallOutcome(value="0", kind=BallKind.DOT)

    if _LEG_BYE.search(token):
        return BallOutcome(value=f"Lb{runs}" if runs else "Lb", kind=BallKind.RUN)

    if _BYE.search(token):
        return BallOutcome(value=f"B{runs}" if runs else "B", kind=BallKind.RUN)

    if token.isdigit():
        return BallOutcome(value=token, kind=BallKind.RUN)

    return BallOutcome(value=cleaned or raw, kind=BallKind.OTHER)


# --------------------------------------------------------------------------- #
#  Token sources
# --------------------------------------------------------------------------- #


def parse_over_tokens_from_string(
    value: str, limit: int = CURRENT_OVER_LIMIT, include_all_segments: bool = False
) -> list[str]:
    """
    Tokens from summaries like "Ov 12: 1 4 0 | Ov 13: Wd 1 W".

    Segments are split on "|"; by default only the last one is read. Any
    "label:" prefix and bare "Ov"/"Over" words are dropped.
    """
    text = re.sub(r"\s+", " ", value or "").strip()
    if not text:
        return []

    segments = [part.strip() for part in text.split("|") if part.strip()]
    source_segments = segments if include_all_segments else [segments[-1] if segments else text]

    tokens: list[str] = []
    for segment in source_segments:
        after_label = segment.split(":")[-1].strip() if ":" in segment else segment
        for part in after_label.split():
            # A lone "." is a dot ball; normalizing would erase it.
            token = part if part == "." else normalize_ball_token(part)
            if token and not _OVER_WORD.match(token):
                tokens.append(token)

    return tokens[-limit:]


def parse_over_tokens_from_array(values: list, limit: int = CURRENT_OVER_LIMIT) -> list[str]:
    tokens: list[str] = []
    for entry in values:
        if isinstance(entry, (str, int, float)) and not isinstance(entry, bool):
            text = to_text(entry)
        elif is_record(entry):
            text = first_text(entry, BALL_ENTRY_VALUE)
        else:
            continue

        token = text if text == "." else normalize_ball_token(text)
        if token:
            tokens.append(token)

    return tokens[-limit:]


# --------------------------------------------------------------------------- #
#  Labelling
# --------------------------------------------------------------------------- #


def parse_over_context(overs_raw: str) -> tuple[Optional[int], int]:
    """
    "12.3" -> (13, 3): the over in progress is the 13th, three balls done.
    "12" -> (12, 0). Anything unparsable -> (None, 0).
    """
    match = re.match(r"^(\d+)(?:\.(\d+))?$", (overs_raw or "").strip())
    if not match:
        return None, 0

    base_overs = int(match.group(1))
    balls_raw = int(match.group(2) or "0")
    carry, completed = divmod(balls_raw, 6)
    over_number = base_overs + carry + (1 if completed > 0 else 0)
    return over_number, completed


def to_labeled_balls(
    over_number: int, completed_legal_balls: int, outcomes: list[BallOutcome]
) -> list[LiveOverBall]:
    """
    Label outcomes "over.ball", walking back from the number of legal balls
    already bowled so a tail window still gets the right ball numbers.
    Extras repeat the label of the next legal ball.
    """
    legal_deliveries = sum(1 for outcome in outcomes if outcome.is_legal_delivery)

    start_ball = 1
    if completed_legal_balls > 0 and legal_deliveries > 0:
        start_ball = max(1, completed_legal_balls - legal_deliveries + 1)

    current = start_ball
    labeled = []
    for outcome in outcomes:
        ball_in_over = min(max(current, 1), BALLS_PER_OVER)
        labeled.append(
            LiveOverBall(label=f"{over_number}.{ball_in_over}", value=outcome.value, kind=outcome.kind)
        )
        if outcome.is_legal_delivery:
            current += 1

    return labeled


def keep_last_over(outcomes: list[BallOutcome]) -> list[BallOutcome]:
    """
    Tail of ``outcomes`` holding at most six legal deliveries. Extras bowled
    after the last dropped legal ball stay with the over.
    """
    kept: list[BallOutcome] = []
    legal = 0
    for outcome in reversed(outcomes):
        if outcome.is_legal_delivery:
            if legal == BALLS_PER_OVER:
                break
            legal += 1
        kept.append(outcome)
    kept.reverse()
    return kept


def _anonymous_labels(outcomes: list[BallOutcome]) -> list[LiveOverBall]:
    return [
        LiveOverBall(label=f"Ball {index}", value=outcome.value, kind=outcome.kind)
        for index, outcome in enumerate(outcomes, start=1)
    ]


def to_current_over_balls(tokens: list[str], overs_raw: str) -> list[LiveOverBall]:
    """Falls back to "Ball N" labels when the over is unknown or the window is too wide to trust."""
    if not tokens:
        return []

    over_number, completed = parse_over_context(overs_raw)
    outcomes = keep_last_over([classify_ball_token(token) for token in tokens])

    if not over_number or len(tokens) > RECENT_BALLS_LIMIT:
        return _anonymous_labels(outcomes)

    return to_labeled_balls(over_number, completed, outcomes)


def to_recent_balls(tokens: list[str]) -> list[LiveOverBall]:
    return _anonymous_labels([classify_ball_token(token) for token in tokens[-RECENT_BALLS_LIMIT:]])


def format_recent_balls_label(balls_count: int) -> str:
    if balls_count >= RECENT_BALLS_LIMIT:
        return f"Last {RECENT_BALLS_LIMIT} balls"
    if balls_count > 0:
        return f"Last {balls_count} balls"
    return "Current over"
