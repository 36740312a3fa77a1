"""
Ball-by-ball commentary parsing.

Commentary lines come from the match-api JSON endpoints. Each line carries
its position either as separate over/ball integers or as a single "12.3"
string, plus free text and sometimes an explicit runs field.
"""

import json
import logging
import re
from typing import Any, Optional

from cricfeed.extract.balls import (
    RECENT_BALLS_LIMIT,
    classify_ball_token,
    keep_last_over,
    parse_over_context,
    to_labeled_balls,
)
from cricfeed.extract.probes import (
    COMMENTARY_BALL,
    COMMENTARY_OVER,
    COMMENTARY_RUNS,
    COMMENTARY_TEXT,
    first_text,
    is_record,
    to_text,
)
from cricfeed.models import BallKind, BallOutcome, LiveOverBall, ParsedCommentaryBall

logger = logging.getLogger(__name__)

_WIDE = re.compile(r"wide|\bwd\b")
_NO_BALL = re.compile(r"no[\s-]*ball|\bnb\b")
_WICKET = re.compile(r"wicket|\bout\b")
_SIX = re.compile(r"six")
_FOUR = re.compile(r"four|boundary")


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: "12" -> 12, "12.3" -> 12, "abc" -> None."""
    match = re.match(r"^[+-]?\d+", to_text(value))
    return int(match.group(0)) if match else None


def parse_over_ball(line: dict) -> Optional[tuple[int, int]]:
    over_value = first_text(line, COMMENTARY_OVER)
    ball_value = first_text(line, COMMENTARY_BALL)

    direct_over = parse_int(over_value)
    direct_ball = parse_int(ball_value)
    if direct_over is not None and direct_ball is not None:
        return direct_over, direct_ball

    if "." not in over_value:
        return None

    over_part, _, ball_part = over_value.partition(".")
    parsed_over = parse_int(over_part)
    parsed_ball = parse_int(ball_part)
    if parsed_over is None or parsed_ball is None:
        return None

    return parsed_over, parsed_ball


def derive_commentary_outcome(line: dict) -> BallOutcome:
    """Same precedence as the token classifier, but six is checked before four in prose."""
    text = first_text(line, COMMENTARY_TEXT)
    lower = text.lower()
    runs = parse_int(first_text(line, COMMENTARY_RUNS))

    if _WIDE.search(lower):
        return BallOutcome(
            value=f"Wd+{runs}" if runs is not None else "Wd", kind=BallKind.EXTRA, is_legal_delivery=False
        )

    if _NO_BALL.search(lower):
        return BallOutcome(
            value=f"Nb+{runs}" if runs is not None else "Nb", kind=BallKind.EXTRA, is_legal_delivery=False
        )

    if _WICKET.search(lower):
        return BallOutcome(value="W", kind=BallKind.WICKET)

    if _SIX.search(lower):
        return BallOutcome(value="6", kind=BallKind.SIX)

    if _FOUR.search(lower):
        return BallOutcome(value="4", kind=BallKind.FOUR)

    if runs is not None:
        if runs == 0:
            return BallOutcome(value="0", kind=BallKind.DOT)
        return BallOutcome(value=str(runs), kind=BallKind.RUN)

    return classify_ball_token(text or "-")


def parse_commentary_list(payload: Any) -> list[dict]:
    """
    Commentary records from ``commentaryList`` (list or id-keyed map) or
    ``comm_lines``, whichever is longer.
    """
    if not is_record(payload):
        return []

    raw_list = payload.get("commentaryList")
    if isinstance(raw_list, list):
        from_list = raw_list
    elif is_record(raw_list):
        from_list = list(raw_list.values())
    else:
        from_list = []

    raw_lines = payload.get("comm_lines")
    from_lines = raw_lines if isinstance(raw_lines, list) else []

    preferred = from_list if len(from_list) >= len(from_lines) else from_lines
    return [entry for entry in preferred if is_record(entry)]


def _dedupe_key(line: dict) -> str:
    return json.dumps(line, sort_keys=True, default=str)


def parse_commentary_balls(lines: list[dict]) -> list[ParsedCommentaryBall]:
    """
    Lines without a recoverable position are dropped. Exact duplicate records
    are kept once; reposted lines that differ in any field are kept and
    ordered by source position.
    """
    parsed: list[ParsedCommentaryBall] = []
    seen: set[str] = set()

    for index, line in enumerate(lines):
        position = parse_over_ball(line)
        if position is None:
            continue

        key = _dedupe_key(line)
        if key in seen:
            continue
        seen.add(key)

        over, ball = position
        parsed.append(
            ParsedCommentaryBall(over=over, raw_ball=ball, outcome=derive_commentary_outcome(line), index=index)
        )

    if len(parsed) < len(lines):
        logger.debug(f"Kept {len(parsed)} of {len(lines)} commentary lines")

    return parsed


def sort_key(ball: ParsedCommentaryBall) -> tuple[int, int, int]:
    return ball.over, ball.raw_ball, ball.index


def parse_current_over_from_commentary(
    balls: list[ParsedCommentaryBall], overs_raw: Optional[str] = None
) -> list[LiveOverBall]:
    """
    Balls of the highest over number only. When ``overs_raw`` points at that
    same over, its completed-ball count drives the labels.
    """
    if not balls:
        return []

    latest_over = max(ball.over for ball in balls)
    in_over = sorted((ball for ball in balls if ball.over == latest_over), key=sort_key)

    # A revised line for the same legal ball supersedes the earlier one.
    latest_index = {ball.raw_ball: ball.index for ball in in_over if ball.outcome.is_legal_delivery}
    in_over = [
        ball for ball in in_over if not ball.outcome.is_legal_delivery or latest_index[ball.raw_ball] == ball.index
    ]

    over_number, completed = parse_over_context(to_text(overs_raw))
    completed_legal_balls = completed if over_number == latest_over else 0

    return to_labeled_balls(latest_over, completed_legal_balls, keep_last_over([ball.outcome for ball in in_over]))


def parse_recent_balls_from_commentary(balls: list[ParsedCommentaryBall]) -> list[LiveOverBall]:
    """The chronologically last ten balls across all overs."""
    ordered = sorted(balls, key=sort_key)[-RECENT_BALLS_LIMIT:]
    return [
        LiveOverBall(label=f"{ball.over}.{ball.raw_ball}", value=ball.outcome.value, kind=ball.outcome.kind)
        for ball in ordered
    ]
