"""
Overs use "overs.balls" notation: "12.3" is twelve overs and three balls, not
12.3 overs. A ball count of 6 or more in the fractional part carries into
whole overs.
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from cricfeed.extract.probes import to_text

_OVERS_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?$")


def normalize_overs_value(value: Any) -> Optional[str]:
    """
    Canonical "overs.balls" string, or None for missing/non-numeric input.

        "12.3" -> "12.3"     "12.8" -> "13.2"     "12.6" -> "13"     "20" -> "20"
    """
    raw = to_text(value)
    if not raw:
        return None

    match = _OVERS_PATTERN.match(raw)
    if not match:
        return None

    if match.group(2) is None:
        return raw

    overs = int(match.group(1))
    balls = int(match.group(2))
    carry, remainder = divmod(balls, 6)

    if carry == 0:
        return f"{overs}.{remainder}"

    if remainder == 0:
        return str(overs + carry)

    return f"{overs + carry}.{remainder}"


def format_overs_label(value: Any) -> str:
    normalized = normalize_overs_value(value)
    return f"{normalized} Overs" if normalized else "-"


def overs_to_decimal(value: Any) -> Optional[float]:
    """13.2 overs -> 13.333..."""
    normalized = normalize_overs_value(value)
    if not normalized:
        return None

    over_part, _, ball_part = normalized.partition(".")
    return int(over_part) + int(ball_part or "0") / 6


def format_run_rate(runs_value: Any, overs_value: Any) -> str:
    runs_text = to_text(runs_value)
    try:
        runs = float(runs_text)
    except ValueError:
        return "-"

    overs = overs_to_decimal(overs_value)
    if runs != runs or runs in (float("inf"), float("-inf")) or not overs or overs <= 0:
        return "-"

    return f"{runs / overs:.2f}"


def format_start_date(epoch_ms: Optional[float]) -> str:
    """Epoch milliseconds -> "Oct 19, 2026, 02:30 PM" (UTC); "-" when missing."""
    if not epoch_ms:
        return "-"

    try:
        moment = datetime.fromtimestamp(float(epoch_ms) / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return "-"

    return moment.strftime("%b %d, %Y, %I:%M %p")
