"""
Live-state extraction.

A page or payload can carry several mini-score shaped objects (root object,
per-innings score lists, differently-cased keys). Each candidate is parsed
into a whole ``MatchLiveState`` and scored for completeness; the best one
wins outright. States are never stitched together field by field because
the candidates can come from snapshots taken at different moments.
"""

import logging
import re
from typing import Any, Optional

from cricfeed.extract import probes
from cricfeed.extract.balls import (
    RECENT_BALLS_LIMIT,
    format_recent_balls_label,
    parse_over_tokens_from_array,
    parse_over_tokens_from_string,
    to_current_over_balls,
    to_recent_balls,
)
from cricfeed.extract.commentary import (
    parse_commentary_balls,
    parse_commentary_list,
    parse_current_over_from_commentary,
    parse_recent_balls_from_commentary,
)
from cricfeed.extract.json_blobs import pick_array_by_key, pick_object_by_key
from cricfeed.extract.overs import normalize_overs_value
from cricfeed.extract.probes import first_text, is_record, stat_text, to_text
from cricfeed.extract.text import fallback_id_from_name, normalize_player_key
from cricfeed.models import LiveBatter, LiveBowler, LiveOverBall, MatchInnings, MatchLiveState

logger = logging.getLogger(__name__)

MAX_LIVE_BATTERS = 2

_ACTIVE_DISMISSAL = re.compile(r"(batting|not out|retired hurt)", re.IGNORECASE)


# --------------------------------------------------------------------------- #
#  Batters & bowlers
# --------------------------------------------------------------------------- #


def to_live_batter(raw: Any, default_strike: bool) -> Optional[LiveBatter]:
    if not is_record(raw):
        return None

    fields = probes.LIVE_BATTER
    name = first_text(raw, fields["name"])
    if not name:
        return None

    return LiveBatter(
        id=first_text(raw, fields["id"]) or fallback_id_from_name(name),
        name=name,
        runs=stat_text(raw, fields["runs"]),
        balls=stat_text(raw, fields["balls"]),
        fours=stat_text(raw, fields["fours"]),
        sixes=stat_text(raw, fields["sixes"]),
        strike_rate=stat_text(raw, fields["strike_rate"]),
        on_strike=probes.first_flag(raw, fields["on_strike"], default=default_strike),
    )


def to_live_batters(candidate: dict) -> list[LiveBatter]:
    """
    At most two batters, deduplicated by lowercased name.

    Named slots are tried first (striker/non-striker, batsman1/2, current
    batter, currentBatters[]). Only when they yield nobody is the full
    batting list scanned for players whose dismissal says they are still in.
    """
    result: list[LiveBatter] = []
    seen: set[str] = set()

    def add_one(batter: Optional[LiveBatter]) -> None:
        if batter is None or len(result) >= MAX_LIVE_BATTERS:
            return
        key = batter.name.lower()
        if key in seen:
            return
        seen.add(key)
        result.append(batter)

    for slot, role in probes.BATTER_SLOTS:
        if role == "striker":
            default_strike = True
        elif role == "non_striker":
            default_strike = False
        elif role == "second":
            default_strike = len(result) == 1
        else:
            default_strike = len(result) == 0
        add_one(to_live_batter(candidate.get(slot), default_strike))

    current_batters = candidate.get("currentBatters")
    if isinstance(current_batters, list):
        for entry in current_batters:
            add_one(to_live_batter(entry, len(result) == 0))

    if result:
        return result

    bat_team = candidate.get("batTeam")
    fallback = bat_team.get("batsmen") if is_record(bat_team) else None
    if not isinstance(fallback, list):
        return result

    for entry in fallback:
        if not is_record(entry):
            continue
        dismissal = first_text(entry, probes.LIVE_BATTER["dismissal"])
        if dismissal and not _ACTIVE_DISMISSAL.search(dismissal):
            continue
        add_one(to_live_batter(entry, len(result) == 0))
        if len(result) == MAX_LIVE_BATTERS:
            break

    return result


def to_live_bowler(raw: Any) -> Optional[LiveBowler]:
    if not is_record(raw):
        return None

    fields = probes.LIVE_BOWLER
    name = first_text(raw, fields["name"])
    if not name:
        return None

    overs_raw = first_text(raw, fields["overs"])
    return LiveBowler(
        id=first_text(raw, fields["id"]) or fallback_id_from_name(name),
        name=name,
        overs=normalize_overs_value(overs_raw) or overs_raw or "-",
        maidens=stat_text(raw, fields["maidens"]),
        runs=stat_text(raw, fields["runs"]),
        wickets=stat_text(raw, fields["wickets"]),
        economy=stat_text(raw, fields["economy"]),
    )


def bowler_key(bowler: LiveBowler) -> str:
    return f"{bowler.id}:{bowler.name.lower()}"


def has_bowler_stats(bowler: LiveBowler) -> bool:
    return any(value not in ("-", "") for value in (bowler.overs, bowler.maidens, bowler.runs, bowler.wickets))


def to_bowling_state(candidate: dict) -> tuple[Optional[LiveBowler], list[LiveBowler]]:
    """(current bowler, previous bowlers with real figures)."""
    result: list[LiveBowler] = []
    seen: set[str] = set()

    def add_bowler(raw: Any) -> None:
        parsed = to_live_bowler(raw)
        if parsed is None:
            return
        key = bowler_key(parsed)
        if key in seen:
            return
        seen.add(key)
        result.append(parsed)

    for slot in probes.BOWLER_SLOTS:
        add_bowler(candidate.get(slot))

    bowl_team = candidate.get("bowlTeam")
    if is_record(bowl_team):
        for source_key in ("bowlers", "previousBowlers"):
            source = bowl_team.get(source_key)
            if isinstance(source, list):
                for entry in source:
                    add_bowler(entry)

    if not result:
        return None, []

    return result[0], [bowler for bowler in result[1:] if has_bowler_stats(bowler)]


# --------------------------------------------------------------------------- #
#  Ball tokens
# --------------------------------------------------------------------------- #


def extract_over_tokens(candidate: dict) -> list[str]:
    for key in probes.CURRENT_OVER_SOURCES:
        source = candidate.get(key)
        if isinstance(source, list):
            tokens = parse_over_tokens_from_array(source)
            if tokens:
                return tokens

    for key in probes.CURRENT_OVER_TEXT_SOURCES:
        source = candidate.get(key)
        if isinstance(source, str):
            tokens = parse_over_tokens_from_string(source)
            if tokens:
                return tokens

    return []


def extract_recent_ball_tokens(candidate: dict) -> list[str]:
    for key in probes.RECENT_BALL_SOURCES:
        source = candidate.get(key)
        if isinstance(source, list):
            tokens = parse_over_tokens_from_array(source, RECENT_BALLS_LIMIT)
            if tokens:
                return tokens

    for key in probes.RECENT_BALL_TEXT_SOURCES:
        source = candidate.get(key)
        if isinstance(source, str) and source:
            tokens = parse_over_tokens_from_string(source, RECENT_BALLS_LIMIT, include_all_segments=True)
            if tokens:
                return tokens

    return []


# --------------------------------------------------------------------------- #
#  Candidate scoring
# --------------------------------------------------------------------------- #


def has_content(state: MatchLiveState) -> bool:
    return bool(
        state.batters or state.bowler or state.previous_bowlers or state.current_over_balls or state.recent_balls
    )


def score_state(state: MatchLiveState) -> int:
    score = len(state.batters) * 4
    score += 4 if state.bowler else 0
    score += min(len(state.previous_bowlers), 4) * 2
    score += min(len(state.current_over_balls), 8)
    score += min(len(state.recent_balls), RECENT_BALLS_LIMIT)
    score += 1 if state.current_run_rate != "-" else 0
    score += 1 if state.required_run_rate != "-" else 0
    return score


def pick_preferred_live_state(
    current: Optional[MatchLiveState], incoming: Optional[MatchLiveState]
) -> Optional[MatchLiveState]:
    """Whole-object replacement: ``incoming`` wins only on a strictly higher score."""
    if current is None:
        return incoming
    if incoming is None:
        return current
    return incoming if score_state(incoming) > score_state(current) else current


def parse_candidate_state(
    candidate: Any, fallback_current_over_balls: Optional[list[LiveOverBall]] = None
) -> Optional[MatchLiveState]:
    if not is_record(candidate):
        return None

    batters = to_live_batters(candidate)
    bowler, previous_bowlers = to_bowling_state(candidate)
    overs_raw = to_text(candidate.get("overs"))
    over_tokens = extract_over_tokens(candidate)
    recent_tokens = extract_recent_ball_tokens(candidate)

    if over_tokens:
        current_over_balls = to_current_over_balls(over_tokens, overs_raw or "0")
    else:
        current_over_balls = list(fallback_current_over_balls or [])

    recent_balls = to_recent_balls(recent_tokens) if recent_tokens else current_over_balls

    state = MatchLiveState(
        batters=batters,
        bowler=bowler,
        previous_bowlers=previous_bowlers,
        current_over_balls=current_over_balls,
        recent_balls=recent_balls,
        recent_balls_label=format_recent_balls_label(len(recent_tokens)),
        current_over_label=normalize_overs_value(overs_raw) or overs_raw or "-",
        current_run_rate=stat_text(candidate, probes.RUN_RATE),
        required_run_rate=stat_text(candidate, probes.REQUIRED_RUN_RATE),
    )

    return state if has_content(state) else None


def _reversed_records(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [entry for entry in reversed(value) if is_record(entry)]


def parse_live_state_from_html(html: str) -> Optional[MatchLiveState]:
    """Best live state among every mini-score candidate embedded in ``html``."""
    if not html:
        return None

    candidates: list[dict] = []
    for key in probes.MINI_SCORE_KEYS:
        found = pick_object_by_key(html, key)
        if found is not None:
            candidates.append(found)

    score_details = pick_object_by_key(html, "matchScoreDetails")
    if score_details is not None:
        candidates.extend(_reversed_records(score_details.get("inningsScoreList")))

    candidates.extend(_reversed_records(pick_array_by_key(html, "inningsScoreList")))

    best: Optional[MatchLiveState] = None
    for candidate in candidates:
        best = pick_preferred_live_state(best, parse_candidate_state(candidate))

    logger.debug(f"Scored {len(candidates)} live-state candidates from HTML")
    return best


def extract_candidates_from_payload(payload: dict) -> list[dict]:
    candidates: list[dict] = []
    for key in ("miniScore", "miniscore"):
        if is_record(payload.get(key)):
            candidates.append(payload[key])
    candidates.append(payload)

    score_details = payload.get("matchScoreDetails")
    if is_record(score_details):
        candidates.extend(_reversed_records(score_details.get("inningsScoreList")))
    candidates.extend(_reversed_records(payload.get("inningsScoreList")))

    return candidates


def parse_live_state_from_commentary_payload(payload: Any) -> Optional[MatchLiveState]:
    """
    Live state from a commentary JSON payload.

    Candidate states are scored as usual; commentary balls only fill in when
    the winner has no balls of its own, or when commentary knows more recent
    balls. With no usable candidate, a balls-only state is built from the
    commentary alone.
    """
    if not is_record(payload):
        return None

    parsed_balls = parse_commentary_balls(parse_commentary_list(payload))
    commentary_current = parse_current_over_from_commentary(parsed_balls)
    commentary_recent = parse_recent_balls_from_commentary(parsed_balls)

    best: Optional[MatchLiveState] = None
    for candidate in extract_candidates_from_payload(payload):
        current_for_candidate = parse_current_over_from_commentary(parsed_balls, to_text(candidate.get("overs")))
        best = pick_preferred_live_state(best, parse_candidate_state(candidate, current_for_candidate))

    if best is not None:
        current_over_balls = best.current_over_balls or commentary_current
        if len(commentary_recent) > len(best.recent_balls):
            merged_recent = commentary_recent
        else:
            merged_recent = best.recent_balls
        recent_balls = merged_recent or current_over_balls

        if commentary_recent:
            label = format_recent_balls_label(len(commentary_recent))
        elif recent_balls:
            label = best.recent_balls_label
        else:
            label = "Current over"

        return best.model_copy(
            update={
                "current_over_balls": current_over_balls,
                "recent_balls": recent_balls,
                "recent_balls_label": label,
            }
        )

    if not commentary_current and not commentary_recent:
        return None

    over_label = commentary_current[0].label.split(".")[0] if commentary_current else "-"
    return MatchLiveState(
        current_over_balls=commentary_current,
        recent_balls=commentary_recent or commentary_current,
        recent_balls_label=format_recent_balls_label(len(commentary_recent)),
        current_over_label=over_label,
    )


# --------------------------------------------------------------------------- #
#  Last resort: the scorecard itself
# --------------------------------------------------------------------------- #


def _overs_from_score_line(score_line: str) -> str:
    match = re.search(r"\(([^)]+)\)", score_line or "")
    if not match:
        return "-"
    return re.sub(r"\s*overs?", "", match.group(1), flags=re.IGNORECASE).strip() or "-"


def derive_live_state_from_innings(innings: list[MatchInnings]) -> Optional[MatchLiveState]:
    """
    Snapshot built from the newest innings that has any batting or bowling
    rows: not-out batters first (else the first two), the first bowler as
    current and the rest as previous.
    """
    active = next((entry for entry in reversed(innings) if entry.batsmen or entry.bowlers), None)
    if active is None:
        return None

    still_in = [batter for batter in active.batsmen if _ACTIVE_DISMISSAL.search(batter.dismissal)]
    source = (still_in or active.batsmen)[:MAX_LIVE_BATTERS]

    batters = [
        LiveBatter(
            id=f"{normalize_player_key(batter.name)}-{index}",
            name=batter.name,
            runs=batter.runs,
            balls=batter.balls,
            fours=batter.fours,
            sixes=batter.sixes,
            strike_rate=batter.strike_rate,
            on_strike=index == 1,
        )
        for index, batter in enumerate(source, start=1)
    ]

    bowlers = [
        LiveBowler(
            id=f"{normalize_player_key(row.name)}-{index}",
            name=row.name,
            overs=row.overs,
            maidens=row.maidens,
            runs=row.runs,
            wickets=row.wickets,
            economy=row.economy,
        )
        for index, row in enumerate(active.bowlers, start=1)
    ]

    if not batters and not bowlers:
        return None

    return MatchLiveState(
        batters=batters,
        bowler=bowlers[0] if bowlers else None,
        previous_bowlers=bowlers[1:],
        current_over_label=_overs_from_score_line(active.score_line),
        current_run_rate=active.run_rate or "-",
    )
