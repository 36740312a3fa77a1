"""
Scorecard page -> MatchDetailData.

The scorecard page embeds a ``matchHeader`` (teams, status, toss, venue), a
``matchInfo`` and one or more ``scoreCard`` arrays. Several ``scoreCard``
arrays can appear on one page (related matches, stale blocks), so we keep the
one whose team names best overlap the teams we expect.
"""

import logging
import re
from typing import Any, Optional

from cricfeed.extract.flags import get_team_flag_url
from cricfeed.extract.json_blobs import pick_all_arrays_by_key, pick_all_objects_by_key
from cricfeed.extract.match_links import get_short_name, parse_title_meta
from cricfeed.extract.overs import format_overs_label, format_run_rate, format_start_date, normalize_overs_value
from cricfeed.extract.players import fallback_players_from_raw_innings, merge_team_players, to_team_players
from cricfeed.extract.probes import first_text, is_record, to_text
from cricfeed.extract.status import derive_status_type, pick_best_status
from cricfeed.extract.text import normalize_team_key, safe_text, select_best, team_names_likely_match
from cricfeed.models import (
    MatchBatter,
    MatchBowler,
    MatchDetailData,
    MatchInnings,
    MatchSummary,
    TeamSnapshot,
)

logger = logging.getLogger(__name__)

YET_TO_BAT = "Yet to bat"
DETAIL_FLAG_SIZE = 48

_DID_NOT_BAT = re.compile(r"(did not bat|dnb|yet to bat|to bat)")


def _stat(value: Any) -> str:
    return to_text(value) or "-"


def _number(value: Any) -> float:
    try:
        return float(to_text(value) or 0)
    except ValueError:
        return 0.0


def _records(value: Any) -> dict:
    return value if is_record(value) else {}


def has_real_score(score: str) -> bool:
    return bool(score) and score not in ("-", YET_TO_BAT)


# --------------------------------------------------------------------------- #
#  Team names inside a raw innings
# --------------------------------------------------------------------------- #


def batting_team_name(innings: dict) -> str:
    return first_text(innings.get("batTeamDetails"), ("batTeamName", "batTeamShortName"))


def bowling_team_name(innings: dict) -> str:
    return first_text(innings.get("bowlTeamDetails"), ("bowlTeamName", "bowlTeamShortName"))


def _team_keys(innings: dict) -> list[str]:
    bat = _records(innings.get("batTeamDetails"))
    bowl = _records(innings.get("bowlTeamDetails"))
    names = (
        first_text(bat, ("batTeamName",)),
        first_text(bat, ("batTeamShortName",)),
        first_text(bowl, ("bowlTeamName",)),
        first_text(bowl, ("bowlTeamShortName",)),
    )
    return [key for key in (normalize_team_key(name) for name in names) if key]


# --------------------------------------------------------------------------- #
#  Picking the scorecard block
# --------------------------------------------------------------------------- #


def scorecard_team_match_score(score_card: list[dict], team_names: list[str]) -> int:
    """Innings count, plus 2 for every team label that matches an expected team."""
    targets = [key for key in (normalize_team_key(name) for name in team_names) if len(key) > 1]
    score = len(score_card)
    if not targets:
        return score

    for innings in score_card:
        for candidate in _team_keys(innings):
            for target in targets:
                if (
                    candidate == target
                    or (len(target) > 3 and target in candidate)
                    or (len(candidate) > 3 and candidate in target)
                ):
                    score += 2
                    break

    return score


def pick_best_scorecard(candidates: list[list], team_names: list[str]) -> list[dict]:
    usable = [
        [entry for entry in candidate if is_record(entry)]
        for candidate in candidates
        if any(is_record(entry) for entry in candidate)
    ]
    best = select_best(usable, lambda candidate: scorecard_team_match_score(candidate, team_names))
    return best or []


# --------------------------------------------------------------------------- #
#  Team scores
# --------------------------------------------------------------------------- #


def innings_score_line(innings: dict) -> str:
    details = _records(innings.get("scoreDetails"))
    runs = _stat(details.get("runs"))
    wickets = _stat(details.get("wickets"))
    return f"{runs}/{wickets} ({format_overs_label(details.get('overs'))})"


def format_team_scores_from_scorecard(score_card: list[dict]) -> dict[str, str]:
    """Normalized team key -> every innings score of that team joined with " & "."""
    scores_by_team: dict[str, list[str]] = {}

    def add(team: str, score: str) -> None:
        key = normalize_team_key(team)
        if key:
            scores_by_team.setdefault(key, []).append(score)

    for innings in score_card:
        bat = _records(innings.get("batTeamDetails"))
        name = first_text(bat, ("batTeamName",))
        short_name = first_text(bat, ("batTeamShortName",))
        score = innings_score_line(innings)

        if name:
            add(name, score)
        if short_name and short_name != name:
            add(short_name, score)

    return {key: " & ".join(scores) for key, scores in scores_by_team.items()}


def get_score_for_team(team_scores: dict[str, str], team_name: str, team_short: str) -> str:
    direct_keys = [key for key in (normalize_team_key(team_name), normalize_team_key(team_short)) if key]

    for key in direct_keys:
        if team_scores.get(key):
            return team_scores[key]

    for key in direct_keys:
        if len(key) < 3:
            continue
        for candidate, score in team_scores.items():
            if (key in candidate or (len(key) > 4 and candidate in key)) and score:
                return score

    return ""


def infer_yet_to_bat_score(score_card: list[dict], team_name: str, team_short: str) -> str:
    """'Yet to bat' for the side that is not batting, but only with exactly one innings on the card."""
    if len(score_card) != 1:
        return ""

    batting = batting_team_name(score_card[0])
    if not batting:
        return ""

    return "" if team_names_likely_match(batting, team_name, team_short) else YET_TO_BAT


def resolve_team_scores(
    score_card: list[dict],
    team1: tuple[str, str],
    team2: tuple[str, str],
    summary: Optional[MatchSummary] = None,
) -> tuple[str, str]:
    """
    Scorecard totals first, then the list-page summary, then the single
    innings "Yet to bat" inference.

    With one innings, upstream sometimes attributes the same score to both
    sides; the side that is not batting is then forced to "Yet to bat".
    """
    team_scores = format_team_scores_from_scorecard(score_card)
    team1_score = (
        get_score_for_team(team_scores, *team1)
        or safe_text(summary.team1_score if summary else None)
        or infer_yet_to_bat_score(score_card, *team1)
    )
    team2_score = (
        get_score_for_team(team_scores, *team2)
        or safe_text(summary.team2_score if summary else None)
        or infer_yet_to_bat_score(score_card, *team2)
    )

    if len(score_card) == 1 and team1_score and team1_score == team2_score:
        batting = batting_team_name(score_card[0])
        if team_names_likely_match(batting, *team1):
            team2_score = infer_yet_to_bat_score(score_card, *team2)
        elif team_names_likely_match(batting, *team2):
            team1_score = infer_yet_to_bat_score(score_card, *team1)
        logger.debug(f"Duplicate single-innings score '{team1_score}' resolved against '{batting}'")

    return team1_score or "-", team2_score or "-"


# --------------------------------------------------------------------------- #
#  Display innings
# --------------------------------------------------------------------------- #


def _numeric_suffix_key(key: str) -> tuple:
    digits = re.sub(r"^\D+", "", key)
    match = re.match(r"\d+", digits)
    if match:
        return 0, int(match.group(0)), key
    return 1, 0, key


def _ordered_rows(data: Any) -> list[dict]:
    if isinstance(data, list):
        return [entry for entry in data if is_record(entry)]
    if not is_record(data):
        return []
    return [data[key] for key in sorted(data, key=_numeric_suffix_key) if is_record(data[key])]


def should_include_batter(player: dict) -> bool:
    """Skip did-not-bat rows; keep anyone with figures or a dismissal line."""
    dismissal = to_text(player.get("outDesc")).lower()
    if _DID_NOT_BAT.search(dismissal):
        return False

    if any(_number(player.get(field)) > 0 for field in ("runs", "balls", "fours", "sixes")):
        return True

    return bool(dismissal)


def to_display_batsmen(batsmen_data: Any) -> list[MatchBatter]:
    batters = []
    for player in _ordered_rows(batsmen_data):
        if not should_include_batter(player):
            continue

        tags = [tag for flag, tag in (("isCaptain", "c"), ("isKeeper", "wk")) if player.get(flag)]
        name = to_text(player.get("batName")) or "Unknown"
        if tags:
            name = f"{name} ({', '.join(tags)})"

        batters.append(
            MatchBatter(
                name=name,
                runs=_stat(player.get("runs")),
                balls=_stat(player.get("balls")),
                fours=_stat(player.get("fours")),
                sixes=_stat(player.get("sixes")),
                strike_rate=_stat(player.get("strikeRate")),
                dismissal=_stat(player.get("outDesc")),
            )
        )
    return batters


def to_display_bowlers(bowlers_data: Any) -> list[MatchBowler]:
    return [
        MatchBowler(
            name=to_text(player.get("bowlName")) or "Unknown",
            overs=normalize_overs_value(player.get("overs")) or "-",
            maidens=_stat(player.get("maidens")),
            runs=_stat(player.get("runs")),
            wickets=_stat(player.get("wickets")),
            economy=_stat(player.get("economy")),
            wides=_stat(player.get("wides")),
            no_balls=_stat(player.get("no_balls")),
        )
        for player in _ordered_rows(bowlers_data)
    ]


def to_fall_of_wickets(wickets_data: Any) -> list[str]:
    """Each wicket as "3. Rohit Sharma - 87 (14.2)"."""
    return [
        f"{to_text(wicket.get('wktNbr'))}. {to_text(wicket.get('batName')) or 'Unknown batter'} - "
        f"{_stat(wicket.get('wktRuns'))} ({normalize_overs_value(wicket.get('wktOver')) or '-'})"
        for wicket in _ordered_rows(wickets_data)
    ]


def format_extras_line(extras: Any) -> str:
    if not is_record(extras):
        return "-"

    def part(field: str) -> str:
        return to_text(extras.get(field)) or "0"

    return (
        f"Total {part('total')} (b {part('byes')}, lb {part('legByes')}, "
        f"w {part('wides')}, nb {part('noBalls')}, p {part('penalty')})"
    )


def to_display_innings(score_card: list[dict]) -> list[MatchInnings]:
    innings = []
    for entry in score_card:
        bat = _records(entry.get("batTeamDetails"))
        bowl = _records(entry.get("bowlTeamDetails"))
        details = _records(entry.get("scoreDetails"))

        innings.append(
            MatchInnings(
                innings_id=_stat(entry.get("inningsId")),
                batting_team=batting_team_name(entry) or "Batting Team",
                bowling_team=bowling_team_name(entry) or "Bowling Team",
                score_line=innings_score_line(entry),
                run_rate=format_run_rate(details.get("runs"), details.get("overs")),
                extras_line=format_extras_line(entry.get("extrasData")),
                batsmen=to_display_batsmen(bat.get("batsmenData")),
                bowlers=to_display_bowlers(bowl.get("bowlersData")),
                fall_of_wickets=to_fall_of_wickets(entry.get("wicketsData")),
            )
        )
    return innings


# --------------------------------------------------------------------------- #
#  Assembly
# --------------------------------------------------------------------------- #


def _pick_match_header(html: str, match_id: str) -> dict:
    headers = pick_all_objects_by_key(html, "matchHeader")
    for header in headers:
        if to_text(header.get("matchId")) == match_id:
            return header
    return headers[0] if headers else {}


def _format_venue(venue: Any) -> str:
    venue = _records(venue)
    return ", ".join(part for part in (first_text(venue, (key,)) for key in ("name", "city", "country")) if part)


def _format_toss(match_header: dict) -> str:
    toss = _records(match_header.get("tossResults"))
    winner = first_text(toss, ("tossWinnerName",))
    decision = first_text(toss, ("decision",))
    return f"{winner} opted to {decision}" if winner and decision else "-"


def _team_snapshot(name: str, short_name: str, score: str) -> TeamSnapshot:
    return TeamSnapshot(
        name=name,
        short_name=short_name,
        score=score,
        flag_url=get_team_flag_url(name, short_name, DETAIL_FLAG_SIZE),
    )


def parse_scorecard_details(
    match_id: str,
    html: str,
    fallback_summary: Optional[MatchSummary] = None,
    fallback_title: Optional[str] = None,
) -> MatchDetailData:
    """
    Assemble the detail view from one scorecard page.

    ``fallback_summary`` (from a list page) fills whatever the header lacks;
    ``fallback_title`` is the list page's link title. Live state, win
    prediction and yet-to-bat lists are left for the caller.
    """
    summary = fallback_summary
    match_header = _pick_match_header(html, match_id)
    infos = pick_all_objects_by_key(html, "matchInfo")
    match_info = infos[0] if infos else {}

    header_team1 = _records(match_header.get("team1"))
    header_team2 = _records(match_header.get("team2"))

    expected_names = [
        name
        for name in (
            first_text(header_team1, ("name",)),
            first_text(header_team2, ("name",)),
            safe_text(summary.team1 if summary else None),
            safe_text(summary.team2 if summary else None),
        )
        if name
    ]
    score_card = pick_best_scorecard(pick_all_arrays_by_key(html, "scoreCard"), expected_names)

    team1_name = first_text(header_team1, ("name",)) or safe_text(summary.team1 if summary else None) or "Team 1"
    team2_name = first_text(header_team2, ("name",)) or safe_text(summary.team2 if summary else None) or "Team 2"
    team1_short = (
        first_text(header_team1, ("shortName",))
        or safe_text(summary.team1_short_name if summary else None)
        or get_short_name(team1_name)
    )
    team2_short = (
        first_text(header_team2, ("shortName",))
        or safe_text(summary.team2_short_name if summary else None)
        or get_short_name(team2_name)
    )

    team1_score, team2_score = resolve_team_scores(
        score_card, (team1_name, team1_short), (team2_name, team2_short), summary
    )

    title_meta = parse_title_meta(fallback_title or "")
    match_description = first_text(match_header, ("matchDescription",))
    if fallback_title:
        title = fallback_title
    else:
        title = f"{team1_name} vs {team2_name}" + (f", {match_description}" if match_description else "")

    start_timestamp = to_text(match_header.get("matchStartTimestamp")) or (
        to_text(summary.start_date) if summary and summary.start_date else ""
    )
    try:
        start_date = float(start_timestamp) if start_timestamp else None
    except ValueError:
        start_date = None

    status = pick_best_status(
        first_text(match_header, ("status",)),
        summary.status if summary else None,
        title_meta.status,
        first_text(match_header, ("state",)),
        summary.state if summary else None,
    )
    state = first_text(match_header, ("state",)) or safe_text(summary.state if summary else None) or "-"

    info_team1 = _records(match_info.get("team1"))
    info_team2 = _records(match_info.get("team2"))
    team1_players = merge_team_players(
        merge_team_players(
            to_team_players(header_team1.get("playerDetails")), to_team_players(info_team1.get("playerDetails"))
        ),
        fallback_players_from_raw_innings(score_card, team1_name),
    )
    team2_players = merge_team_players(
        merge_team_players(
            to_team_players(header_team2.get("playerDetails")), to_team_players(info_team2.get("playerDetails"))
        ),
        fallback_players_from_raw_innings(score_card, team2_name),
    )

    logger.debug(
        f"Scorecard {match_id}: {len(score_card)} innings, "
        f"{len(team1_players)}+{len(team2_players)} players"
    )

    return MatchDetailData(
        id=match_id,
        title=title,
        series=first_text(match_header, ("seriesDesc",)) or safe_text(summary.series_name if summary else None) or "-",
        match_desc=match_description
        or safe_text(summary.match_desc if summary else None)
        or safe_text(title_meta.match_desc)
        or "-",
        format=first_text(match_header, ("matchFormat",))
        or safe_text(summary.match_format if summary else None)
        or "-",
        venue=_format_venue(match_header.get("venue")) or safe_text(summary.venue if summary else None) or "-",
        start_time=format_start_date(start_date),
        status=status,
        state=state,
        status_type=derive_status_type(
            status, state, title, has_real_score(team1_score) or has_real_score(team2_score)
        ),
        toss=_format_toss(match_header),
        team1=_team_snapshot(team1_name, team1_short, team1_score),
        team2=_team_snapshot(team2_name, team2_short, team2_score),
        innings=to_display_innings(score_card),
        team1_players=team1_players,
        team2_players=team2_players,
    )
