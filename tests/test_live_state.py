"""
Unit tests for live-state candidate parsing, scoring and preference.
"""

from conftest import LIVE_MINI_SCORE, commentary_line, escaped_blob, html_page, plain_blob

from cricfeed.extract.live_state import (
    derive_live_state_from_innings,
    parse_candidate_state,
    parse_live_state_from_commentary_payload,
    parse_live_state_from_html,
    pick_preferred_live_state,
    score_state,
    to_bowling_state,
    to_live_batters,
)
from cricfeed.models import BallKind, LiveBatter, MatchBatter, MatchBowler, MatchInnings, MatchLiveState


def _state(batters: int = 0, rate: str = "-") -> MatchLiveState:
    return MatchLiveState(
        batters=[LiveBatter(id=str(n), name=f"Batter {n}") for n in range(batters)],
        current_run_rate=rate,
    )


# --------------------------------------------------------------------------- #
#  Batters & bowlers
# --------------------------------------------------------------------------- #


def test_named_slots_give_striker_and_non_striker():
    batters = to_live_batters(LIVE_MINI_SCORE)

    assert [batter.name for batter in batters] == ["Rohit Sharma", "Virat Kohli"]
    assert [batter.on_strike for batter in batters] == [True, False]
    assert batters[0].id == "1"
    assert batters[0].runs == "100"


def test_batters_capped_and_deduplicated():
    candidate = {
        "batsmanStriker": {"batName": "Rohit Sharma"},
        "striker": {"name": "rohit sharma"},
        "batsman1": {"name": "Virat Kohli"},
        "batsman2": {"name": "Shubman Gill"},
    }
    batters = to_live_batters(candidate)
    assert [batter.name for batter in batters] == ["Rohit Sharma", "Virat Kohli"]


def test_batters_fall_back_to_not_out_rows():
    candidate = {
        "batTeam": {
            "batsmen": [
                {"name": "Travis Head", "outDesc": "c Kohli b Bumrah"},
                {"name": "Steve Smith", "outDesc": "not out"},
                {"name": "Mitchell Marsh", "outDesc": ""},
                {"name": "Glenn Maxwell", "outDesc": "batting"},
            ]
        }
    }
    batters = to_live_batters(candidate)

    assert [batter.name for batter in batters] == ["Steve Smith", "Mitchell Marsh"]
    assert batters[0].on_strike is True
    assert batters[0].id == "steve-smith"


def test_bowling_state_dedupes_and_keeps_previous_with_figures():
    candidate = {
        "currentBowler": {"id": 9, "name": "Cummins", "overs": "3.4"},
        "bowler": {"id": 9, "name": "cummins"},
        "bowlTeam": {"bowlers": [{"name": "Starc", "overs": "5"}, {"name": "Lyon"}]},
    }
    bowler, previous = to_bowling_state(candidate)

    assert bowler.name == "Cummins"
    assert bowler.overs == "3.4"
    assert [entry.name for entry in previous] == ["Starc"]


def test_bowling_state_empty():
    assert to_bowling_state({}) == (None, [])


# --------------------------------------------------------------------------- #
#  Candidates
# --------------------------------------------------------------------------- #


def test_parse_candidate_state_from_mini_score():
    state = parse_candidate_state(LIVE_MINI_SCORE)

    assert state.bowler.name == "Pat Cummins"
    assert [ball.label for ball in state.current_over_balls] == ["18.1", "18.2", "18.3", "18.4", "18.5", "18.6"]
    assert state.current_over_balls[3].kind == BallKind.WICKET
    assert len(state.recent_balls) == 9
    assert state.recent_balls_label == "Last 9 balls"
    assert state.current_over_label == "18"
    assert state.current_run_rate == "8.94"
    assert state.required_run_rate == "10"
    assert score_state(state) == 29


def test_parse_candidate_state_without_content():
    assert parse_candidate_state({"overs": "12.3", "currentRunRate": 7.1}) is None
    assert parse_candidate_state("not a record") is None


def test_preference_is_whole_object_and_monotonic():
    weak = _state(batters=1)
    strong = _state(batters=2, rate="7.50")

    assert pick_preferred_live_state(weak, strong) is strong
    assert pick_preferred_live_state(strong, weak) is strong
    assert pick_preferred_live_state(None, weak) is weak
    assert pick_preferred_live_state(weak, None) is weak
    assert score_state(pick_preferred_live_state(weak, strong)) >= score_state(weak)


def test_preference_keeps_current_on_ties():
    first = _state(batters=1)
    second = _state(batters=1)
    assert pick_preferred_live_state(first, second) is first


def test_live_state_from_html_picks_richest_candidate():
    weaker = [{"batTeam": {"batsmen": [{"name": "Someone Else", "outDesc": "not out"}]}}]
    html = html_page(escaped_blob("miniscore", LIVE_MINI_SCORE), plain_blob("inningsScoreList", weaker))

    state = parse_live_state_from_html(html)

    assert [batter.name for batter in state.batters] == ["Rohit Sharma", "Virat Kohli"]
    assert parse_live_state_from_html("") is None
    assert parse_live_state_from_html("<html></html>") is None


# --------------------------------------------------------------------------- #
#  Commentary payloads
# --------------------------------------------------------------------------- #


def test_commentary_payload_fills_balls_for_mini_score():
    payload = {
        "miniscore": {
            "batsmanStriker": {"batName": "Rohit Sharma"},
            "overs": "4.3",
        },
        "commentaryList": [
            commentary_line(5, 3, "FOUR, lovely shot"),
            commentary_line(5, 2, "no run", 0),
            commentary_line(5, 1, "1 run", 1),
            commentary_line(4, 6, "no run", 0),
        ],
    }
    state = parse_live_state_from_commentary_payload(payload)

    assert state.batters[0].name == "Rohit Sharma"
    assert [ball.label for ball in state.current_over_balls] == ["5.1", "5.2", "5.3"]
    assert [ball.label for ball in state.recent_balls] == ["4.6", "5.1", "5.2", "5.3"]
    assert state.recent_balls_label == "Last 4 balls"


def test_commentary_only_payload():
    payload = {"commentaryList": [commentary_line(4, ball, "no run", 0) for ball in (1, 2, 3)]}
    state = parse_live_state_from_commentary_payload(payload)

    assert [ball.label for ball in state.current_over_balls] == ["4.1", "4.2", "4.3"]
    assert state.recent_balls_label == "Last 3 balls"


def test_commentary_payload_without_anything_usable():
    assert parse_live_state_from_commentary_payload({"commentaryList": []}) is None
    assert parse_live_state_from_commentary_payload([1, 2, 3]) is None


# --------------------------------------------------------------------------- #
#  Scorecard fallback
# --------------------------------------------------------------------------- #


def test_derive_live_state_from_innings():
    innings = [
        MatchInnings(
            batting_team="India",
            bowling_team="Australia",
            score_line="161/1 (18 Overs)",
            run_rate="8.94",
            batsmen=[
                MatchBatter(name="Shubman Gill", runs="12", dismissal="c Head b Starc"),
                MatchBatter(name="Rohit Sharma (c)", runs="100", dismissal="not out"),
                MatchBatter(name="Virat Kohli", runs="40", dismissal="batting"),
            ],
            bowlers=[MatchBowler(name="Pat Cummins", overs="3.4"), MatchBowler(name="Mitchell Starc", overs="4")],
        )
    ]
    state = derive_live_state_from_innings(innings)

    assert [batter.name for batter in state.batters] == ["Rohit Sharma (c)", "Virat Kohli"]
    assert state.batters[0].on_strike is True
    assert state.bowler.name == "Pat Cummins"
    assert [bowler.name for bowler in state.previous_bowlers] == ["Mitchell Starc"]
    assert state.current_over_label == "18"
    assert state.current_run_rate == "8.94"


def test_derive_live_state_from_empty_innings():
    assert derive_live_state_from_innings([]) is None
    assert derive_live_state_from_innings([MatchInnings(batting_team="A", bowling_team="B")]) is None
