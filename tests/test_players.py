"""
Unit tests for roster parsing and the name-keyed player merge.
"""

from conftest import escaped_blob, html_page

from cricfeed.config import settings
from cricfeed.extract.players import (
    extract_team_players_from_commentary_payload,
    extract_team_players_from_html,
    fallback_players_from_raw_innings,
    get_player_image_url,
    merge_one_player,
    merge_team_players,
    score_player_quality,
    to_team_players,
)
from cricfeed.models import TeamPlayer


def _names(players):
    return [player.name for player in players]


# --------------------------------------------------------------------------- #
#  Raw -> TeamPlayer
# --------------------------------------------------------------------------- #


def test_to_team_players_from_id_keyed_map():
    players = to_team_players(
        {
            "1": {
                "id": 101,
                "fullName": "Rohit Sharma",
                "role": "Batsman",
                "battingStyle": "Right-hand bat",
                "captain": True,
                "faceImageId": 591,
            }
        }
    )

    assert len(players) == 1
    player = players[0]
    assert player.id == "101"
    assert player.role == "Batsman"
    assert player.bowling_style == "-"
    assert player.captain is True
    assert player.keeper is False
    assert player.image_url == f"{settings.cricbuzz_base_url}/a/img/v1/72x72/i1/c591/i.jpg"


def test_player_without_fields_gets_placeholders():
    player = to_team_players([{}, "not a record"])[0]
    assert player.id == "-"
    assert player.name == "Unknown"
    assert player.image_url is None


def test_image_url_prefers_explicit_url():
    assert get_player_image_url({"imageUrl": "//static.example.com/p.png", "id": 5}) == "https://static.example.com/p.png"
    assert get_player_image_url({"imgUrl": "/img/p.png"}) == f"{settings.cricbuzz_base_url}/img/p.png"
    assert get_player_image_url({"faceImageId": "0", "imageId": "abc"}) is None


# --------------------------------------------------------------------------- #
#  Merge
# --------------------------------------------------------------------------- #


def test_merge_one_player_ors_flags():
    merged = merge_one_player(TeamPlayer(name="MS Dhoni", captain=True), TeamPlayer(name="MS Dhoni", keeper=True))
    assert merged.captain is True
    assert merged.keeper is True


def test_merge_one_player_backfills_from_weaker_record():
    rich = TeamPlayer(id="7", name="MS Dhoni", role="WK-Batsman")
    sparse = TeamPlayer(name="MS Dhoni", batting_style="Right-hand bat", image_url="https://img/dhoni.jpg")
    assert score_player_quality(rich) > score_player_quality(sparse)

    merged = merge_one_player(sparse, rich)

    assert merged.id == "7"
    assert merged.role == "WK-Batsman"
    assert merged.batting_style == "Right-hand bat"
    assert merged.image_url == "https://img/dhoni.jpg"


def test_merge_team_players_keys_on_normalized_name():
    primary = [TeamPlayer(id="1", name="Rohit Sharma (c)", role="Batsman"), TeamPlayer(name="Virat Kohli")]
    fallback = [TeamPlayer(name="rohit  sharma", captain=True), TeamPlayer(name="Axar Patel")]

    merged = merge_team_players(primary, fallback)

    assert len(merged) == 3
    assert _names(merged) == ["Axar Patel", "Rohit Sharma (c)", "Virat Kohli"]
    assert merged[1].id == "1"
    assert merged[1].captain is True


# --------------------------------------------------------------------------- #
#  Scorecard fallback
# --------------------------------------------------------------------------- #


SCORE_CARD = [
    {
        "batTeamDetails": {
            "batTeamName": "India",
            "batsmenData": {"bat_1": {"batName": "Rohit Sharma", "isCaptain": True, "batId": 576}},
        },
        "bowlTeamDetails": {
            "bowlTeamName": "Australia",
            "bowlersData": {"bowl_1": {"bowlName": "Pat Cummins"}},
        },
        "wicketsData": {"wkt_1": {"batName": "Shubman Gill"}},
    },
    {
        "batTeamDetails": {
            "batTeamName": "Australia",
            "batsmenData": {"bat_1": {"batName": "Pat Cummins"}},
        },
        "bowlTeamDetails": {
            "bowlTeamName": "India",
            "bowlersData": {"bowl_1": {"bowlName": "Jasprit Bumrah"}},
        },
    },
]


def test_fallback_players_from_raw_innings():
    india = fallback_players_from_raw_innings(SCORE_CARD, "India")
    australia = fallback_players_from_raw_innings(SCORE_CARD, "Australia")

    assert _names(india) == ["Jasprit Bumrah", "Rohit Sharma", "Shubman Gill"]
    assert [player.id for player in india] == ["india-1", "india-2", "india-3"]
    assert [player.role for player in india] == ["Bowler", "Batter", "Batter"]
    assert india[1].captain is True
    assert india[1].image_url.endswith("/c576/i.jpg")

    assert _names(australia) == ["Pat Cummins"]
    assert australia[0].role == "All-rounder"


def test_fallback_players_for_unknown_team():
    assert fallback_players_from_raw_innings(SCORE_CARD, "Nepal") == []


# --------------------------------------------------------------------------- #
#  Pages and payloads
# --------------------------------------------------------------------------- #


COMMENTARY_PAYLOAD = {
    "matchHeader": {
        "team1": {"id": 2, "playingXI": [101, 102]},
        "team2": {"id": 4, "players": [{"id": 201, "name": "Pat Cummins", "role": "Bowler"}]},
    },
    "players": {
        "101": {"id": 101, "name": "Rohit Sharma", "teamId": 2},
        "102": {"id": 102, "name": "Virat Kohli", "teamId": 2},
        "103": {"id": 103, "name": "Jasprit Bumrah", "teamId": 2},
        "201": {"id": 201, "name": "Pat Cummins", "teamId": 4},
    },
}


def test_players_from_commentary_payload():
    team1, team2 = extract_team_players_from_commentary_payload(COMMENTARY_PAYLOAD)

    assert _names(team1) == ["Jasprit Bumrah", "Rohit Sharma", "Virat Kohli"]
    assert _names(team2) == ["Pat Cummins"]
    assert team2[0].role == "Bowler"


def test_players_from_commentary_payload_without_rosters():
    assert extract_team_players_from_commentary_payload({}) == ([], [])
    assert extract_team_players_from_commentary_payload("nope") == ([], [])


def test_players_from_html():
    html = html_page(
        escaped_blob(
            "matchHeader",
            {
                "team1": {"id": 2, "playerDetails": [{"id": 101, "fullName": "Rohit Sharma", "captain": True}]},
                "team2": {"id": 4, "playerDetails": []},
            },
        ),
        escaped_blob("players", [{"id": 301, "name": "Travis Head", "teamId": 4}]),
    )

    team1, team2 = extract_team_players_from_html(html)

    assert _names(team1) == ["Rohit Sharma"]
    assert team1[0].captain is True
    assert _names(team2) == ["Travis Head"]
    assert extract_team_players_from_html("") == ([], [])
