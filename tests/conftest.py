"""
Shared fixtures for the test suite.

Key design decisions:
  - Pages are built in-memory: JSON blobs are embedded either plainly or
    backslash-escaped (the way the live site double-encodes JSON inside a
    script string), so every extractor sees both shapes.
  - Provides an `httpx.AsyncClient` wired to the FastAPI app via ASGITransport.
  - Supplies small, realistic match fixtures (header, scorecard, mini score).
"""

import json

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cricfeed.main import app


# --------------------------------------------------------------------------- #
#  Page builders
# --------------------------------------------------------------------------- #

def plain_blob(key: str, value) -> str:
    return f'"{key}":{json.dumps(value, separators=(",", ":"))}'


def escaped_blob(key: str, value) -> str:
    """`\\"key\\":{\\"a\\":1}` as found inside a JSON string in a <script> tag."""
    return plain_blob(key, value).replace('"', '\\"')


def html_page(*blobs: str, body: str = "") -> str:
    script = ",".join(blobs)
    return (
        "<html><head><title>Cricket</title></head><body>"
        f"{body}"
        f'<script>self.__next_f.push([1,"{{{script}}}"])</script>'
        "</body></html>"
    )


# --------------------------------------------------------------------------- #
#  HTTP client: talks to FastAPI app without a real server
# --------------------------------------------------------------------------- #

@pytest_asyncio.fixture
async def client() -> AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# --------------------------------------------------------------------------- #
#  Realistic match data
# --------------------------------------------------------------------------- #

LIVE_MATCH_ID = 555

LIVE_MATCH_HEADER = {
    "matchId": LIVE_MATCH_ID,
    "matchDescription": "2nd T20I",
    "matchFormat": "T20",
    "seriesDesc": "Australia tour of India",
    "status": "India need 20 runs in 12 balls",
    "state": "In Progress",
    "matchStartTimestamp": 1700000000000,
    "venue": {"name": "Wankhede Stadium", "city": "Mumbai", "country": "India"},
    "tossResults": {"tossWinnerName": "Australia", "decision": "bat"},
    "team1": {
        "id": 2,
        "name": "India",
        "shortName": "IND",
        "playerDetails": [
            {"id": 1, "fullName": "Rohit Sharma", "captain": True, "role": "Batsman"},
            {"id": 2, "fullName": "Virat Kohli", "role": "Batsman"},
            {"id": 3, "fullName": "Hardik Pandya", "role": "Batting Allrounder"},
            {"id": 4, "fullName": "Sanju Samson", "substitute": True},
        ],
    },
    "team2": {
        "id": 4,
        "name": "Australia",
        "shortName": "AUS",
        "playerDetails": [{"id": 10, "fullName": "Pat Cummins", "role": "Bowler"}],
    },
}

LIVE_SCORE_CARD = [
    {
        "inningsId": 1,
        "batTeamDetails": {
            "batTeamName": "Australia",
            "batTeamShortName": "AUS",
            "batsmenData": {
                "bat_1": {
                    "batName": "Travis Head",
                    "runs": 80,
                    "balls": 50,
                    "fours": 8,
                    "sixes": 3,
                    "strikeRate": 160,
                    "outDesc": "c Kohli b Bumrah",
                },
            },
        },
        "bowlTeamDetails": {
            "bowlTeamName": "India",
            "bowlTeamShortName": "IND",
            "bowlersData": {
                "bowl_1": {
                    "bowlName": "Jasprit Bumrah",
                    "overs": 4,
                    "maidens": 0,
                    "runs": 30,
                    "wickets": 2,
                    "economy": 7.5,
                    "wides": 1,
                    "no_balls": 0,
                },
            },
        },
        "scoreDetails": {"runs": 180, "wickets": 6, "overs": 20},
        "extrasData": {"total": 8, "byes": 1, "legByes": 2, "wides": 4, "noBalls": 1, "penalty": 0},
        "wicketsData": {"wkt_1": {"wktNbr": 1, "batName": "Travis Head", "wktRuns": 120, "wktOver": 11.6}},
    },
    {
        "inningsId": 2,
        "batTeamDetails": {
            "batTeamName": "India",
            "batTeamShortName": "IND",
            "batsmenData": {
                "bat_2": {"batName": "Virat Kohli", "runs": 40, "balls": 30, "outDesc": "batting"},
                "bat_1": {"batName": "Rohit Sharma", "isCaptain": True, "runs": 100, "balls": 60, "outDesc": "not out"},
                "bat_3": {"batName": "Hardik Pandya", "outDesc": ""},
            },
        },
        "bowlTeamDetails": {
            "bowlTeamName": "Australia",
            "bowlTeamShortName": "AUS",
            "bowlersData": {
                "bowl_1": {"bowlName": "Pat Cummins", "overs": 3.4, "maidens": 0, "runs": 28, "wickets": 1, "economy": 7.64},
            },
        },
        "scoreDetails": {"runs": 161, "wickets": 1, "overs": 18},
    },
]

LIVE_MINI_SCORE = {
    "batsmanStriker": {"batId": 1, "batName": "Rohit Sharma", "batRuns": 100, "batBalls": 60},
    "batsmanNonStriker": {"batId": 2, "batName": "Virat Kohli", "batRuns": 40, "batBalls": 30},
    "bowlerStriker": {"bowlId": 10, "bowlName": "Pat Cummins", "bowlOvs": 3.4, "bowlRuns": 28, "bowlWkts": 1},
    "overs": 18,
    "currentRunRate": 8.94,
    "requiredRunRate": 10.0,
    "recentOvsStats": "1 4 0 | 6 1 1 W 0 2",
}


def commentary_line(over: int, ball: int, text: str, runs: int | None = None) -> dict:
    line = {"overNumber": over, "ballNbr": ball, "commText": text}
    if runs is not None:
        line["runs"] = runs
    return line
