from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MatchStatusType(str, Enum):
    """Where a match sits in its lifecycle. Always derived, never scraped."""

    LIVE = "live"
    UPCOMING = "upcoming"
    COMPLETE = "complete"


class BallKind(str, Enum):
    """Closed classification of a single delivery outcome."""

    WICKET = "wicket"
    FOUR = "four"
    SIX = "six"
    EXTRA = "extra"
    DOT = "dot"
    RUN = "run"
    OTHER = "other"


class Record(BaseModel):
    """Immutable value record; serializes to camelCase with ``by_alias=True``."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =========================================================================== #
#  Match list
# =========================================================================== #


class TeamSnapshot(Record):
    name: str
    short_name: str = ""
    score: str = Field("", description="Free text, e.g. '187/4 (32.1 Overs)' or 'Yet to bat'")
    flag_url: Optional[str] = None


class MatchListItem(Record):
    id: str
    title: str
    match_desc: str = ""
    series: str = ""
    venue: str = ""
    team1: TeamSnapshot
    team2: TeamSnapshot
    status: str = "-"
    state: str = ""
    status_type: MatchStatusType = MatchStatusType.UPCOMING
    match_url: str = ""


class MatchesData(Record):
    live: list[MatchListItem] = Field(default_factory=list)
    upcoming: list[MatchListItem] = Field(default_factory=list)
    recent: list[MatchListItem] = Field(default_factory=list)


# =========================================================================== #
#  Scorecard
# =========================================================================== #


class MatchBatter(Record):
    """Scorecard batting row. Every stat is a display string; "-" means unknown."""

    name: str
    runs: str = "-"
    balls: str = "-"
    fours: str = "-"
    sixes: str = "-"
    strike_rate: str = "-"
    dismissal: str = "-"


class MatchBowler(Record):
    name: str
    overs: str = "-"
    maidens: str = "-"
    runs: str = "-"
    wickets: str = "-"
    economy: str = "-"
    wides: str = "-"
    no_balls: str = "-"


class MatchInnings(Record):
    innings_id: str = "-"
    batting_team: str
    bowling_team: str
    score_line: str = "-"
    run_rate: str = "-"
    extras_line: str = "-"
    batsmen: list[MatchBatter] = Field(default_factory=list)
    bowlers: list[MatchBowler] = Field(default_factory=list)
    fall_of_wickets: list[str] = Field(default_factory=list)
    yet_to_bat: list[str] = Field(default_factory=list)


# =========================================================================== #
#  Live state
# =========================================================================== #


class LiveBatter(Record):
    id: str
    name: str
    runs: str = "-"
    balls: str = "-"
    fours: str = "-"
    sixes: str = "-"
    strike_rate: str = "-"
    on_strike: bool = False


class LiveBowler(Record):
    id: str
    name: str
    overs: str = "-"
    maidens: str = "-"
    runs: str = "-"
    wickets: str = "-"
    economy: str = "-"


class LiveOverBall(Record):
    label: str
    value: str
    kind: BallKind


class MatchLiveState(Record):
    """
    In-play snapshot. Replaced whole when a better-scoring candidate turns up;
    never stitched together field by field.
    """

    batters: list[LiveBatter] = Field(default_factory=list)
    bowler: Optional[LiveBowler] = None
    previous_bowlers: list[LiveBowler] = Field(default_factory=list)
    current_over_balls: list[LiveOverBall] = Field(default_factory=list)
    recent_balls: list[LiveOverBall] = Field(default_factory=list)
    recent_balls_label: str = "Current over"
    current_over_label: str = "-"
    current_run_rate: str = "-"
    required_run_rate: str = "-"


# =========================================================================== #
#  Squads & detail
# =========================================================================== #


class TeamPlayer(Record):
    id: str = "-"
    name: str
    role: str = "-"
    batting_style: str = "-"
    bowling_style: str = "-"
    captain: bool = False
    keeper: bool = False
    substitute: bool = False
    image_url: Optional[str] = None


class MatchWinPrediction(Record):
    team1_percent: str
    team2_percent: str


class MatchDetailData(Record):
    id: str
    title: str
    series: str = "-"
    match_desc: str = "-"
    format: str = "-"
    venue: str = "-"
    start_time: str = "-"
    status: str = "-"
    state: str = "-"
    status_type: MatchStatusType = MatchStatusType.UPCOMING
    toss: str = "-"
    team1: TeamSnapshot
    team2: TeamSnapshot
    innings: list[MatchInnings] = Field(default_factory=list)
    team1_players: list[TeamPlayer] = Field(default_factory=list)
    team2_players: list[TeamPlayer] = Field(default_factory=list)
    live_state: Optional[MatchLiveState] = None
    win_prediction: Optional[MatchWinPrediction] = None


# =========================================================================== #
#  Intermediate records (never leave the pipeline)
# =========================================================================== #


class BallOutcome(Record):
    value: str
    kind: BallKind
    is_legal_delivery: bool = True


class ParsedCommentaryBall(Record):
    over: int
    raw_ball: int
    outcome: BallOutcome
    index: int = Field(..., description="Position in the source list; final sort tie-break")


class MatchLink(Record):
    title: str
    url: str


class TitleMeta(Record):
    team1: Optional[str] = None
    team2: Optional[str] = None
    match_desc: Optional[str] = None
    status: Optional[str] = None


class MatchSummary(Record):
    """Per-match summary harvested from the JSON embedded in a list page."""

    match_id: int
    team1: Optional[str] = None
    team2: Optional[str] = None
    team1_short_name: Optional[str] = None
    team2_short_name: Optional[str] = None
    team1_score: Optional[str] = None
    team2_score: Optional[str] = None
    series_name: Optional[str] = None
    match_desc: Optional[str] = None
    match_format: Optional[str] = None
    state: Optional[str] = None
    status: Optional[str] = None
    venue: Optional[str] = None
    start_date: Optional[float] = None


class BalancedChunk(Record):
    """A balanced ``{...}``/``[...]`` slice of a larger source string."""

    text: str
    end_index: int
