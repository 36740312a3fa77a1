"""
Squad reconciliation.

Rosters turn up in several overlapping places: match header team nodes,
matchInfo, a global ``players`` catalog keyed by id, commentary payloads,
and (as a last resort) the names that appear in the scorecard itself. None
of them is authoritative and ids are often missing from one side, so players
are merged on their normalized name and the richer record wins per player.
"""

import logging
from typing import Any, Iterable, Optional

from cricfeed.config import settings
from cricfeed.extract import probes
from cricfeed.extract.json_blobs import pick_all_arrays_by_key, pick_all_objects_by_key
from cricfeed.extract.probes import first_flag, first_text, is_record, to_text
from cricfeed.extract.text import normalize_player_key, normalize_player_name, normalize_team_key
from cricfeed.models import TeamPlayer

logger = logging.getLogger(__name__)

Rosters = tuple[list[TeamPlayer], list[TeamPlayer]]


# --------------------------------------------------------------------------- #
#  Raw -> TeamPlayer
# --------------------------------------------------------------------------- #


def normalize_raw_players(players: Any) -> list[dict]:
    """Accept a list or an id-keyed map; keep only record entries."""
    if isinstance(players, list):
        values = players
    elif is_record(players):
        values = list(players.values())
    else:
        return []
    return [entry for entry in values if is_record(entry)]


def _to_url_candidate(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None

    candidate = value.strip()
    if candidate.startswith(("http://", "https://")):
        return candidate
    if candidate.startswith("//"):
        return f"https:{candidate}"
    if candidate.startswith("/"):
        return f"{settings.cricbuzz_base_url}{candidate}"
    return None


def image_url_from_id(value: Any) -> Optional[str]:
    text = to_text(value)
    try:
        image_id = int(float(text))
    except (ValueError, OverflowError):
        return None

    if image_id <= 0:
        return None
    return f"{settings.cricbuzz_base_url}/a/img/v1/72x72/i1/c{image_id}/i.jpg"


def get_player_image_url(player: dict) -> Optional[str]:
    for field in probes.PLAYER_IMAGE_URL:
        url = _to_url_candidate(player.get(field))
        if url:
            return url

    for field in probes.PLAYER_IMAGE_ID:
        url = image_url_from_id(player.get(field))
        if url:
            return url

    return None


def to_team_player(raw: dict) -> TeamPlayer:
    fields = probes.PLAYER
    return TeamPlayer(
        id=first_text(raw, fields["id"]) or "-",
        name=first_text(raw, fields["name"]) or "Unknown",
        role=first_text(raw, fields["role"]) or "-",
        batting_style=first_text(raw, fields["batting_style"]) or "-",
        bowling_style=first_text(raw, fields["bowling_style"]) or "-",
        captain=first_flag(raw, fields["captain"]),
        keeper=first_flag(raw, fields["keeper"]),
        substitute=first_flag(raw, fields["substitute"]),
        image_url=get_player_image_url(raw),
    )


def to_team_players(players: Any) -> list[TeamPlayer]:
    return [to_team_player(raw) for raw in normalize_raw_players(players)]


# --------------------------------------------------------------------------- #
#  Merge
# --------------------------------------------------------------------------- #


def score_player_quality(player: TeamPlayer) -> int:
    score = 0
    if player.id and player.id != "-":
        score += 2
    if player.role and player.role != "-":
        score += 2
    if player.batting_style and player.batting_style != "-":
        score += 1
    if player.bowling_style and player.bowling_style != "-":
        score += 1
    if player.image_url:
        score += 2
    if player.captain:
        score += 1
    if player.keeper:
        score += 1
    return score


def merge_one_player(existing: TeamPlayer, incoming: TeamPlayer) -> TeamPlayer:
    """
    Keep the higher-quality record (``existing`` on ties), backfill its "-"
    fields from the other one, and OR the flags so a captain/keeper/substitute
    marker seen once is never lost.
    """
    keep_incoming = score_player_quality(incoming) > score_player_quality(existing)
    better, other = (incoming, existing) if keep_incoming else (existing, incoming)

    def pick(field: str) -> str:
        value = getattr(better, field)
        return value if value != "-" else getattr(other, field)

    return TeamPlayer(
        id=pick("id"),
        name=better.name or other.name or "Unknown",
        role=pick("role"),
        batting_style=pick("batting_style"),
        bowling_style=pick("bowling_style"),
        captain=existing.captain or incoming.captain,
        keeper=existing.keeper or incoming.keeper,
        substitute=existing.substitute or incoming.substitute,
        image_url=better.image_url or other.image_url,
    )


def merge_team_players(primary: Iterable[TeamPlayer], fallback: Iterable[TeamPlayer]) -> list[TeamPlayer]:
    """Union by normalized name. Fallback goes in first so primary wins quality ties."""
    merged: dict[str, TeamPlayer] = {}

    def merge_in(player: TeamPlayer) -> None:
        key = normalize_player_key(player.name)
        existing = merged.get(key)
        merged[key] = player if existing is None else merge_one_player(existing, player)

    for player in fallback:
        merge_in(player)
    for player in primary:
        merge_in(player)

    return sorted(merged.values(), key=lambda player: player.name.lower())


# --------------------------------------------------------------------------- #
#  Scorecard fallback
# --------------------------------------------------------------------------- #


def _upsert_accumulated(players: dict[str, dict], name: Any, **flags: Any) -> None:
    cleaned = normalize_player_name(to_text(name))
    if not cleaned:
        return

    key = normalize_player_key(cleaned)
    entry = players.setdefault(
        key,
        {"name": cleaned, "captain": False, "keeper": False, "batted": False, "bowled": False, "image_url": None},
    )
    for flag in ("captain", "keeper", "batted", "bowled"):
        entry[flag] = entry[flag] or bool(flags.get(flag))
    entry["image_url"] = entry["image_url"] or flags.get("image_url")


def _role_from_accumulated(entry: dict) -> str:
    if entry["batted"] and entry["bowled"]:
        return "All-rounder"
    if entry["bowled"]:
        return "Bowler"
    if entry["batted"]:
        return "Batter"
    return "-"


def _record_values(value: Any) -> list[dict]:
    if is_record(value):
        return [entry for entry in value.values() if is_record(entry)]
    if isinstance(value, list):
        return [entry for entry in value if is_record(entry)]
    return []


def fallback_players_from_raw_innings(score_card: list[dict], team_name: str) -> list[TeamPlayer]:
    """
    Reconstruct a squad from scorecard rows alone: batters, bowlers and
    dismissed batters of ``team_name``, with a role guessed from whether they
    batted, bowled or both. Lower confidence than any explicit roster.
    """
    team_key = normalize_team_key(team_name)
    accumulated: dict[str, dict] = {}

    for innings in score_card:
        if not is_record(innings):
            continue

        bat_details = innings.get("batTeamDetails") or {}
        bowl_details = innings.get("bowlTeamDetails") or {}
        batting_key = normalize_team_key(first_text(bat_details, ("batTeamName", "batTeamShortName")))
        bowling_key = normalize_team_key(first_text(bowl_details, ("bowlTeamName", "bowlTeamShortName")))

        if batting_key == team_key:
            for batter in _record_values(bat_details.get("batsmenData")):
                _upsert_accumulated(
                    accumulated,
                    batter.get("batName"),
                    captain=batter.get("isCaptain"),
                    keeper=batter.get("isKeeper"),
                    batted=True,
                    image_url=image_url_from_id(batter.get("id")) or image_url_from_id(batter.get("batId")),
                )
            for wicket in _record_values(innings.get("wicketsData")):
                _upsert_accumulated(accumulated, wicket.get("batName"), batted=True)

        if bowling_key == team_key:
            for bowler in _record_values(bowl_details.get("bowlersData")):
                _upsert_accumulated(
                    accumulated,
                    bowler.get("bowlName"),
                    bowled=True,
                    image_url=image_url_from_id(bowler.get("id")) or image_url_from_id(bowler.get("bowlId")),
                )

    ordered = sorted(accumulated.values(), key=lambda entry: entry["name"].lower())
    return [
        TeamPlayer(
            id=f"{team_key}-{index}",
            name=entry["name"],
            role=_role_from_accumulated(entry),
            captain=entry["captain"],
            keeper=entry["keeper"],
            image_url=entry["image_url"],
        )
        for index, entry in enumerate(ordered, start=1)
    ]


# --------------------------------------------------------------------------- #
#  Roster extraction from pages and payloads
# --------------------------------------------------------------------------- #


def _players_from_unknown(value: Any) -> list[TeamPlayer]:
    if isinstance(value, list):
        return to_team_players([entry for entry in value if is_record(entry)])
    if is_record(value) and all(is_record(entry) for entry in value.values()):
        return to_team_players(value)
    return []


def _players_from_mixed_ids(value: Any, players_by_id: dict[str, TeamPlayer]) -> list[TeamPlayer]:
    """Arrays can mix full records and bare ids pointing into the catalog."""
    if not isinstance(value, list):
        return []

    direct: list[dict] = []
    by_id: list[TeamPlayer] = []
    for entry in value:
        if is_record(entry):
            direct.append(entry)
            continue
        mapped = players_by_id.get(to_text(entry))
        if mapped is not None:
            by_id.append(mapped)

    return merge_team_players(to_team_players(direct), by_id)


def collect_players_from_team_node(team_node: Any, players_by_id: dict[str, TeamPlayer]) -> list[TeamPlayer]:
    if not is_record(team_node):
        return []

    players: list[TeamPlayer] = []
    for key in probes.TEAM_ROSTER_SOURCES:
        candidate = team_node.get(key)
        if not candidate:
            continue
        players = merge_team_players(players, _players_from_unknown(candidate))
        players = merge_team_players(players, _players_from_mixed_ids(candidate, players_by_id))
    return players


def _catalog_by_id(raw_catalog: list[dict]) -> dict[str, TeamPlayer]:
    return {player.id: player for player in to_team_players(raw_catalog) if player.id and player.id != "-"}


def _players_for_team_id(raw_catalog: list[dict], team_id: str) -> list[TeamPlayer]:
    if not team_id:
        return []
    return to_team_players(
        [raw for raw in raw_catalog if first_text(raw, probes.PLAYER["team_id"]) == team_id]
    )


def _rosters_from_nodes(team1_nodes: list[Any], team2_nodes: list[Any], raw_catalog: list[dict]) -> Rosters:
    players_by_id = _catalog_by_id(raw_catalog)
    rosters = []

    for nodes in (team1_nodes, team2_nodes):
        players: list[TeamPlayer] = []
        for node in nodes:
            players = merge_team_players(players, collect_players_from_team_node(node, players_by_id))

        team_id = next((to_text(node.get("id")) for node in nodes if is_record(node) and to_text(node.get("id"))), "")
        players = merge_team_players(players, _players_for_team_id(raw_catalog, team_id))
        rosters.append(players)

    return rosters[0], rosters[1]


def _team_node(parent: Any, key: str) -> Optional[dict]:
    if not is_record(parent):
        return None
    node = parent.get(key)
    return node if is_record(node) else None


def extract_team_players_from_html(html: str) -> Rosters:
    """Rosters from the first ``matchHeader``/``matchInfo`` blobs plus every ``players`` catalog."""
    if not html:
        return [], []

    headers = pick_all_objects_by_key(html, "matchHeader")
    infos = pick_all_objects_by_key(html, "matchInfo")
    match_header = headers[0] if headers else None
    match_info = infos[0] if infos else None

    raw_catalog: list[dict] = []
    for array in pick_all_arrays_by_key(html, "players"):
        raw_catalog.extend(entry for entry in array if is_record(entry))
    for mapping in pick_all_objects_by_key(html, "players"):
        raw_catalog.extend(normalize_raw_players(mapping))

    return _rosters_from_nodes(
        [_team_node(match_header, "team1"), _team_node(match_info, "team1")],
        [_team_node(match_header, "team2"), _team_node(match_info, "team2")],
        raw_catalog,
    )


def extract_team_players_from_commentary_payload(payload: Any) -> Rosters:
    if not is_record(payload):
        return [], []

    header = payload.get("matchHeader")
    info = payload.get("matchInfo")
    raw_catalog = normalize_raw_players(payload.get("players"))

    return _rosters_from_nodes(
        [_team_node(header, "team1"), _team_node(info, "team1"), _team_node(payload, "team1")],
        [_team_node(header, "team2"), _team_node(info, "team2"), _team_node(payload, "team2")],
        raw_catalog,
    )
