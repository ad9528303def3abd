# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Translate plain dictionaries and JSON documents into domain objects.

Squads are read from the repository's ``data/players.json`` schema, tactical
setups and roles are converted to and from dictionaries keyed by camelCase
field names, and finished matches can be exported for storage or display.
Enum members always serialise to their token values so that documents stay
stable across releases. Missing ratings fall back to 50 so that sparse datasets
still produce valid players.
"""
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Tuple

from matchday.engine.config import ENGINE_CONFIG
from matchday.models.match import Match
from matchday.models.player import Player
from matchday.models.tactics import Formation, PlayerRole, TacticalSetup
from matchday.models.team import Stadium, Team


def player_from_dict(d: dict) -> Player:
    """Build a ``Player`` from a plain dictionary payload.

    Parameters
    ----------
    d
        Mapping with ``id``, ``name``, ``age``, ``position`` and the
        ``technical``, ``physical`` and ``mental`` ratings.

    Returns
    -------
    Player
        Player with defaults applied for any missing value.
    """
    player_id = str(d.get("id", "0"))
    return Player(
        player_id=player_id,
        name=d.get("name", f"player_{player_id}"),
        age=d.get("age", 25),
        position=d.get("position", "midfielder"),
        technical=d.get("technical", 50),
        physical=d.get("physical", 50),
        mental=d.get("mental", 50),
    )


def team_from_dict(d: dict, default_name: str = "Team") -> Team:
    """Build a ``Team`` and its squad from a dictionary payload.

    Parameters
    ----------
    d
        Mapping with ``id``, ``name``, ``players`` and optional ``formation``,
        ``startingXI``, ``stadium``, ``morale`` and ``managerRating`` keys.
    default_name
        Name used when the payload omits one.

    Returns
    -------
    Team
        Team ready for simulation.
    """
    stadium_data = d.get("stadium", {}) or {}
    stadium = Stadium(
        name=stadium_data.get("name", f"{d.get('name', default_name)} Ground"),
        capacity=stadium_data.get("capacity", ENGINE_CONFIG.home_advantage.default_capacity),
        city=stadium_data.get("city", d.get("city", "")),
    )
    return Team(
        team_id=str(d.get("id", default_name.lower())),
        name=d.get("name", default_name),
        players=[player_from_dict(pl) for pl in d.get("players", [])],
        city=d.get("city", ""),
        founded_year=d.get("foundedYear", 1900),
        stadium=stadium,
        formation=d.get("formation", Formation.F442.value),
        starting_xi=[str(pid) for pid in d.get("startingXI", [])],
        morale=d.get("morale", 75),
        manager_rating=d.get("managerRating", 50),
    )


def load_teams_from_json(path: str) -> Tuple[Team, Team]:
    """Load home and away teams from the repository's JSON schema.

    Parameters
    ----------
    path
        The filesystem path to the JSON document following the
        ``data/players.json`` schema.

    Returns
    -------
    tuple[Team, Team]
        A pair of ``Team`` objects in ``(home, away)`` order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the JSON payload is missing the ``home`` or ``away`` section.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Players JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    return team_from_dict(data["home"], "Home"), team_from_dict(data["away"], "Away")


def tactical_setup_to_dict(setup: TacticalSetup) -> Dict[str, Any]:
    """Serialise a tactical setup.

    Parameters
    ----------
    setup
        Setup to serialise.

    Returns
    -------
    dict
        camelCase mapping with enum members replaced by their tokens.
    """
    return {
        "formation": setup.formation.value,
        "attackingMentality": setup.attacking_mentality.value,
        "defensiveStyle": setup.defensive_style.value,
        "attackingStyle": setup.attacking_style.value,
        "width": setup.width,
        "tempo": setup.tempo,
        "defensiveLine": setup.defensive_line,
        "pressing": setup.pressing,
    }


def tactical_setup_from_dict(d: dict) -> TacticalSetup:
    """Rebuild a tactical setup from :func:`tactical_setup_to_dict` output.

    Parameters
    ----------
    d
        camelCase mapping; every key is required.

    Returns
    -------
    TacticalSetup
        Setup with tokens coerced back into enum members.
    """
    return TacticalSetup(
        formation=d["formation"],
        attacking_mentality=d["attackingMentality"],
        defensive_style=d["defensiveStyle"],
        attacking_style=d["attackingStyle"],
        width=d["width"],
        tempo=d["tempo"],
        defensive_line=d["defensiveLine"],
        pressing=d["pressing"],
    )


def player_role_to_dict(role: PlayerRole) -> Dict[str, Any]:
    """Serialise a player role.

    Parameters
    ----------
    role
        Role to serialise.

    Returns
    -------
    dict
        camelCase mapping; ``playerId`` is present only when the role names one.
    """
    data: Dict[str, Any] = {
        "position": role.position.value,
        "attackingFreedom": role.attacking_freedom,
        "defensiveWork": role.defensive_work,
        "width": role.width,
        "creativeFreedom": role.creative_freedom,
    }
    if role.player_id is not None:
        data["playerId"] = role.player_id
    return data


def player_role_from_dict(d: dict) -> PlayerRole:
    """Rebuild a player role from :func:`player_role_to_dict` output.

    Parameters
    ----------
    d
        camelCase mapping; ``playerId`` is optional.

    Returns
    -------
    PlayerRole
        Reconstructed role.
    """
    return PlayerRole(
        position=d["position"],
        attacking_freedom=d["attackingFreedom"],
        defensive_work=d["defensiveWork"],
        width=d["width"],
        creative_freedom=d["creativeFreedom"],
        player_id=d.get("playerId"),
    )


def match_to_dict(match: Match) -> Dict[str, Any]:
    """Export a match summary for storage or display.

    Parameters
    ----------
    match
        Match to export, completed or not.

    Returns
    -------
    dict
        Identity, score, weather, events, statistics and player ratings.
    """
    stats = match.statistics
    return {
        "id": match.match_id,
        "homeTeam": match.home_team.team_id,
        "awayTeam": match.away_team.team_id,
        "kickoffTime": match.kickoff_time.isoformat(),
        "neutralVenue": match.is_neutral_venue,
        "weather": {
            "condition": match.weather.condition.value,
            "temperature": match.weather.temperature,
            "humidity": match.weather.humidity,
            "windSpeed": match.weather.wind_speed,
        },
        "homeGoals": match.home_goals,
        "awayGoals": match.away_goals,
        "currentMinute": match.current_minute,
        "isCompleted": match.is_completed,
        "result": match.result.value if match.result is not None else None,
        "events": [
            {
                "id": e.event_id,
                "type": e.event_type.value,
                "minute": e.minute,
                "teamId": e.team_id,
                "playerId": e.player_id,
                "playerName": e.player_name,
                "description": e.description,
                "metadata": dict(e.metadata),
            }
            for e in match.events
        ],
        "statistics": asdict(stats) if stats is not None else None,
        "playerRatings": {pid: perf.rating for pid, perf in match.player_performances.items()},
    }
