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
"""Utilities that synthesise players and teams for quick simulations."""
import random
from typing import Dict, Optional, Tuple

from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import Formation
from matchday.models.team import Stadium, Team

FIRST_NAMES = ["John", "James", "David", "Michael", "Robert", "Carlos", "Juan", "Luis", "Tomas", "Kenji"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Rodriguez", "Novak", "Sato"]
CLUB_SUFFIXES = ["FC", "United", "City", "Athletic", "Sporting"]
CITIES = ["London", "Madrid", "Paris", "Milan", "Munich", "Porto", "Lyon"]

# (technical, physical, mental) ranges; the boosted rating is the line's specialty.
POSITION_RATING_RANGES: Dict[PlayerPosition, Tuple[Tuple[int, int], Tuple[int, int], Tuple[int, int]]] = {
    PlayerPosition.GOALKEEPER: ((40, 70), (55, 85), (60, 90)),
    PlayerPosition.DEFENDER: ((45, 75), (60, 90), (55, 85)),
    PlayerPosition.MIDFIELDER: ((60, 90), (50, 80), (55, 85)),
    PlayerPosition.FORWARD: ((60, 90), (60, 90), (45, 75)),
}


def generate_random_player(
    player_id: str,
    rng: Optional[random.Random] = None,
    name: Optional[str] = None,
    position: Optional[PlayerPosition] = None,
) -> Player:
    """Generate a player with random ratings.

    Parameters
    ----------
    player_id : str
        Unique identifier assigned to the created player.
    rng : Optional[random.Random]
        Random source; an unseeded generator when omitted.
    name : Optional[str]
        Human-readable name to apply; a pseudo-random name is chosen when omitted.
    position : Optional[PlayerPosition]
        Natural line influencing the rating ranges; random when ``None``.

    Returns
    -------
    Player
        A newly constructed player with stochastic ratings.
    """
    rng = rng or random.Random()
    if name is None:
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
    if position is None:
        position = rng.choice(list(PlayerPosition))

    technical, physical, mental = (rng.randint(low, high) for low, high in POSITION_RATING_RANGES[position])
    return Player(
        player_id=player_id,
        name=name,
        age=rng.randint(18, 35),
        position=position,
        technical=technical,
        physical=physical,
        mental=mental,
    )


def generate_team(
    team_id: str,
    rng: Optional[random.Random] = None,
    name: Optional[str] = None,
    formation: Formation = Formation.F442,
    substitutes: int = 7,
    capacity: Optional[int] = None,
) -> Team:
    """Generate a squad able to field a formation.

    Parameters
    ----------
    team_id : str
        Unique identifier assigned to the team; also prefixes player ids.
    rng : Optional[random.Random]
        Random source; an unseeded generator when omitted.
    name : Optional[str]
        Squad name to apply; synthesised when ``None``.
    formation : Formation
        Formation whose line counts the first eleven players satisfy.
    substitutes : int
        Number of bench players appended after the starting eleven.
    capacity : Optional[int]
        Stadium capacity; random between 15000 and 85000 when omitted.

    Returns
    -------
    Team
        Team with a starting eleven ordered goalkeeper, defenders, midfielders,
        forwards, followed by the bench.
    """
    rng = rng or random.Random()
    formation = Formation(formation)
    if name is None:
        name = f"{rng.choice(CITIES)} {rng.choice(CLUB_SUFFIXES)}"

    players = []
    for position, count in formation.requirements.items():
        for _ in range(count):
            players.append(generate_random_player(f"{team_id}-p{len(players) + 1}", rng, position=position))

    # Bench always carries a goalkeeper, then cycles through the outfield lines.
    bench_lines = [PlayerPosition.GOALKEEPER, PlayerPosition.DEFENDER, PlayerPosition.MIDFIELDER, PlayerPosition.FORWARD]
    for index in range(substitutes):
        position = bench_lines[index] if index < len(bench_lines) else rng.choice(bench_lines[1:])
        players.append(generate_random_player(f"{team_id}-p{len(players) + 1}", rng, position=position))

    city = name.split(" ")[0]
    stadium = Stadium(
        name=f"{city} Park",
        capacity=capacity if capacity is not None else rng.randint(15000, 85000),
        city=city,
    )
    return Team(
        team_id=team_id,
        name=name,
        players=players,
        city=city,
        stadium=stadium,
        formation=formation,
        morale=rng.randint(60, 90),
        manager_rating=rng.randint(40, 80),
    )
