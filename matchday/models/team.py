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
"""Team and stadium domain models."""
from dataclasses import dataclass, field
from typing import List, Optional

from matchday.engine.config import ENGINE_CONFIG, HomeAdvantageConfig
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import Formation

MAX_STARTERS = 11


@dataclass
class Stadium:
    """Home ground of a club.

    Parameters
    ----------
    name : str
        Stadium name.
    capacity : int
        Seated capacity, which drives the home-advantage multiplier.
    city : str
        City the ground is located in.
    """

    name: str = "Community Stadium"
    capacity: int = ENGINE_CONFIG.home_advantage.default_capacity
    city: str = ""

    def __post_init__(self) -> None:
        """Reject negative capacities."""
        if self.capacity < 0:
            raise ValueError("capacity must not be negative")


@dataclass
class Team:
    """Club or squad taking part in a match.

    Parameters
    ----------
    team_id : str
        Unique identifier for the team.
    name : str
        Display name for the squad.
    players : List[Player]
        Complete roster available to the team.
    city : str
        Home city.
    founded_year : int
        Year the club was founded.
    stadium : Stadium
        Home ground.
    formation : Formation
        Preferred formation.
    starting_xi : List[str]
        Player ids of the declared starting eleven; empty means the first eleven
        players of the roster.
    morale : int
        Squad morale on a 0-100 scale.
    manager_rating : int
        Manager ability on a 0-100 scale.
    """

    team_id: str
    name: str
    players: List[Player] = field(default_factory=list)
    city: str = ""
    founded_year: int = 1900
    stadium: Stadium = field(default_factory=Stadium)
    formation: Formation = Formation.F442
    starting_xi: List[str] = field(default_factory=list)
    morale: int = 75
    manager_rating: int = 50

    def __post_init__(self) -> None:
        """Validate identity, morale and the declared starting eleven."""
        if not self.team_id:
            raise ValueError("team_id must not be empty")
        if not 0 <= self.morale <= 100:
            raise ValueError("morale must be between 0 and 100")
        if not 0 <= self.manager_rating <= 100:
            raise ValueError("manager_rating must be between 0 and 100")
        self.formation = Formation(self.formation)
        if len(self.starting_xi) > MAX_STARTERS:
            raise ValueError(f"starting_xi lists {len(self.starting_xi)} players, at most {MAX_STARTERS} allowed")
        if len(set(self.starting_xi)) != len(self.starting_xi):
            raise ValueError("starting_xi lists a player more than once")
        known = {p.player_id for p in self.players}
        unknown = [pid for pid in self.starting_xi if pid not in known]
        if unknown:
            raise ValueError(f"starting_xi references unknown players: {', '.join(unknown)}")

    @property
    def overall_rating(self) -> int:
        """Rounded mean overall rating of the roster, 0 for an empty squad."""
        if not self.players:
            return 0
        return round(sum(p.overall_rating for p in self.players) / len(self.players))

    def home_advantage(self, is_neutral: bool = False, cfg: Optional[HomeAdvantageConfig] = None) -> float:
        """Return the multiplier this team enjoys when playing at home.

        Parameters
        ----------
        is_neutral : bool
            Whether the fixture is played at a neutral venue.
        cfg : Optional[HomeAdvantageConfig]
            Capacity buckets and multipliers; ``ENGINE_CONFIG.home_advantage``
            when omitted.

        Returns
        -------
        float
            Capacity-bucket multiplier, or the neutral multiplier.
        """
        cfg = cfg or ENGINE_CONFIG.home_advantage
        if is_neutral:
            return cfg.neutral_multiplier
        for minimum, multiplier in cfg.capacity_buckets:
            if self.stadium.capacity >= minimum:
                return multiplier
        return cfg.default_multiplier

    def get_player(self, player_id: str) -> Optional[Player]:
        """Look up a roster player by id.

        Parameters
        ----------
        player_id : str
            Identifier to search for.

        Returns
        -------
        Optional[Player]
            The matching player, or ``None`` when absent.
        """
        return next((p for p in self.players if p.player_id == player_id), None)

    def get_players_by_position(self, position: PlayerPosition) -> List[Player]:
        """Get all roster players registered in a natural line.

        Parameters
        ----------
        position : PlayerPosition
            Line to filter by.

        Returns
        -------
        List[Player]
            Players registered in ``position``, in roster order.
        """
        return [p for p in self.players if p.position == position]

    def starting_players(self) -> List[Player]:
        """Return the starting eleven.

        Returns
        -------
        List[Player]
            Declared starters in declaration order, or the first eleven roster
            players when no eleven is declared.
        """
        if self.starting_xi:
            by_id = {p.player_id: p for p in self.players}
            return [by_id[pid] for pid in self.starting_xi]
        return list(self.players[:MAX_STARTERS])

    def bench_players(self) -> List[Player]:
        """Return the players not in the starting eleven.

        Returns
        -------
        List[Player]
            Remaining roster players in roster order.
        """
        starters = {p.player_id for p in self.starting_players()}
        return [p for p in self.players if p.player_id not in starters]
