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
"""Domain models representing football players and their ratings."""
from dataclasses import dataclass
from enum import Enum


class PlayerPosition(str, Enum):
    """Natural line a player is registered in."""

    GOALKEEPER = "goalkeeper"
    DEFENDER = "defender"
    MIDFIELDER = "midfielder"
    FORWARD = "forward"


@dataclass
class Player:
    """Squad member with the three headline ratings used by the simulator.

    Parameters
    ----------
    player_id : str
        Unique identifier for the player.
    name : str
        Human-readable player name.
    age : int
        Player age in years.
    position : PlayerPosition
        Natural line the player is registered in.
    technical : int
        Ball skills, passing and finishing on a 1-100 scale.
    physical : int
        Pace, strength and stamina on a 1-100 scale.
    mental : int
        Positioning, concentration and decisions on a 1-100 scale.
    """

    player_id: str
    name: str
    age: int
    position: PlayerPosition
    technical: int
    physical: int
    mental: int

    def __post_init__(self) -> None:
        """Validate identity, age and that ratings fall within the 1-100 scale."""
        if not self.player_id:
            raise ValueError("player_id must not be empty")
        if not 15 <= self.age <= 50:
            raise ValueError("age must be between 15 and 50")
        self.position = PlayerPosition(self.position)
        for attr in ("technical", "physical", "mental"):
            if not 1 <= getattr(self, attr) <= 100:
                raise ValueError(f"{attr} must be between 1 and 100")

    @property
    def overall_rating(self) -> int:
        """Rounded mean of the technical, physical and mental ratings."""
        return round((self.technical + self.physical + self.mental) / 3)

    @property
    def attacking_rating(self) -> int:
        """Attacking capability derived from technique and physique."""
        return (self.technical + self.physical) // 2

    @property
    def defending_rating(self) -> int:
        """Defensive capability derived from awareness and physique."""
        return (self.mental + self.physical) // 2

    @property
    def is_goalkeeper(self) -> bool:
        """Whether the player is a natural goalkeeper."""
        return self.position is PlayerPosition.GOALKEEPER
