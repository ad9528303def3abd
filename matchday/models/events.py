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
"""Event domain models for the match simulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class MatchEventType(str, Enum):
    """Closed set of events a simulation can emit."""

    GOAL = "goal"
    YELLOW_CARD = "yellowCard"
    RED_CARD = "redCard"
    SUBSTITUTION = "substitution"
    KICKOFF = "kickoff"
    HALF_TIME = "halfTime"
    FULL_TIME = "fullTime"
    PENALTY = "penalty"
    OWN_GOAL = "ownGoal"
    ASSIST = "assist"
    INJURY = "injury"
    SHOT = "shot"
    SHOT_ON_TARGET = "shotOnTarget"
    SHOT_OFF_TARGET = "shotOffTarget"
    TACKLE = "tackle"
    FOUL = "foul"
    CORNER = "corner"
    OFFSIDE = "offside"
    SAVE = "save"
    TACTICAL_CHANGE = "tacticalChange"
    MOMENTUM_SHIFT = "momentumShift"


MAX_EVENT_MINUTE = 120


@dataclass(frozen=True)
class MatchEvent:
    """Immutable record of a noteworthy moment during a simulation.

    Parameters
    ----------
    event_id : str
        Identifier unique within the match.
    event_type : MatchEventType
        Category of event.
    minute : int
        Match minute, 0 to 120.
    team_id : str
        Team associated with the event.
    description : str
        Human-readable summary of what happened.
    player_id : Optional[str]
        Player involved, when any.
    player_name : Optional[str]
        Display name of the player involved.
    metadata : Mapping[str, Any]
        Extra structured details; exposed read-only.
    """

    event_id: str
    event_type: MatchEventType
    minute: int
    team_id: str
    description: str
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate the record and freeze its metadata."""
        if not self.event_id:
            raise ValueError("event_id must not be empty")
        if not self.team_id:
            raise ValueError("team_id must not be empty")
        if not self.description:
            raise ValueError("description must not be empty")
        if not 0 <= self.minute <= MAX_EVENT_MINUTE:
            raise ValueError(f"minute must be between 0 and {MAX_EVENT_MINUTE}")
        object.__setattr__(self, "event_type", MatchEventType(self.event_type))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
