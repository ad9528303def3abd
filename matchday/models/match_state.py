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
"""Managed match state and the checkpoints taken of it."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from matchday.models.match import Match
from matchday.models.tactics import TeamTactics


def _now() -> datetime:
    """Current UTC time.

    Returns
    -------
    datetime
        Timezone-aware timestamp.
    """
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MatchState:
    """Snapshot of a managed match and its playback settings.

    Parameters
    ----------
    state_id : str
        Identifier shared by every revision of one managed match.
    match : Match
        Latest match snapshot.
    is_paused : bool
        Whether playback was paused.
    speed : float
        Playback speed multiplier.
    team_tactics : Mapping[str, TeamTactics]
        Live tactics set through the manager, keyed by team id.
    event_log : Tuple[str, ...]
        Commentary lines of every event seen, prefixed with the minute.
    timestamp : datetime
        When this revision was recorded.
    """

    state_id: str
    match: Match
    is_paused: bool = False
    speed: float = 1.0
    team_tactics: Mapping[str, TeamTactics] = field(default_factory=dict)
    event_log: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        """Freeze the tactics mapping and the log."""
        object.__setattr__(self, "team_tactics", MappingProxyType(dict(self.team_tactics)))
        object.__setattr__(self, "event_log", tuple(self.event_log))

    @classmethod
    def from_match(cls, match: Match) -> MatchState:
        """Start tracking a match.

        Parameters
        ----------
        match : Match
            Match to track.

        Returns
        -------
        MatchState
            Unpaused state at speed 1.0.
        """
        return cls(state_id=f"state-{match.match_id}", match=match)

    @property
    def current_minute(self) -> int:
        """Minute of the latest snapshot."""
        return self.match.current_minute

    @property
    def is_live(self) -> bool:
        """Whether the match is neither finished nor paused."""
        return not self.match.is_completed and not self.is_paused

    def with_match(self, match: Match) -> MatchState:
        """Return a revision holding a newer snapshot.

        Parameters
        ----------
        match : Match
            Newer snapshot.

        Returns
        -------
        MatchState
            Updated copy with a fresh timestamp.
        """
        return replace(self, match=match, timestamp=_now())

    def with_log_entry(self, line: str) -> MatchState:
        """Return a revision with one more log line.

        Parameters
        ----------
        line : str
            Line to append.

        Returns
        -------
        MatchState
            Updated copy.
        """
        return replace(self, event_log=self.event_log + (line,))

    def with_tactics(self, team_id: str, tactics: TeamTactics) -> MatchState:
        """Return a revision recording a side's new tactics.

        Parameters
        ----------
        team_id : str
            Team whose tactics changed.
        tactics : TeamTactics
            New tactics.

        Returns
        -------
        MatchState
            Updated copy.
        """
        updated = dict(self.team_tactics)
        updated[team_id] = tactics
        return replace(self, team_tactics=updated)


@dataclass(frozen=True)
class MatchCheckpoint:
    """Named, immutable record of a match state.

    Parameters
    ----------
    checkpoint_id : str
        Unique identifier.
    name : str
        Display name such as ``"Goal - 23'"``.
    state : MatchState
        State captured by the checkpoint.
    description : str
        Longer explanation.
    metadata : Mapping[str, Any]
        ``{"auto": True, "eventType": ..., "minute": ...}`` for automatic
        checkpoints, empty for manual ones.
    timestamp : datetime
        When the checkpoint was taken.
    """

    checkpoint_id: str
    name: str
    state: MatchState
    description: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        """Freeze the metadata mapping."""
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def match_id(self) -> str:
        """Identifier of the checkpointed match."""
        return self.state.match.match_id

    @property
    def minute(self) -> int:
        """Minute the checkpoint was taken at."""
        return self.state.current_minute

    @property
    def is_automatic(self) -> bool:
        """Whether an event triggered the checkpoint."""
        return bool(self.metadata.get("auto", False))


AUTO_CHECKPOINT_NAMES = {
    "goal": "Goal - {minute}'",
    "ownGoal": "Goal - {minute}'",
    "yellowCard": "Yellow Card - {minute}'",
    "redCard": "Red Card - {minute}'",
    "halfTime": "Half Time",
    "fullTime": "Full Time",
    "tacticalChange": "Tactical Change - {minute}'",
}

AUTO_CHECKPOINT_DESCRIPTIONS = {
    "goal": "Goal scored! {teams} ({score}) at {minute}'",
    "ownGoal": "Goal scored! {teams} ({score}) at {minute}'",
    "yellowCard": "Yellow card shown at {minute}'. {teams} ({score})",
    "redCard": "Red card shown at {minute}'. {teams} ({score})",
    "halfTime": "Half time reached. {teams} ({score})",
    "fullTime": "Match completed. {teams} ({score})",
    "tacticalChange": "Tactical change made at {minute}'. {teams} ({score})",
}


def auto_checkpoint_text(state: MatchState, event_type: str) -> Tuple[str, str]:
    """Name and describe an event-triggered checkpoint.

    Parameters
    ----------
    state : MatchState
        State being checkpointed.
    event_type : str
        Token of the triggering event.

    Returns
    -------
    Tuple[str, str]
        Checkpoint name and description.
    """
    match = state.match
    values = {
        "minute": state.current_minute,
        "teams": f"{match.home_team.name} vs {match.away_team.name}",
        "score": f"{match.home_goals}-{match.away_goals}",
    }
    name = AUTO_CHECKPOINT_NAMES.get(event_type, "Minute {minute}").format(**values)
    description = AUTO_CHECKPOINT_DESCRIPTIONS.get(event_type, "{teams} ({score}) at {minute}'").format(**values)
    return name, description
