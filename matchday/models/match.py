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
"""Match aggregate and the derived state a detailed simulation attaches to it.

:class:`Match` is a frozen value: simulations build new matches with
:func:`dataclasses.replace` instead of mutating one in place. The statistics,
performance and momentum records are mutable working objects owned by a single
simulation run; the run hands out copies whenever it publishes a snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.team import Team
from matchday.models.weather import Weather


class MatchResult(str, Enum):
    """Outcome of a completed match from the home side's perspective."""

    HOME_WIN = "homeWin"
    DRAW = "draw"
    AWAY_WIN = "awayWin"

    @classmethod
    def from_score(cls, home_goals: int, away_goals: int) -> MatchResult:
        """Derive the result from a final score.

        Parameters
        ----------
        home_goals : int
            Goals scored by the home side.
        away_goals : int
            Goals scored by the away side.

        Returns
        -------
        MatchResult
            Home win, draw or away win.
        """
        if home_goals > away_goals:
            return cls.HOME_WIN
        if home_goals < away_goals:
            return cls.AWAY_WIN
        return cls.DRAW


def _side(is_home: bool) -> str:
    """Return the attribute prefix for one side.

    Parameters
    ----------
    is_home : bool
        Whether the home side is meant.

    Returns
    -------
    str
        ``"home"`` or ``"away"``.
    """
    return "home" if is_home else "away"


@dataclass
class MatchStatistics:
    """Team-level statistics accumulated over a detailed simulation.

    Parameters
    ----------
    home_possession : float
        Home share of possession in percent.
    away_possession : float
        Away share of possession in percent; always ``100 - home_possession``.
    home_shots : int
        Home shots.
    away_shots : int
        Away shots.
    home_shots_on_target : int
        Home shots on target.
    away_shots_on_target : int
        Away shots on target.
    home_passes : int
        Home passes attempted.
    away_passes : int
        Away passes attempted.
    home_passes_completed : int
        Home passes completed.
    away_passes_completed : int
        Away passes completed.
    home_tackles : int
        Home tackles won.
    away_tackles : int
        Away tackles won.
    home_fouls : int
        Home fouls committed.
    away_fouls : int
        Away fouls committed.
    home_corners : int
        Home corners won.
    away_corners : int
        Away corners won.
    home_offsides : int
        Home offside calls.
    away_offsides : int
        Away offside calls.
    home_yellow_cards : int
        Home bookings.
    away_yellow_cards : int
        Away bookings.
    home_red_cards : int
        Home dismissals.
    away_red_cards : int
        Away dismissals.
    """

    home_possession: float = 50.0
    away_possession: float = 50.0
    home_shots: int = 0
    away_shots: int = 0
    home_shots_on_target: int = 0
    away_shots_on_target: int = 0
    home_passes: int = 0
    away_passes: int = 0
    home_passes_completed: int = 0
    away_passes_completed: int = 0
    home_tackles: int = 0
    away_tackles: int = 0
    home_fouls: int = 0
    away_fouls: int = 0
    home_corners: int = 0
    away_corners: int = 0
    home_offsides: int = 0
    away_offsides: int = 0
    home_yellow_cards: int = 0
    away_yellow_cards: int = 0
    home_red_cards: int = 0
    away_red_cards: int = 0

    @property
    def home_pass_accuracy(self) -> float:
        """Home pass completion in percent, 0 before any pass."""
        return _percentage(self.home_passes_completed, self.home_passes)

    @property
    def away_pass_accuracy(self) -> float:
        """Away pass completion in percent, 0 before any pass."""
        return _percentage(self.away_passes_completed, self.away_passes)

    def increment(self, stat: str, is_home: bool, amount: int = 1) -> None:
        """Add to a per-side counter.

        Parameters
        ----------
        stat : str
            Counter name without the side prefix, for example ``"shots"``.
        is_home : bool
            Whether the home counter is updated.
        amount : int
            Value to add.
        """
        name = f"{_side(is_home)}_{stat}"
        setattr(self, name, getattr(self, name) + amount)

    def get(self, stat: str, is_home: bool) -> int:
        """Read a per-side counter.

        Parameters
        ----------
        stat : str
            Counter name without the side prefix.
        is_home : bool
            Whether the home counter is read.

        Returns
        -------
        int
            Current counter value.
        """
        return getattr(self, f"{_side(is_home)}_{stat}")

    def set_possession(self, home_share: float) -> None:
        """Store possession so that both sides sum to 100.

        Parameters
        ----------
        home_share : float
            Home possession in percent; clamped to 0-100.
        """
        home = round(max(0.0, min(100.0, home_share)), 1)
        self.home_possession = home
        self.away_possession = round(100.0 - home, 1)

    def copy(self) -> MatchStatistics:
        """Return an independent copy.

        Returns
        -------
        MatchStatistics
            Field-for-field copy.
        """
        return replace(self)


def _percentage(part: int, whole: int) -> float:
    """Return ``part`` as a percentage of ``whole``.

    Parameters
    ----------
    part : int
        Numerator.
    whole : int
        Denominator; zero yields ``0.0``.

    Returns
    -------
    float
        Percentage rounded to one decimal place.
    """
    if whole <= 0:
        return 0.0
    return round(part / whole * 100.0, 1)


@dataclass
class PlayerPerformance:
    """Per-player match record, created at kickoff for every roster player.

    Parameters
    ----------
    player_id : str
        Player the record belongs to.
    player_name : str
        Display name of the player.
    team_id : str
        Team the player plays for.
    rating : float
        Match rating between 1 and 10.
    minutes_played : int
        Minutes spent on the pitch.
    goals : int
        Goals scored.
    assists : int
        Assists provided.
    shots : int
        Shots taken.
    shots_on_target : int
        Shots on target.
    passes : int
        Passes attempted.
    passes_completed : int
        Passes completed.
    tackles : int
        Tackles won.
    fouls : int
        Fouls committed.
    saves : int
        Saves made.
    yellow_cards : int
        Bookings received.
    red_cards : int
        Dismissals received.
    """

    player_id: str
    player_name: str
    team_id: str
    rating: float = 6.0
    minutes_played: int = 0
    goals: int = 0
    assists: int = 0
    shots: int = 0
    shots_on_target: int = 0
    passes: int = 0
    passes_completed: int = 0
    tackles: int = 0
    fouls: int = 0
    saves: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    @property
    def pass_accuracy(self) -> float:
        """Pass completion in percent, 0 before any pass."""
        return _percentage(self.passes_completed, self.passes)

    def adjust_rating(self, delta: float, minimum: float = 1.0, maximum: float = 10.0) -> None:
        """Shift the rating, keeping it within bounds.

        Parameters
        ----------
        delta : float
            Amount to add; negative values lower the rating.
        minimum : float
            Lowest permitted rating.
        maximum : float
            Highest permitted rating.
        """
        self.rating = round(max(minimum, min(maximum, self.rating + delta)), 2)

    def copy(self) -> PlayerPerformance:
        """Return an independent copy.

        Returns
        -------
        PlayerPerformance
            Field-for-field copy.
        """
        return replace(self)


@dataclass
class MomentumTracker:
    """Two-sided momentum gauge whose sides always sum to 100.

    Parameters
    ----------
    home_momentum : float
        Home share of momentum.
    away_momentum : float
        Away share of momentum.
    last_shift : int
        Minute of the most recent shift.
    shift_events : List[str]
        Human-readable log of every shift.
    """

    home_momentum: float = 50.0
    away_momentum: float = 50.0
    last_shift: int = 0
    shift_events: List[str] = field(default_factory=list)

    def shift(self, toward_home: float, minute: int, reason: str) -> None:
        """Move the gauge and log the shift.

        Parameters
        ----------
        toward_home : float
            Points moved to the home side; negative values favour the away side.
        minute : int
            Minute the shift happens in.
        reason : str
            Log entry describing the shift.
        """
        home = round(max(0.0, min(100.0, self.home_momentum + toward_home)), 2)
        self.home_momentum = home
        self.away_momentum = round(100.0 - home, 2)
        self.last_shift = minute
        self.shift_events.append(reason)

    def momentum_for(self, is_home: bool) -> float:
        """Return one side's share.

        Parameters
        ----------
        is_home : bool
            Whether the home share is requested.

        Returns
        -------
        float
            Momentum between 0 and 100.
        """
        return self.home_momentum if is_home else self.away_momentum

    def copy(self) -> MomentumTracker:
        """Return an independent copy.

        Returns
        -------
        MomentumTracker
            Copy with its own shift log.
        """
        return replace(self, shift_events=list(self.shift_events))


@dataclass(frozen=True)
class Match:
    """A fixture and everything a simulation has produced for it.

    Parameters
    ----------
    match_id : str
        Unique identifier.
    home_team : Team
        Home side.
    away_team : Team
        Away side.
    weather : Weather
        Conditions at kickoff.
    kickoff_time : datetime
        Scheduled kickoff.
    is_neutral_venue : bool
        Whether neither side enjoys home advantage.
    home_goals : int
        Goals credited to the home side.
    away_goals : int
        Goals credited to the away side.
    current_minute : int
        Last simulated minute.
    is_completed : bool
        Whether the final whistle has gone.
    result : Optional[MatchResult]
        Outcome; set exactly when ``is_completed`` is true.
    events : Tuple[MatchEvent, ...]
        Chronological, append-only event log.
    statistics : Optional[MatchStatistics]
        Team statistics from the detailed path.
    player_performances : Mapping[str, PlayerPerformance]
        Player id to performance record from the detailed path.
    momentum : Optional[MomentumTracker]
        Momentum gauge from the detailed path.
    """

    match_id: str
    home_team: Team
    away_team: Team
    weather: Weather = field(default_factory=Weather)
    kickoff_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_neutral_venue: bool = False
    home_goals: int = 0
    away_goals: int = 0
    current_minute: int = 0
    is_completed: bool = False
    result: Optional[MatchResult] = None
    events: Tuple[MatchEvent, ...] = ()
    statistics: Optional[MatchStatistics] = None
    player_performances: Mapping[str, PlayerPerformance] = field(default_factory=dict)
    momentum: Optional[MomentumTracker] = None

    def __post_init__(self) -> None:
        """Enforce the identity and completion invariants."""
        if not self.match_id:
            raise ValueError("match_id must not be empty")
        if self.home_team.team_id == self.away_team.team_id:
            raise ValueError("home and away teams must differ")
        if self.is_completed != (self.result is not None):
            raise ValueError("result must be set exactly when the match is completed")
        object.__setattr__(self, "events", tuple(self.events))

    @classmethod
    def create(
        cls,
        match_id: str,
        home_team: Team,
        away_team: Team,
        weather: Optional[Weather] = None,
        kickoff_time: Optional[datetime] = None,
        is_neutral_venue: bool = False,
    ) -> Match:
        """Create an unplayed fixture.

        Parameters
        ----------
        match_id : str
            Unique identifier; must not be empty.
        home_team : Team
            Home side.
        away_team : Team
            Away side; must differ from ``home_team``.
        weather : Optional[Weather]
            Conditions; mild cloudy weather when omitted.
        kickoff_time : Optional[datetime]
            Scheduled kickoff; now (UTC) when omitted.
        is_neutral_venue : bool
            Whether the fixture is played at a neutral ground.

        Returns
        -------
        Match
            Fixture at minute 0 with no events.
        """
        return cls(
            match_id=match_id,
            home_team=home_team,
            away_team=away_team,
            weather=weather or Weather(),
            kickoff_time=kickoff_time or datetime.now(timezone.utc),
            is_neutral_venue=is_neutral_venue,
        )

    def is_home(self, team_id: str) -> bool:
        """Resolve a team id to a side.

        Parameters
        ----------
        team_id : str
            Identifier of one of the two teams.

        Returns
        -------
        bool
            ``True`` for the home team, ``False`` for the away team.

        Raises
        ------
        ValueError
            When ``team_id`` belongs to neither side.
        """
        if team_id == self.home_team.team_id:
            return True
        if team_id == self.away_team.team_id:
            return False
        raise ValueError(f"Team {team_id} is not playing in match {self.match_id}")

    def team(self, team_id: str) -> Team:
        """Return one of the two teams by id.

        Parameters
        ----------
        team_id : str
            Identifier of one of the two teams.

        Returns
        -------
        Team
            The matching team.
        """
        return self.home_team if self.is_home(team_id) else self.away_team

    def events_of_type(self, event_type: MatchEventType) -> List[MatchEvent]:
        """Filter the event log.

        Parameters
        ----------
        event_type : MatchEventType
            Type to keep.

        Returns
        -------
        List[MatchEvent]
            Matching events in chronological order.
        """
        return [e for e in self.events if e.event_type == event_type]

    def goals_from_events(self) -> Tuple[int, int]:
        """Recount the score from the event log.

        Own goals are recorded against the team of the player who scored them
        and count for the opponent.

        Returns
        -------
        Tuple[int, int]
            ``(home_goals, away_goals)`` implied by the events.
        """
        home_id = self.home_team.team_id
        home = away = 0
        for event in self.events:
            if event.event_type is MatchEventType.GOAL:
                if event.team_id == home_id:
                    home += 1
                else:
                    away += 1
            elif event.event_type is MatchEventType.OWN_GOAL:
                if event.team_id == home_id:
                    away += 1
                else:
                    home += 1
        return home, away

    def with_event(self, event: MatchEvent) -> Match:
        """Append an event.

        Parameters
        ----------
        event : MatchEvent
            Event to append; its minute must not precede the last event.

        Returns
        -------
        Match
            Copy of the match with ``event`` appended.

        Raises
        ------
        ValueError
            If ``event`` precedes the last recorded event.
        """
        if self.events and event.minute < self.events[-1].minute:
            raise ValueError("events must be appended in chronological order")
        return replace(self, events=self.events + (event,))

    def score_line(self) -> str:
        """Format the current score.

        Returns
        -------
        str
            ``"Home 1 - 0 Away"`` style summary.
        """
        return f"{self.home_team.name} {self.home_goals} - {self.away_goals} {self.away_team.name}"
