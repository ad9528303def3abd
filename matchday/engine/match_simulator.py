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
"""Minute-by-minute match simulation.

A :class:`MatchRun` owns the mutable state of one simulated match and advances
it a minute at a time. :class:`MatchSimulator` drives a run to completion for
the synchronous entry points; the streaming driver steps the same run on a
timer. Every random draw goes through the simulator's :class:`random.Random`,
so two simulators built with the same seed produce identical matches.
"""

from __future__ import annotations

import math
import random
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from matchday.engine.config import ENGINE_CONFIG, EngineConfig
from matchday.engine.tactical_system import TacticalSystem
from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.match import (
    Match,
    MatchResult,
    MatchStatistics,
    MomentumTracker,
    PlayerPerformance,
)
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import (
    InstructionRole,
    MatchIntensity,
    PlayerInstructions,
    PlayerMentality,
    TacticalSetup,
    TeamTactics,
)
from matchday.models.team import Team
from matchday.models.weather import Weather
from matchday.utils.debug import MatchDebugger

ATTACKING_ROLES = frozenset(
    {InstructionRole.STRIKER, InstructionRole.POACHER, InstructionRole.TARGET_MAN, InstructionRole.FALSE_NINE}
)

HALF_TIME_MINUTE = 45
REGULATION_MINUTES = 90


class MatchPhase(str, Enum):
    """Lifecycle of a simulated match."""

    NOT_STARTED = "notStarted"
    FIRST_HALF = "firstHalf"
    HALF_TIME = "halfTime"
    SECOND_HALF = "secondHalf"
    STOPPAGE = "stoppage"
    COMPLETED = "completed"


@dataclass
class SideProfile:
    """Pre-computed strength and tactical multipliers for one side.

    Parameters
    ----------
    strength : float
        Team strength from :meth:`MatchSimulator.calculate_team_strength`.
    possession : float
        Possession multiplier from the tactical setup.
    chance_creation : float
        Chance-creation multiplier from the tactical setup.
    setup : Optional[TacticalSetup]
        Setup the multipliers were derived from; ``None`` for an empty squad.
    """

    strength: float
    possession: float = 1.0
    chance_creation: float = 1.0
    setup: Optional[TacticalSetup] = None


class MatchRun:
    """Mutable state of a single simulated match.

    Parameters
    ----------
    match : Match
        Unplayed fixture to simulate.
    rng : random.Random
        Source of every random draw made by the run.
    config : EngineConfig
        Event probabilities, rating deltas and limits.
    home_profile : SideProfile
        Strength and multipliers of the home side.
    away_profile : SideProfile
        Strength and multipliers of the away side.
    home_tactics : Optional[TeamTactics]
        Live tactics the home side starts with; balanced when omitted.
    away_tactics : Optional[TeamTactics]
        Live tactics the away side starts with; balanced when omitted.
    home_changes : Optional[Mapping[int, TeamTactics]]
        Minute to tactics schedule applied to the home side.
    away_changes : Optional[Mapping[int, TeamTactics]]
        Minute to tactics schedule applied to the away side.
    """

    def __init__(
        self,
        match: Match,
        rng: random.Random,
        config: EngineConfig,
        home_profile: SideProfile,
        away_profile: SideProfile,
        home_tactics: Optional[TeamTactics] = None,
        away_tactics: Optional[TeamTactics] = None,
        home_changes: Optional[Mapping[int, TeamTactics]] = None,
        away_changes: Optional[Mapping[int, TeamTactics]] = None,
    ) -> None:
        if match.is_completed:
            raise ValueError(f"Match {match.match_id} is already completed")
        self.match = match
        self.rng = rng
        self.config = config
        self.phase = MatchPhase.NOT_STARTED
        self.stoppage: Optional[int] = None
        self.statistics = MatchStatistics()
        self.momentum = MomentumTracker()
        self.performances: Dict[str, PlayerPerformance] = {}
        self.profiles = {True: home_profile, False: away_profile}
        self.tactics = {
            True: home_tactics or TeamTactics.balanced(),
            False: away_tactics or TeamTactics.balanced(),
        }
        self.intensity = {True: MatchIntensity.MEDIUM, False: MatchIntensity.MEDIUM}
        self.instructions: Dict[str, PlayerInstructions] = {}
        self._scheduled = {True: dict(home_changes or {}), False: dict(away_changes or {})}
        for schedule in self._scheduled.values():
            invalid = sorted(minute for minute, tactics in schedule.items() if not tactics.is_valid)
            if invalid:
                raise ValueError(f"Scheduled tactics out of range at minutes {invalid}")
        self._on_pitch: Dict[bool, List[Player]] = {True: [], False: []}
        self._bench: Dict[bool, List[Player]] = {True: [], False: []}
        self._substitutions = {True: 0, False: 0}
        self._dismissals = {True: 0, False: 0}
        self._booked: set = set()
        self._possession_samples = 0
        self._possession_total = 0.0
        self._event_count = len(match.events)
        self._new_events: List[MatchEvent] = []

    @property
    def is_completed(self) -> bool:
        """Whether the final whistle has gone."""
        return self.phase is MatchPhase.COMPLETED

    @property
    def current_minute(self) -> int:
        """Last simulated minute."""
        return self.match.current_minute

    def team(self, is_home: bool) -> Team:
        """Return one side's team.

        Parameters
        ----------
        is_home : bool
            Whether the home team is requested.

        Returns
        -------
        Team
            Home or away team of the current match.
        """
        return self.match.home_team if is_home else self.match.away_team

    def set_instructions(self, is_home: bool, instructions: PlayerInstructions) -> None:
        """Attach individual instructions to a squad player.

        Attacking roles and mentalities make the player a more likely
        shot-taker; ball winners and aggressive players make more tackles.

        Parameters
        ----------
        is_home : bool
            Whether the player belongs to the home side.
        instructions : PlayerInstructions
            Instructions naming the player.

        Raises
        ------
        ValueError
            When the player is not in that side's squad.
        """
        if self.team(is_home).get_player(instructions.player_id) is None:
            raise ValueError(f"Player {instructions.player_id} is not in team {self.team(is_home).team_id}")
        self.instructions[instructions.player_id] = instructions

    def on_pitch(self, is_home: bool) -> List[Player]:
        """Players currently on the pitch for one side.

        Parameters
        ----------
        is_home : bool
            Whether the home side is requested.

        Returns
        -------
        List[Player]
            Copy of the on-pitch list.
        """
        return list(self._on_pitch[is_home])

    def kickoff(self) -> List[MatchEvent]:
        """Start the match at minute 0.

        Returns
        -------
        List[MatchEvent]
            The kickoff event, followed by any tactical changes scheduled
            for minute 0.

        Raises
        ------
        RuntimeError
            When the match has already kicked off.
        ValueError
            When a player id appears in both squads.
        """
        if self.phase is not MatchPhase.NOT_STARTED:
            raise RuntimeError("Match has already kicked off")

        initial = self.config.ratings.initial
        for is_home in (True, False):
            team = self.team(is_home)
            self._on_pitch[is_home] = team.starting_players()
            self._bench[is_home] = team.bench_players()
            for player in team.players:
                if player.player_id in self.performances:
                    raise ValueError(f"Player id {player.player_id} appears in both squads")
                self.performances[player.player_id] = PlayerPerformance(
                    player_id=player.player_id,
                    player_name=player.name,
                    team_id=team.team_id,
                    rating=initial,
                )

        self.match = replace(self.match, current_minute=0)
        self._emit(
            MatchEventType.KICKOFF,
            True,
            f"Kickoff: {self.match.home_team.name} vs {self.match.away_team.name}",
        )
        for is_home in (True, False):
            scheduled = self._scheduled[is_home].pop(0, None)
            if scheduled is not None:
                self._set_tactics(is_home, scheduled)
        self.phase = MatchPhase.FIRST_HALF
        return self._drain()

    def step(self) -> List[MatchEvent]:
        """Advance the match by one minute, or blow for full time when due.

        Returns
        -------
        List[MatchEvent]
            Events generated during the minute, in generation order.

        Raises
        ------
        RuntimeError
            If the match has not kicked off.
        """
        if self.phase is MatchPhase.COMPLETED:
            return []
        if self.phase is MatchPhase.NOT_STARTED:
            raise RuntimeError("Call kickoff() before stepping the match")

        if self.stoppage is not None and self.current_minute >= REGULATION_MINUTES + self.stoppage:
            return self.finish()

        minute = self.current_minute + 1
        self.match = replace(self.match, current_minute=minute)
        if minute <= HALF_TIME_MINUTE:
            self.phase = MatchPhase.FIRST_HALF
        elif minute <= REGULATION_MINUTES:
            self.phase = MatchPhase.SECOND_HALF
        else:
            self.phase = MatchPhase.STOPPAGE

        for is_home in (True, False):
            scheduled = self._scheduled[is_home].pop(minute, None)
            if scheduled is not None:
                self._set_tactics(is_home, scheduled)

        for is_home in (True, False):
            for player in self._on_pitch[is_home]:
                self.performances[player.player_id].minutes_played += 1

        self._simulate_minute(minute)

        if minute == HALF_TIME_MINUTE:
            self._emit(MatchEventType.HALF_TIME, True, "Half time")
            self.phase = MatchPhase.HALF_TIME
        if minute == REGULATION_MINUTES:
            self.stoppage = self.rng.randint(0, self.config.events.max_stoppage)
        return self._drain()

    def finish(self) -> List[MatchEvent]:
        """Blow the final whistle and fix the result.

        Returns
        -------
        List[MatchEvent]
            The full-time event, or nothing when already completed.
        """
        if self.phase is MatchPhase.COMPLETED:
            return []
        home, away = self.match.home_goals, self.match.away_goals
        self._emit(
            MatchEventType.FULL_TIME,
            True,
            f"Full time: {self.match.score_line()}",
            metadata={"homeScore": home, "awayScore": away, "stoppage": self.stoppage or 0},
        )
        self.match = replace(self.match, is_completed=True, result=MatchResult.from_score(home, away))
        self.phase = MatchPhase.COMPLETED
        return self._drain()

    def run_to_completion(self) -> Match:
        """Kick off when needed and step until full time.

        Returns
        -------
        Match
            Snapshot of the completed match.
        """
        if self.phase is MatchPhase.NOT_STARTED:
            self.kickoff()
        while not self.is_completed:
            self.step()
        return self.snapshot()

    def snapshot(self) -> Match:
        """Detach the current state from the run.

        Returns
        -------
        Match
            Match carrying copies of the statistics, performances and momentum.
        """
        return replace(
            self.match,
            statistics=self.statistics.copy(),
            player_performances={pid: perf.copy() for pid, perf in self.performances.items()},
            momentum=self.momentum.copy(),
        )

    def apply_tactics(self, is_home: bool, tactics: TeamTactics) -> List[MatchEvent]:
        """Switch one side's live tactics.

        Parameters
        ----------
        is_home : bool
            Whether the home side changes tactics.
        tactics : TeamTactics
            New tactics.

        Returns
        -------
        List[MatchEvent]
            The tactical-change event.

        Raises
        ------
        ValueError
            When a slider lies outside 0-100.
        """
        if not tactics.is_valid:
            raise ValueError(f"Tactics out of range: {tactics}")
        self._set_tactics(is_home, tactics)
        return self._drain()

    def _set_tactics(self, is_home: bool, tactics: TeamTactics) -> None:
        """Store new live tactics and record the change.

        Parameters
        ----------
        is_home : bool
            Whether the home side changes tactics.
        tactics : TeamTactics
            New tactics.
        """
        self.tactics[is_home] = tactics
        self._emit(
            MatchEventType.TACTICAL_CHANGE,
            is_home,
            f"Tactical change: {tactics.mentality.value}",
            metadata={
                "changeType": "tactics",
                "mentality": tactics.mentality.value,
                "pressing": tactics.pressing,
                "tempo": tactics.tempo,
                "width": tactics.width,
                "directness": tactics.directness,
            },
        )

    def record_event(
        self,
        event_type: MatchEventType,
        is_home: bool,
        description: str,
        player: Optional[Player] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[MatchEvent]:
        """Append an externally triggered event at the current minute.

        Parameters
        ----------
        event_type : MatchEventType
            Type of event.
        is_home : bool
            Whether the event belongs to the home side.
        description : str
            Human-readable summary.
        player : Optional[Player]
            Player involved, when any.
        metadata : Optional[Dict[str, Any]]
            Structured details.

        Returns
        -------
        List[MatchEvent]
            The recorded event.
        """
        self._emit(event_type, is_home, description, player=player, metadata=metadata)
        return self._drain()

    def update_team(self, is_home: bool, team: Team, profile: SideProfile) -> None:
        """Replace one side's team definition mid-match.

        Parameters
        ----------
        is_home : bool
            Whether the home team is replaced.
        team : Team
            New team definition; must keep the same identifier.
        profile : SideProfile
            Strength and multipliers recomputed for ``team``.

        Raises
        ------
        ValueError
            If ``team`` has a different identifier.
        """
        if team.team_id != self.team(is_home).team_id:
            raise ValueError("update_team cannot swap in a different team")
        field_name = "home_team" if is_home else "away_team"
        self.match = replace(self.match, **{field_name: team})
        self.profiles[is_home] = profile

    def minute_intensity(self, minute: int) -> float:
        """Event-rate multiplier for a minute of the match.

        Parameters
        ----------
        minute : int
            Match minute.

        Returns
        -------
        float
            Higher near kickoff and full time, lower mid-match.
        """
        cfg = self.config.events
        if minute <= cfg.early_minutes or minute >= cfg.late_minutes:
            return cfg.intense_multiplier
        low, high = cfg.calm_window
        if low <= minute <= high:
            return cfg.calm_multiplier
        return 1.0

    def effective_strength(self, is_home: bool) -> float:
        """Strength after dismissals.

        Parameters
        ----------
        is_home : bool
            Whether the home side is requested.

        Returns
        -------
        float
            Profile strength (at least 1) reduced for every player sent off.
        """
        penalty = self.config.events.dismissal_strength_penalty ** self._dismissals[is_home]
        return max(1.0, self.profiles[is_home].strength) * penalty

    def _simulate_minute(self, minute: int) -> None:
        """Roll every event type for one minute.

        Parameters
        ----------
        minute : int
            Minute being simulated.
        """
        cfg = self.config.events
        rng = self.rng
        intensity = self.minute_intensity(minute)
        event_rate = intensity * (self._event_multiplier(True) + self._event_multiplier(False)) / 2
        attacking = (self.tactics[True].attacking_modifier + self.tactics[False].attacking_modifier) / 2

        self._update_possession_and_passes()

        if rng.random() < cfg.shot * event_rate * attacking:
            self._shot(minute, self._pick_attacking_side())
        if rng.random() < cfg.penalty * intensity:
            self._penalty(minute, self._pick_attacking_side())
        if rng.random() < cfg.tackle * event_rate:
            self._tackle(self._pick_defending_side())
        if rng.random() < cfg.foul * event_rate:
            self._foul(self._pick_card_side())
        card_rate = intensity * (self._card_multiplier(True) + self._card_multiplier(False)) / 2
        if rng.random() < cfg.card * card_rate:
            self._card(self._pick_card_side())
        if rng.random() < cfg.corner * intensity:
            self._corner(self._pick_attacking_side())
        if rng.random() < cfg.offside * intensity:
            self._offside(self._pick_attacking_side())
        if rng.random() < cfg.injury * intensity:
            self._injury(rng.random() < 0.5)
        if rng.random() < cfg.momentum_shift:
            self._spontaneous_momentum_shift(minute)

    def _update_possession_and_passes(self) -> None:
        """Sample this minute's possession and play the minute's passes."""
        cfg = self.config.events
        home_control = self.effective_strength(True) * self.profiles[True].possession
        away_control = self.effective_strength(False) * self.profiles[False].possession
        home_control *= 0.5 + self.momentum.home_momentum / 100.0
        away_control *= 0.5 + self.momentum.away_momentum / 100.0
        sample = 100.0 * home_control / (home_control + away_control)
        sample += self.rng.uniform(-cfg.possession_noise, cfg.possession_noise)
        sample = max(0.0, min(100.0, sample))

        self._possession_samples += 1
        self._possession_total += sample
        self.statistics.set_possession(self._possession_total / self._possession_samples)

        home_passes = round(cfg.passes_per_minute * sample / 100.0)
        impact = self.match.weather.performance_impact_for(self.config.weather)
        accuracy = min(cfg.max_pass_accuracy, cfg.base_pass_accuracy * impact)
        for is_home, attempts in ((True, home_passes), (False, cfg.passes_per_minute - home_passes)):
            if attempts <= 0:
                continue
            completed = sum(1 for _ in range(attempts) if self.rng.random() < accuracy)
            self.statistics.increment("passes", is_home, attempts)
            self.statistics.increment("passes_completed", is_home, completed)
            passer = self._choose(self._outfield(is_home))
            if passer is not None:
                performance = self.performances[passer.player_id]
                performance.passes += attempts
                performance.passes_completed += completed

    def _shot(self, minute: int, is_home: bool) -> None:
        """Resolve a shot by one side.

        Parameters
        ----------
        minute : int
            Current minute.
        is_home : bool
            Whether the home side shoots.
        """
        cfg = self.config.events
        ratings = self.config.ratings
        shooter = self._pick_scorer(is_home)
        self.statistics.increment("shots", is_home)
        self._credit(shooter, "shots")
        name = shooter.name if shooter else "Unknown"

        if self.rng.random() >= cfg.on_target:
            self._emit(MatchEventType.SHOT_OFF_TARGET, is_home, f"Shot off target by {name}", player=shooter)
            return

        self.statistics.increment("shots_on_target", is_home)
        self._credit(shooter, "shots_on_target")
        self._rate(shooter, ratings.shot_on_target)
        self._emit(MatchEventType.SHOT_ON_TARGET, is_home, f"Shot on target by {name}", player=shooter)

        ratio = self.effective_strength(is_home) / self.effective_strength(not is_home)
        low, high = cfg.conversion_bounds
        conversion = max(low, min(high, cfg.conversion * ratio))
        if self._goals(is_home) < cfg.max_goals_per_side and self.rng.random() < conversion:
            if self.rng.random() < cfg.own_goal_share:
                self._own_goal(minute, is_home)
            else:
                self._goal(minute, is_home, shooter, assisted=True)
        else:
            self._save(is_home)

    def _penalty(self, minute: int, is_home: bool) -> None:
        """Resolve a penalty awarded to one side.

        Parameters
        ----------
        minute : int
            Current minute.
        is_home : bool
            Whether the home side takes the penalty.
        """
        cfg = self.config.events
        outfield = self._outfield(is_home)
        taker = max(outfield, key=lambda p: p.attacking_rating) if outfield else None
        name = taker.name if taker else "Unknown"
        self._emit(MatchEventType.PENALTY, is_home, f"Penalty awarded, {name} to take", player=taker)
        self.statistics.increment("shots", is_home)
        self.statistics.increment("shots_on_target", is_home)
        self._credit(taker, "shots")
        self._credit(taker, "shots_on_target")
        if self._goals(is_home) < cfg.max_goals_per_side and self.rng.random() < cfg.penalty_conversion:
            self._goal(minute, is_home, taker, assisted=False, penalty=True)
        else:
            self._save(is_home)

    def _goal(
        self,
        minute: int,
        is_home: bool,
        scorer: Optional[Player],
        assisted: bool,
        penalty: bool = False,
    ) -> None:
        """Credit a goal to one side.

        Parameters
        ----------
        minute : int
            Current minute.
        is_home : bool
            Whether the home side scored.
        scorer : Optional[Player]
            Goalscorer, when known.
        assisted : bool
            Whether an assist may be recorded.
        penalty : bool
            Whether the goal came from the spot.
        """
        cfg = self.config.events
        ratings = self.config.ratings
        self._award_goal(is_home)
        self._credit(scorer, "goals")
        self._rate(scorer, ratings.goal)
        name = scorer.name if scorer else "Unknown"
        self._emit(
            MatchEventType.GOAL,
            is_home,
            f"Goal scored by {name}",
            player=scorer,
            metadata={
                "scoringTeam": "home" if is_home else "away",
                "homeScore": self.match.home_goals,
                "awayScore": self.match.away_goals,
                "penalty": penalty,
            },
        )
        if assisted and self.rng.random() < cfg.assist_chance:
            teammates = [p for p in self._outfield(is_home) if scorer is None or p.player_id != scorer.player_id]
            provider = self._choose(teammates)
            if provider is not None:
                self._credit(provider, "assists")
                self._rate(provider, ratings.assist)
                self._emit(MatchEventType.ASSIST, is_home, f"Assist by {provider.name}", player=provider)
        swing = cfg.goal_momentum_swing if is_home else -cfg.goal_momentum_swing
        self.momentum.shift(swing, minute, f"Goal by {name} at minute {minute}")

    def _own_goal(self, minute: int, attacking_home: bool) -> None:
        """Credit an own goal by the defending side to the attacking side.

        Parameters
        ----------
        minute : int
            Current minute.
        attacking_home : bool
            Whether the home side benefits from the own goal.
        """
        cfg = self.config.events
        defending = not attacking_home
        culprit = self._choose(self._outfield(defending))
        self._award_goal(attacking_home)
        self._rate(culprit, self.config.ratings.own_goal)
        name = culprit.name if culprit else "Unknown"
        self._emit(
            MatchEventType.OWN_GOAL,
            defending,
            f"Own goal by {name}",
            player=culprit,
            metadata={
                "scoringTeam": "home" if attacking_home else "away",
                "homeScore": self.match.home_goals,
                "awayScore": self.match.away_goals,
            },
        )
        swing = cfg.goal_momentum_swing if attacking_home else -cfg.goal_momentum_swing
        self.momentum.shift(swing, minute, f"Own goal by {name} at minute {minute}")

    def _save(self, shooting_home: bool) -> None:
        """Record a goalkeeper save against a shot.

        Parameters
        ----------
        shooting_home : bool
            Whether the home side took the shot.
        """
        defending = not shooting_home
        keeper = self._goalkeeper(defending) or self._choose(self._on_pitch[defending])
        self._credit(keeper, "saves")
        self._rate(keeper, self.config.ratings.save)
        name = keeper.name if keeper else "the goalkeeper"
        self._emit(MatchEventType.SAVE, defending, f"Save by {name}", player=keeper)

    def _tackle(self, is_home: bool) -> None:
        """Record a tackle won by one side.

        Parameters
        ----------
        is_home : bool
            Whether the home side won the tackle.
        """
        winners = self._instructed(
            is_home,
            lambda i: i.role is InstructionRole.BALL_WINNER or i.mentality is PlayerMentality.AGGRESSIVE,
        )
        if winners and self.rng.random() < self.config.events.instructed_tackler_share:
            tackler = self._choose(winners)
        else:
            tackler = self._choose(
                self._by_line(is_home, (PlayerPosition.DEFENDER, PlayerPosition.MIDFIELDER)) or self._outfield(is_home)
            )
        self.statistics.increment("tackles", is_home)
        self._credit(tackler, "tackles")
        self._rate(tackler, self.config.ratings.tackle)
        name = tackler.name if tackler else "Unknown"
        self._emit(MatchEventType.TACKLE, is_home, f"Tackle by {name}", player=tackler)

    def _foul(self, is_home: bool) -> None:
        """Record a foul committed by one side.

        Parameters
        ----------
        is_home : bool
            Whether the home side committed the foul.
        """
        fouler = self._choose(self._outfield(is_home))
        self.statistics.increment("fouls", is_home)
        self._credit(fouler, "fouls")
        self._rate(fouler, self.config.ratings.foul)
        name = fouler.name if fouler else "Unknown"
        self._emit(MatchEventType.FOUL, is_home, f"Foul by {name}", player=fouler)

    def _card(self, is_home: bool) -> None:
        """Show a card to a player of one side.

        A second booking becomes a red card, and a dismissed player leaves the
        pitch for good.

        Parameters
        ----------
        is_home : bool
            Whether a home player is carded.
        """
        cfg = self.config.events
        ratings = self.config.ratings
        player = self._choose(self._outfield(is_home))
        if player is None:
            return

        second_yellow = player.player_id in self._booked
        straight_red = not second_yellow and self.rng.random() < cfg.red_card_share
        performance = self.performances[player.player_id]

        if second_yellow or straight_red:
            if second_yellow:
                performance.yellow_cards += 1
                self.statistics.increment("yellow_cards", is_home)
            performance.red_cards += 1
            self.statistics.increment("red_cards", is_home)
            self._rate(player, ratings.red_card)
            self._on_pitch[is_home] = [p for p in self._on_pitch[is_home] if p.player_id != player.player_id]
            self._dismissals[is_home] += 1
            reason = "second yellow" if second_yellow else "straight red"
            self._emit(
                MatchEventType.RED_CARD,
                is_home,
                f"Red card for {player.name} ({reason})",
                player=player,
                metadata={"cardType": "red", "secondYellow": second_yellow},
            )
            return

        self._booked.add(player.player_id)
        performance.yellow_cards += 1
        self.statistics.increment("yellow_cards", is_home)
        self._rate(player, ratings.yellow_card)
        self._emit(
            MatchEventType.YELLOW_CARD,
            is_home,
            f"Yellow card for {player.name}",
            player=player,
            metadata={"cardType": "yellow"},
        )

    def _corner(self, is_home: bool) -> None:
        """Award a corner to one side.

        Parameters
        ----------
        is_home : bool
            Whether the home side wins the corner.
        """
        self.statistics.increment("corners", is_home)
        self._emit(MatchEventType.CORNER, is_home, f"Corner kick for {self.team(is_home).name}")

    def _offside(self, is_home: bool) -> None:
        """Flag a player of one side offside.

        Parameters
        ----------
        is_home : bool
            Whether a home player is caught offside.
        """
        player = self._choose(self._by_line(is_home, (PlayerPosition.FORWARD,)) or self._outfield(is_home))
        self.statistics.increment("offsides", is_home)
        self._rate(player, self.config.ratings.offside)
        name = player.name if player else "Unknown"
        self._emit(MatchEventType.OFFSIDE, is_home, f"Offside against {name}", player=player)

    def _injury(self, is_home: bool) -> None:
        """Injure a player and replace him from the bench when allowed.

        Parameters
        ----------
        is_home : bool
            Whether a home player is injured.
        """
        injured = self._choose(self._on_pitch[is_home])
        if injured is None:
            return
        self._rate(injured, self.config.ratings.injury)
        self._emit(MatchEventType.INJURY, is_home, f"Injury to {injured.name}", player=injured)

        bench = self._bench[is_home]
        if not bench or self._substitutions[is_home] >= self.config.events.max_substitutions:
            return
        replacement = next((p for p in bench if p.position == injured.position), bench[0])
        bench.remove(replacement)
        self._on_pitch[is_home] = [
            replacement if p.player_id == injured.player_id else p for p in self._on_pitch[is_home]
        ]
        self._substitutions[is_home] += 1
        self._emit(
            MatchEventType.SUBSTITUTION,
            is_home,
            f"Substitution: {replacement.name} replaces {injured.name}",
            player=replacement,
            metadata={"playerOut": injured.player_id, "playerIn": replacement.player_id, "reason": "injury"},
        )

    def _spontaneous_momentum_shift(self, minute: int) -> None:
        """Swing momentum by a random amount.

        Parameters
        ----------
        minute : int
            Current minute.
        """
        spread = self.config.events.momentum_shift_range
        delta = self.rng.uniform(-spread, spread)
        self.momentum.shift(delta, minute, f"Momentum shift at minute {minute}")
        toward_home = self.momentum.home_momentum >= self.momentum.away_momentum
        self._emit(
            MatchEventType.MOMENTUM_SHIFT,
            toward_home,
            f"Momentum shift towards {self.team(toward_home).name}",
            metadata={
                "homeMomentum": self.momentum.home_momentum,
                "awayMomentum": self.momentum.away_momentum,
            },
        )

    def _attack_weight(self, is_home: bool) -> float:
        """Relative likelihood that a side creates the next chance.

        Parameters
        ----------
        is_home : bool
            Whether the home side is weighed.

        Returns
        -------
        float
            Positive weight from strength, tactics and momentum.
        """
        cfg = self.config.events
        weight = self.effective_strength(is_home) * self.profiles[is_home].chance_creation
        weight *= self.tactics[is_home].attacking_modifier / self.tactics[not is_home].defensive_modifier
        momentum = self.momentum.momentum_for(is_home)
        return weight * (1.0 + cfg.momentum_weight * (momentum - 50.0) / 50.0)

    def _pick_attacking_side(self) -> bool:
        """Choose the side creating a chance.

        Returns
        -------
        bool
            ``True`` for the home side.
        """
        home, away = self._attack_weight(True), self._attack_weight(False)
        return self.rng.random() < home / (home + away)

    def _pick_defending_side(self) -> bool:
        """Choose the side winning a defensive duel.

        Returns
        -------
        bool
            ``True`` for the home side.
        """
        home = self.effective_strength(True) * self.tactics[True].defensive_modifier
        away = self.effective_strength(False) * self.tactics[False].defensive_modifier
        return self.rng.random() < home / (home + away)

    def _pick_card_side(self) -> bool:
        """Choose the side committing an offence.

        Returns
        -------
        bool
            ``True`` for the home side.
        """
        share = self.config.events.home_card_share
        home = share * self._card_multiplier(True)
        away = (1.0 - share) * self._card_multiplier(False)
        return self.rng.random() < home / (home + away)

    def _event_multiplier(self, is_home: bool) -> float:
        """Event-rate multiplier from a side's match intensity.

        Parameters
        ----------
        is_home : bool
            Whether the home side is requested.

        Returns
        -------
        float
            Configured multiplier for the side's intensity.
        """
        return self.config.events.intensity_event_multipliers[self.intensity[is_home].value]

    def _card_multiplier(self, is_home: bool) -> float:
        """Card-rate multiplier from a side's match intensity.

        Parameters
        ----------
        is_home : bool
            Whether the home side is requested.

        Returns
        -------
        float
            Configured multiplier for the side's intensity.
        """
        return self.config.events.intensity_card_multipliers[self.intensity[is_home].value]

    def _pick_scorer(self, is_home: bool) -> Optional[Player]:
        """Choose a shot-taker, favouring forwards then midfielders.

        Parameters
        ----------
        is_home : bool
            Whether the home side is shooting.

        Returns
        -------
        Optional[Player]
            Chosen player, or ``None`` when nobody is on the pitch.
        """
        attackers = self._instructed(
            is_home,
            lambda i: i.role in ATTACKING_ROLES or i.mentality is PlayerMentality.ATTACKING,
        )
        if attackers and self.rng.random() < self.config.events.instructed_scorer_share:
            return self._choose(attackers)
        forward_share, midfield_share = self.config.events.scorer_weights
        roll = self.rng.random()
        if roll < forward_share:
            line = PlayerPosition.FORWARD
        elif roll < forward_share + midfield_share:
            line = PlayerPosition.MIDFIELDER
        else:
            line = PlayerPosition.DEFENDER
        return self._choose(self._by_line(is_home, (line,)) or self._outfield(is_home))

    def _instructed(self, is_home: bool, wanted: Callable[[PlayerInstructions], bool]) -> List[Player]:
        """On-pitch players whose instructions match a predicate.

        Parameters
        ----------
        is_home : bool
            Whether the home side is searched.
        wanted : Callable[[PlayerInstructions], bool]
            Test applied to each player's instructions.

        Returns
        -------
        List[Player]
            Instructed players in on-pitch order; empty when nobody qualifies.
        """
        if not self.instructions:
            return []
        return [
            p
            for p in self._on_pitch[is_home]
            if p.player_id in self.instructions and wanted(self.instructions[p.player_id])
        ]

    def _by_line(self, is_home: bool, lines: Sequence[PlayerPosition]) -> List[Player]:
        """On-pitch players registered in the given lines.

        Parameters
        ----------
        is_home : bool
            Whether the home side is searched.
        lines : Sequence[PlayerPosition]
            Lines to keep.

        Returns
        -------
        List[Player]
            Matching players in on-pitch order.
        """
        return [p for p in self._on_pitch[is_home] if p.position in lines]

    def _outfield(self, is_home: bool) -> List[Player]:
        """On-pitch outfield players, or everyone when only keepers remain.

        Parameters
        ----------
        is_home : bool
            Whether the home side is searched.

        Returns
        -------
        List[Player]
            Candidate players.
        """
        outfield = [p for p in self._on_pitch[is_home] if not p.is_goalkeeper]
        return outfield or list(self._on_pitch[is_home])

    def _goalkeeper(self, is_home: bool) -> Optional[Player]:
        """First goalkeeper on the pitch.

        Parameters
        ----------
        is_home : bool
            Whether the home side is searched.

        Returns
        -------
        Optional[Player]
            The goalkeeper, or ``None``.
        """
        return next((p for p in self._on_pitch[is_home] if p.is_goalkeeper), None)

    def _choose(self, players: Sequence[Player]) -> Optional[Player]:
        """Pick a player uniformly.

        Parameters
        ----------
        players : Sequence[Player]
            Candidates.

        Returns
        -------
        Optional[Player]
            Chosen player, or ``None`` for an empty list.
        """
        if not players:
            return None
        return players[self.rng.randrange(len(players))]

    def _credit(self, player: Optional[Player], stat: str) -> None:
        """Increment a counter on a player's performance.

        Parameters
        ----------
        player : Optional[Player]
            Player to credit; ignored when ``None``.
        stat : str
            Performance attribute to increment.
        """
        if player is None:
            return
        performance = self.performances[player.player_id]
        setattr(performance, stat, getattr(performance, stat) + 1)

    def _rate(self, player: Optional[Player], delta: float) -> None:
        """Adjust a player's match rating within the configured bounds.

        Parameters
        ----------
        player : Optional[Player]
            Player to rate; ignored when ``None``.
        delta : float
            Rating change.
        """
        if player is None:
            return
        ratings = self.config.ratings
        self.performances[player.player_id].adjust_rating(delta, ratings.minimum, ratings.maximum)

    def _goals(self, is_home: bool) -> int:
        """Goals scored so far by one side.

        Parameters
        ----------
        is_home : bool
            Whether the home side is requested.

        Returns
        -------
        int
            Current goal count.
        """
        return self.match.home_goals if is_home else self.match.away_goals

    def _award_goal(self, is_home: bool) -> None:
        """Add a goal to one side's score.

        Parameters
        ----------
        is_home : bool
            Whether the home side scores.
        """
        if is_home:
            self.match = replace(self.match, home_goals=self.match.home_goals + 1)
        else:
            self.match = replace(self.match, away_goals=self.match.away_goals + 1)

    def _emit(
        self,
        event_type: MatchEventType,
        is_home: bool,
        description: str,
        player: Optional[Player] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an event at the current minute.

        Parameters
        ----------
        event_type : MatchEventType
            Type of event.
        is_home : bool
            Whether the event belongs to the home side.
        description : str
            Human-readable summary.
        player : Optional[Player]
            Player involved, when any.
        metadata : Optional[Dict[str, Any]]
            Structured details.
        """
        self._event_count += 1
        event = MatchEvent(
            event_id=f"evt-{self.match.match_id}-{self._event_count}",
            event_type=event_type,
            minute=self.match.current_minute,
            team_id=self.team(is_home).team_id,
            description=description,
            player_id=player.player_id if player else None,
            player_name=player.name if player else None,
            metadata=metadata or {},
        )
        self.match = self.match.with_event(event)
        self._new_events.append(event)

    def _drain(self) -> List[MatchEvent]:
        """Hand over the events generated since the last call.

        Returns
        -------
        List[MatchEvent]
            Events in generation order.
        """
        events, self._new_events = self._new_events, []
        return events


class MatchSimulator:
    """Synchronous match simulation entry points.

    Parameters
    ----------
    seed : Optional[int]
        Seed for the simulator's random generator; identical seeds and inputs
        produce identical matches. Each simulation draws from its own generator
        seeded from this one, so calls from several threads never share one.
    config : Optional[EngineConfig]
        Tuning overrides; defaults to ``ENGINE_CONFIG``.
    tactical_system : Optional[TacticalSystem]
        Tactical derivation layer; a default instance when omitted.
    debugger : Optional[MatchDebugger]
        Receives every event of completed detailed simulations.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[EngineConfig] = None,
        tactical_system: Optional[TacticalSystem] = None,
        debugger: Optional[MatchDebugger] = None,
    ) -> None:
        self.config = config or ENGINE_CONFIG
        self.rng = random.Random(seed)
        self._rng_lock = threading.Lock()
        self.tactical_system = tactical_system or TacticalSystem(self.config)
        self.debugger = debugger

    def calculate_team_strength(
        self,
        team: Team,
        is_home: bool,
        weather: Weather,
        is_neutral: bool = False,
        setup: Optional[TacticalSetup] = None,
    ) -> float:
        """Combine rating, venue, weather, tactics and morale into one number.

        Parameters
        ----------
        team : Team
            Team to rate.
        is_home : bool
            Whether the team plays at home.
        weather : Weather
            Match-day conditions.
        is_neutral : bool
            Whether the venue is neutral.
        setup : Optional[TacticalSetup]
            Setup to evaluate; derived from the squad when omitted.

        Returns
        -------
        float
            Team strength; 0 for a team without players.
        """
        if not team.players:
            return 0.0
        home_multiplier = team.home_advantage(is_neutral, self.config.home_advantage) if is_home else 1.0
        effectiveness = self._tactical_effectiveness(team, setup or self.tactical_system.create_default_setup(team))
        morale_multiplier = 0.95 + team.morale / 100.0 * 0.1
        weather_impact = weather.performance_impact_for(self.config.weather)
        return team.overall_rating * home_multiplier * weather_impact * effectiveness * morale_multiplier

    def side_profile(self, match: Match, is_home: bool, setup: Optional[TacticalSetup] = None) -> SideProfile:
        """Compute strength and tactical multipliers for one side.

        Parameters
        ----------
        match : Match
            Fixture providing the teams, weather and venue.
        is_home : bool
            Whether the home side is profiled.
        setup : Optional[TacticalSetup]
            Setup to evaluate; derived from the squad when omitted.

        Returns
        -------
        SideProfile
            Strength and multipliers; neutral multipliers for an empty squad.
        """
        team = match.home_team if is_home else match.away_team
        strength = self.calculate_team_strength(team, is_home, match.weather, match.is_neutral_venue, setup)
        if not team.players:
            return SideProfile(strength=strength)

        setup = setup or self.tactical_system.create_default_setup(team)
        chemistry = self._starting_chemistry(team, setup)
        modifiers = self.tactical_system.apply_tactical_modifiers(setup, chemistry, team.manager_rating)
        return SideProfile(
            strength=strength,
            possession=modifiers["possession"],
            chance_creation=modifiers["chance_creation"],
            setup=setup,
        )

    def start_run(
        self,
        match: Match,
        home_changes: Optional[Mapping[int, TeamTactics]] = None,
        away_changes: Optional[Mapping[int, TeamTactics]] = None,
    ) -> MatchRun:
        """Prepare a run for an unplayed match.

        Parameters
        ----------
        match : Match
            Fixture to simulate.
        home_changes : Optional[Mapping[int, TeamTactics]]
            Minute to tactics schedule for the home side.
        away_changes : Optional[Mapping[int, TeamTactics]]
            Minute to tactics schedule for the away side.

        Returns
        -------
        MatchRun
            Run ready for :meth:`MatchRun.kickoff`.

        Raises
        ------
        ValueError
            When the match is already completed.
        """
        if match.is_completed:
            raise ValueError(f"Match {match.match_id} is already completed")
        home = self.side_profile(match, True)
        away = self.side_profile(match, False)
        return MatchRun(
            match,
            self._call_rng(),
            self.config,
            home,
            away,
            home_tactics=self._initial_tactics(home),
            away_tactics=self._initial_tactics(away),
            home_changes=home_changes,
            away_changes=away_changes,
        )

    def simulate_match(self, match: Match) -> Match:
        """Simulate a match minute by minute.

        Parameters
        ----------
        match : Match
            Unplayed fixture.

        Returns
        -------
        Match
            Completed match with events, statistics, performances and momentum.

        Raises
        ------
        ValueError
            When the match is already completed.
        """
        return self._complete(self.start_run(match))

    def simulate_match_with_tactical_changes(
        self,
        match: Match,
        home_changes: Mapping[int, TeamTactics],
        away_changes: Mapping[int, TeamTactics],
    ) -> Match:
        """Simulate a match with tactics switched at fixed minutes.

        Parameters
        ----------
        match : Match
            Unplayed fixture.
        home_changes : Mapping[int, TeamTactics]
            Minute to tactics schedule for the home side.
        away_changes : Mapping[int, TeamTactics]
            Minute to tactics schedule for the away side.

        Returns
        -------
        Match
            Completed match including one tactical-change event per applied
            change.

        Raises
        ------
        ValueError
            When the match is already completed or a scheduled slider lies
            outside 0-100.
        """
        return self._complete(self.start_run(match, home_changes, away_changes))

    def simulate_quick_result(self, match: Match) -> Match:
        """Produce a final score from team strength alone.

        Parameters
        ----------
        match : Match
            Unplayed fixture.

        Returns
        -------
        Match
            Completed match with a single full-time event at minute 90.

        Raises
        ------
        ValueError
            When the match is already completed.
        """
        if match.is_completed:
            raise ValueError(f"Match {match.match_id} is already completed")

        cfg = self.config.quick_result
        home_strength = self.calculate_team_strength(
            match.home_team, True, match.weather, match.is_neutral_venue
        )
        away_strength = self.calculate_team_strength(
            match.away_team, False, match.weather, match.is_neutral_venue
        )
        rng = self._call_rng()
        home_goals = self._quick_goals(home_strength, rng)
        away_goals = self._quick_goals(away_strength, rng)

        event = MatchEvent(
            event_id=f"evt-{match.match_id}-{len(match.events) + 1}",
            event_type=MatchEventType.FULL_TIME,
            minute=cfg.final_minute,
            team_id=match.home_team.team_id,
            description=f"Full time: {match.home_team.name} {home_goals} - {away_goals} {match.away_team.name}",
            metadata={"homeScore": home_goals, "awayScore": away_goals, "quickResult": True},
        )
        completed = replace(
            match,
            home_goals=home_goals,
            away_goals=away_goals,
            current_minute=cfg.final_minute,
            is_completed=True,
            result=MatchResult.from_score(home_goals, away_goals),
        ).with_event(event)
        if self.debugger is not None:
            self.debugger.log_match_event(event.minute, event.event_type.value, event.description)
        return completed

    def _call_rng(self) -> random.Random:
        """Derive a private generator for one simulation call.

        Returns
        -------
        random.Random
            Generator seeded from the simulator's own stream.
        """
        with self._rng_lock:
            return random.Random(self.rng.getrandbits(64))

    def _quick_goals(self, strength: float, rng: random.Random) -> int:
        """Draw a goal count from a strength-based expectation.

        Parameters
        ----------
        strength : float
            Team strength.
        rng : random.Random
            Generator for this call.

        Returns
        -------
        int
            Goals between 0 and the configured cap.
        """
        cfg = self.config.quick_result
        low, high = cfg.expectation_bounds
        expected = max(low, min(high, strength / cfg.strength_divisor)) * cfg.expectation_scale
        whole = math.floor(expected)
        goals = whole + (1 if rng.random() < expected - whole else 0)
        if rng.random() < cfg.bonus_goal_chance:
            goals += rng.randint(0, 1)
        return max(0, min(cfg.max_goals, goals))

    def _complete(self, run: MatchRun) -> Match:
        """Drive a run to full time and log its events.

        Parameters
        ----------
        run : MatchRun
            Fresh run.

        Returns
        -------
        Match
            Completed match snapshot.
        """
        result = run.run_to_completion()
        if self.debugger is not None:
            for event in result.events:
                self.debugger.log_match_event(event.minute, event.event_type.value, event.description)
        return result

    def _tactical_effectiveness(self, team: Team, setup: TacticalSetup) -> float:
        """Effectiveness of a setup for a team's starting eleven.

        Parameters
        ----------
        team : Team
            Non-empty team.
        setup : TacticalSetup
            Setup to evaluate.

        Returns
        -------
        float
            Multiplier from :meth:`TacticalSetup.calculate_tactical_effectiveness`.
        """
        chemistry = self._starting_chemistry(team, setup)
        return setup.calculate_tactical_effectiveness(chemistry, team.manager_rating, self.config.tactical)

    def _starting_chemistry(self, team: Team, setup: TacticalSetup) -> float:
        """Chemistry of the starting eleven in the setup's formation.

        Parameters
        ----------
        team : Team
            Non-empty team.
        setup : TacticalSetup
            Setup whose formation is used.

        Returns
        -------
        float
            Chemistry on the 0-100 scale.
        """
        starters = team.starting_players()
        eleven = replace(team, players=starters, starting_xi=[])
        roles = self.tactical_system.create_optimal_roles(setup.formation, starters)
        return self.tactical_system.calculate_team_chemistry(eleven, setup, roles)

    @staticmethod
    def _initial_tactics(profile: SideProfile) -> TeamTactics:
        """Live tactics a side starts with.

        Parameters
        ----------
        profile : SideProfile
            Side profile carrying the derived setup.

        Returns
        -------
        TeamTactics
            Tactics mirroring the setup, or balanced tactics without one.
        """
        if profile.setup is None:
            return TeamTactics.balanced()
        return TeamTactics.from_setup(profile.setup)
