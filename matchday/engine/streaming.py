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
"""Live, externally controllable match streaming.

The :class:`StreamingMatchSimulator` steps a :class:`MatchRun` one minute per
scheduler tick and publishes a :class:`MatchSimulationEvent` envelope for every
generated event and every tick. Subscribers are called synchronously while the
simulator lock is held, so they observe envelopes in generation order and may
call the controls re-entrantly.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from matchday.engine.commentary import CommentaryEngine
from matchday.engine.config import ENGINE_CONFIG, EngineConfig
from matchday.engine.match_simulator import MatchRun, MatchSimulator
from matchday.engine.scheduler import ScheduledCall, ThreadingScheduler, TickScheduler
from matchday.engine.tactical_system import TacticalSystem
from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.match import Match
from matchday.models.tactics import (
    Formation,
    MatchIntensity,
    PlayerInstructions,
    TacticalSetup,
    TeamTactics,
)
from matchday.utils.debug import MatchDebugger

REGULATION_MINUTES = 90


@dataclass(frozen=True)
class MatchSimulationEvent:
    """Envelope published to streaming subscribers.

    Parameters
    ----------
    match : Match
        Snapshot of the match when the envelope was published.
    event : Optional[MatchEvent]
        Event being announced; ``None`` for a per-minute tick.
    commentary : str
        Broadcast line for the moment.
    metadata : Mapping[str, Any]
        Extra details such as ``{"kind": "tick", "minute": 12}``.
    """

    match: Match
    event: Optional[MatchEvent] = None
    commentary: str = ""
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the metadata mapping."""
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


Subscriber = Callable[[MatchSimulationEvent], None]


class Subscription:
    """Registration of a subscriber callback.

    Parameters
    ----------
    simulator : StreamingMatchSimulator
        Simulator the callback is registered with.
    callback : Subscriber
        Function receiving every published envelope.
    """

    def __init__(self, simulator: StreamingMatchSimulator, callback: Subscriber) -> None:
        self._simulator = simulator
        self._callback = callback

    @property
    def active(self) -> bool:
        """Whether the callback still receives envelopes."""
        return self._simulator.is_subscribed(self._callback)

    def cancel(self) -> None:
        """Stop delivering envelopes to the callback; safe to call repeatedly."""
        self._simulator.unsubscribe(self._callback)


class StreamingMatchSimulator:
    """Drive a match in real time with pause, speed and tactical controls.

    Parameters
    ----------
    seed : Optional[int]
        Seed for match events and commentary phrasing.
    config : Optional[EngineConfig]
        Tuning overrides; defaults to ``ENGINE_CONFIG``.
    scheduler : Optional[TickScheduler]
        Source of delayed callbacks; daemon timer threads when omitted.
    debugger : Optional[MatchDebugger]
        Receives every published envelope, control and subscriber error; an
        in-memory debugger when omitted.
    tactical_system : Optional[TacticalSystem]
        Tactical layer used for strength and automatic tactics.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        config: Optional[EngineConfig] = None,
        scheduler: Optional[TickScheduler] = None,
        debugger: Optional[MatchDebugger] = None,
        tactical_system: Optional[TacticalSystem] = None,
    ) -> None:
        self.config = config or ENGINE_CONFIG
        self.scheduler = scheduler or ThreadingScheduler()
        self.debugger = debugger or MatchDebugger()
        self._simulator = MatchSimulator(seed=seed, config=self.config, tactical_system=tactical_system)
        self.tactical_system = self._simulator.tactical_system
        self.commentary = CommentaryEngine(random.Random(seed))
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self._run: Optional[MatchRun] = None
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0
        self._paused = False
        self._halted = False
        self._disposed = False
        self._speed = 1.0
        self._automatic = {True: False, False: False}
        self._base_setups: Dict[bool, Optional[TacticalSetup]] = {True: None, False: None}

    @property
    def speed(self) -> float:
        """Current speed multiplier."""
        return self._speed

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks at the current speed."""
        return self.config.streaming.base_tick_interval / self._speed

    @property
    def is_paused(self) -> bool:
        """Whether ticking is paused."""
        return self._paused

    @property
    def is_disposed(self) -> bool:
        """Whether :meth:`dispose` has been called."""
        return self._disposed

    @property
    def is_running(self) -> bool:
        """Whether a match is in flight."""
        with self._lock:
            return self._run is not None and not self._run.is_completed and not self._disposed

    @property
    def current_match(self) -> Optional[Match]:
        """Snapshot of the current or last simulated match."""
        with self._lock:
            return self._run.snapshot() if self._run is not None else None

    def subscribe(self, callback: Subscriber) -> Subscription:
        """Register a callback for published envelopes.

        Parameters
        ----------
        callback : Subscriber
            Function called with every :class:`MatchSimulationEvent`.

        Returns
        -------
        Subscription
            Handle that cancels the registration; inactive once disposed.
        """
        with self._lock:
            if not self._disposed:
                self._subscribers.append(callback)
        return Subscription(self, callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove a callback; unknown callbacks are ignored.

        Parameters
        ----------
        callback : Subscriber
            Previously registered callback.
        """
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def is_subscribed(self, callback: Subscriber) -> bool:
        """Check whether a callback is registered.

        Parameters
        ----------
        callback : Subscriber
            Callback to look up.

        Returns
        -------
        bool
            ``True`` while the callback receives envelopes.
        """
        with self._lock:
            return callback in self._subscribers

    def start_match(self, match: Match) -> MatchSimulationControls:
        """Kick off a match and start ticking.

        The kickoff envelope is published before this method returns.

        Parameters
        ----------
        match : Match
            Unplayed fixture.

        Returns
        -------
        MatchSimulationControls
            Handle for controlling the running match.

        Raises
        ------
        RuntimeError
            When the simulator is disposed or another match is in flight.
        ValueError
            When the match is already completed.
        """
        with self._lock:
            if self._disposed:
                raise RuntimeError("Cannot start a match on a disposed simulator")
            if match.is_completed:
                raise ValueError(f"Match {match.match_id} is already completed")
            if self._run is not None and not self._run.is_completed:
                raise RuntimeError("A match is already being simulated")

            run = self._simulator.start_run(match)
            self._run = run
            self._paused = False
            self._halted = False
            self._automatic = {True: False, False: False}
            self._base_setups = {True: run.profiles[True].setup, False: run.profiles[False].setup}
            self.debugger.log_control("start_match", f"{match.match_id}: {match.score_line()}")

            self._publish_events(run.kickoff())
            self._schedule_next()
            return MatchSimulationControls(self)

    def pause(self) -> None:
        """Stop ticking until :meth:`resume`; ignored without a running match."""
        with self._lock:
            if not self._is_active() or self._paused:
                return
            self._paused = True
            self._cancel_pending()
            self.debugger.log_control("pause", f"minute {self._run.current_minute}")

    def resume(self) -> None:
        """Continue ticking from the paused minute."""
        with self._lock:
            if not self._is_active() or not self._paused:
                return
            self._paused = False
            self.debugger.log_control("resume", f"minute {self._run.current_minute}")
            self._schedule_next()

    def set_speed(self, multiplier: float) -> None:
        """Change the tick rate, rescheduling any pending tick.

        Parameters
        ----------
        multiplier : float
            Requested speed; clamped to the configured range.
        """
        with self._lock:
            if self._disposed:
                return
            cfg = self.config.streaming
            self._speed = max(cfg.min_speed, min(cfg.max_speed, float(multiplier)))
            self.debugger.log_control("set_speed", f"{multiplier} -> {self._speed}")
            if self._is_active() and not self._paused:
                self._cancel_pending()
                self._schedule_next()

    def jump_to_minute(self, minute: int) -> None:
        """Simulate forward to a minute without publishing tick envelopes.

        Targets outside 0-120 or behind the clock are ignored. Events generated
        on the way are still published.

        Parameters
        ----------
        minute : int
            Target minute.
        """
        with self._lock:
            if not self._is_active():
                return
            run = self._run
            if not 0 <= minute <= self.config.streaming.max_minute or minute < run.current_minute:
                self.debugger.log_control("jump_to_minute", f"ignored target {minute}")
                return
            self.debugger.log_control("jump_to_minute", f"{run.current_minute} -> {minute}")
            while run.current_minute < minute and not run.is_completed:
                self._advance(publish_tick=False)
            if run.is_completed:
                self._cancel_pending()

    def skip_to_end(self) -> None:
        """Simulate the rest of the match immediately."""
        with self._lock:
            if not self._is_active():
                return
            run = self._run
            self.debugger.log_control("skip_to_end", f"from minute {run.current_minute}")
            while not run.is_completed:
                self._advance(publish_tick=False)
            self._cancel_pending()

    def apply_tactical_change(self, team_id: str, tactics: TeamTactics) -> None:
        """Switch a side's live tactics.

        Parameters
        ----------
        team_id : str
            Team changing tactics.
        tactics : TeamTactics
            New tactics.

        Raises
        ------
        ValueError
            When a slider lies outside 0-100.
        """
        with self._lock:
            if not self._is_active():
                return
            is_home = self._run.match.is_home(team_id)
            events = self._run.apply_tactics(is_home, tactics)
            self.debugger.log_control("apply_tactical_change", f"{team_id}: {tactics.mentality.value}")
            self._publish_events(events)

    def change_formation(self, team_id: str, formation: Formation) -> None:
        """Switch a side's formation and recompute its strength.

        Parameters
        ----------
        team_id : str
            Team changing formation.
        formation : Formation
            New formation.
        """
        with self._lock:
            if not self._is_active():
                return
            run = self._run
            is_home = run.match.is_home(team_id)
            formation = Formation(formation)
            team = replace(run.team(is_home), formation=formation)
            base = self._base_setups[is_home]
            setup = replace(base, formation=formation) if base is not None else None
            updated = replace(run.match, **{"home_team" if is_home else "away_team": team})
            run.update_team(is_home, team, self._simulator.side_profile(updated, is_home, setup))
            self._base_setups[is_home] = setup
            self.debugger.log_control("change_formation", f"{team_id}: {formation.value}")
            self._publish_events(
                run.record_event(
                    MatchEventType.TACTICAL_CHANGE,
                    is_home,
                    f"Formation change to {formation.value}",
                    metadata={"changeType": "formation", "formation": formation.value},
                )
            )

    def set_player_instructions(self, team_id: str, player_id: str, instructions: PlayerInstructions) -> None:
        """Give a player individual instructions.

        Parameters
        ----------
        team_id : str
            Team the player belongs to.
        player_id : str
            Player receiving the instructions.
        instructions : PlayerInstructions
            Role and mentality to adopt.

        Raises
        ------
        ValueError
            If the player is not in the team or the instructions name another player.
        """
        with self._lock:
            if not self._is_active():
                return
            run = self._run
            is_home = run.match.is_home(team_id)
            player = run.team(is_home).get_player(player_id)
            if player is None:
                raise ValueError(f"Player {player_id} is not in team {team_id}")
            if instructions.player_id != player_id:
                raise ValueError("instructions target a different player")
            run.set_instructions(is_home, instructions)
            self.debugger.log_control("set_player_instructions", f"{player_id}: {instructions.role.value}")
            self._publish_events(
                run.record_event(
                    MatchEventType.TACTICAL_CHANGE,
                    is_home,
                    f"Player instructions updated for {player.name}",
                    player=player,
                    metadata={
                        "changeType": "playerInstructions",
                        "role": instructions.role.value,
                        "mentality": instructions.mentality.value,
                    },
                )
            )

    def enable_automatic_tactics(self, team_id: str, enabled: bool) -> None:
        """Let the tactical system adjust a side's tactics after each tick.

        Parameters
        ----------
        team_id : str
            Team to configure.
        enabled : bool
            Whether automatic adjustments are on.
        """
        with self._lock:
            if not self._is_active():
                return
            is_home = self._run.match.is_home(team_id)
            self._automatic[is_home] = bool(enabled)
            self.debugger.log_control("enable_automatic_tactics", f"{team_id}: {enabled}")
            self._publish_events(
                self._run.record_event(
                    MatchEventType.TACTICAL_CHANGE,
                    is_home,
                    f"Automatic tactics {'enabled' if enabled else 'disabled'}",
                    metadata={"changeType": "automaticTactics", "enabled": bool(enabled)},
                )
            )

    def set_match_intensity(self, team_id: str, intensity: MatchIntensity) -> None:
        """Change how hard a side commits to duels.

        Parameters
        ----------
        team_id : str
            Team to configure.
        intensity : MatchIntensity
            New intensity; scales event and card rates.
        """
        with self._lock:
            if not self._is_active():
                return
            is_home = self._run.match.is_home(team_id)
            intensity = MatchIntensity(intensity)
            self._run.intensity[is_home] = intensity
            self.debugger.log_control("set_match_intensity", f"{team_id}: {intensity.value}")
            self._publish_events(
                self._run.record_event(
                    MatchEventType.TACTICAL_CHANGE,
                    is_home,
                    f"Match intensity set to {intensity.value}",
                    metadata={"changeType": "matchIntensity", "intensity": intensity.value},
                )
            )

    def dispose(self) -> None:
        """Stop ticking and drop every subscriber; safe to call repeatedly."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._cancel_pending()
            self._subscribers.clear()
            self.debugger.log_control("dispose")

    def _is_active(self) -> bool:
        """Whether controls should act.

        Returns
        -------
        bool
            ``True`` with a match in flight on a live simulator.
        """
        return not self._disposed and self._run is not None and not self._run.is_completed

    def _schedule_next(self) -> None:
        """Queue the next tick unless ticking is stopped."""
        if not self._is_active() or self._paused or self._halted or self._pending is not None:
            return
        self._generation += 1
        generation = self._generation
        self._pending = self.scheduler.call_later(self.tick_interval, lambda: self._tick(generation))

    def _cancel_pending(self) -> None:
        """Cancel the queued tick, if any."""
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _tick(self, generation: int) -> None:
        """Scheduler callback: simulate one minute and queue the next.

        A timer that fired after its tick was cancelled or replaced finds a
        newer generation and returns without stepping.

        Parameters
        ----------
        generation : int
            Generation the callback was scheduled under.
        """
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
            if not self._is_active() or self._paused or self._halted:
                return
            self._advance(publish_tick=True)
            self._schedule_next()

    def _advance(self, publish_tick: bool) -> None:
        """Step the run once and publish the outcome.

        Parameters
        ----------
        publish_tick : bool
            Whether a per-minute commentary envelope is published.
        """
        run = self._run
        before = run.current_minute
        events = run.step()
        self._publish_events(events)
        if run.current_minute != before:
            if publish_tick:
                snapshot = run.snapshot()
                self._publish(
                    MatchSimulationEvent(
                        match=snapshot,
                        commentary=self.commentary.minute(run.current_minute, snapshot),
                        metadata={"kind": "tick", "minute": run.current_minute},
                    )
                )
            self._apply_automatic_tactics()
        if run.is_completed:
            self._cancel_pending()

    def _apply_automatic_tactics(self) -> None:
        """Adopt the tactical system's suggestion for every automatic side."""
        run = self._run
        if run.is_completed:
            return
        minutes_remaining = max(0, REGULATION_MINUTES - run.current_minute)
        for is_home in (True, False):
            base = self._base_setups[is_home]
            if not self._automatic[is_home] or base is None:
                continue
            goals, conceded = run.match.home_goals, run.match.away_goals
            if not is_home:
                goals, conceded = conceded, goals
            possession = run.statistics.home_possession if is_home else run.statistics.away_possession
            suggestion = self.tactical_system.suggest_tactical_adjustment(
                base, goals, conceded, minutes_remaining, possession / 100.0
            )
            tactics = TeamTactics.from_setup(suggestion)
            if tactics != run.tactics[is_home]:
                self._publish_events(run.apply_tactics(is_home, tactics))

    def _publish_events(self, events: List[MatchEvent]) -> None:
        """Publish one envelope per event.

        Parameters
        ----------
        events : List[MatchEvent]
            Events in generation order.
        """
        if not events:
            return
        snapshot = self._run.snapshot()
        for event in events:
            self._publish(
                MatchSimulationEvent(
                    match=snapshot,
                    event=event,
                    commentary=self.commentary.event(event, snapshot),
                    metadata={"kind": "event", "minute": event.minute},
                )
            )

    def _publish(self, envelope: MatchSimulationEvent) -> None:
        """Log an envelope and deliver it to every subscriber.

        Parameters
        ----------
        envelope : MatchSimulationEvent
            Envelope to deliver.
        """
        label = envelope.event.event_type.value if envelope.event is not None else "tick"
        self.debugger.log_match_event(envelope.match.current_minute, label, envelope.commentary)
        for callback in list(self._subscribers):
            try:
                callback(envelope)
            except Exception as exc:
                self.debugger.log_error("SubscriberError", f"{type(exc).__name__}: {exc}")
                self._halted = True
                self._cancel_pending()
                raise


class MatchSimulationControls:
    """Handle returned by :meth:`StreamingMatchSimulator.start_match`.

    Parameters
    ----------
    simulator : StreamingMatchSimulator
        Simulator every control delegates to.
    """

    def __init__(self, simulator: StreamingMatchSimulator) -> None:
        self._simulator = simulator

    def pause(self) -> None:
        """Pause the running match."""
        self._simulator.pause()

    def resume(self) -> None:
        """Resume the paused match."""
        self._simulator.resume()

    def set_speed(self, multiplier: float) -> None:
        """Change the tick rate.

        Parameters
        ----------
        multiplier : float
            Requested speed multiplier.
        """
        self._simulator.set_speed(multiplier)

    def jump_to_minute(self, minute: int) -> None:
        """Simulate forward to a minute.

        Parameters
        ----------
        minute : int
            Target minute.
        """
        self._simulator.jump_to_minute(minute)

    def skip_to_end(self) -> None:
        """Finish the match immediately."""
        self._simulator.skip_to_end()

    def apply_tactical_change(self, team_id: str, tactics: TeamTactics) -> None:
        """Switch a side's live tactics.

        Parameters
        ----------
        team_id : str
            Team changing tactics.
        tactics : TeamTactics
            New tactics.
        """
        self._simulator.apply_tactical_change(team_id, tactics)

    def change_formation(self, team_id: str, formation: Formation) -> None:
        """Switch a side's formation.

        Parameters
        ----------
        team_id : str
            Team changing formation.
        formation : Formation
            New formation.
        """
        self._simulator.change_formation(team_id, formation)

    def set_player_instructions(self, team_id: str, player_id: str, instructions: PlayerInstructions) -> None:
        """Give a player individual instructions.

        Parameters
        ----------
        team_id : str
            Team the player belongs to.
        player_id : str
            Player receiving the instructions.
        instructions : PlayerInstructions
            Role and mentality to adopt.
        """
        self._simulator.set_player_instructions(team_id, player_id, instructions)

    def enable_automatic_tactics(self, team_id: str, enabled: bool) -> None:
        """Toggle automatic tactics for a side.

        Parameters
        ----------
        team_id : str
            Team to configure.
        enabled : bool
            Whether automatic adjustments are on.
        """
        self._simulator.enable_automatic_tactics(team_id, enabled)

    def set_match_intensity(self, team_id: str, intensity: MatchIntensity) -> None:
        """Change a side's match intensity.

        Parameters
        ----------
        team_id : str
            Team to configure.
        intensity : MatchIntensity
            New intensity.
        """
        self._simulator.set_match_intensity(team_id, intensity)

    def dispose(self) -> None:
        """Dispose of the underlying simulator."""
        self._simulator.dispose()
