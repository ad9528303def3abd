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
"""In-memory state tracking and checkpoints for a streamed match.

The :class:`MatchStateManager` subscribes to a
:class:`~matchday.engine.streaming.StreamingMatchSimulator`, keeps the latest
:class:`~matchday.models.match_state.MatchState` with a bounded history, and
takes checkpoints on demand or automatically when key events arrive.

Subscriber callbacks run while the simulator holds its lock, so the manager
never calls back into the simulator while holding its own lock.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from matchday.engine.commentary import CommentaryEngine
from matchday.engine.config import ENGINE_CONFIG, CheckpointConfig
from matchday.engine.streaming import (
    MatchSimulationControls,
    MatchSimulationEvent,
    StreamingMatchSimulator,
    Subscription,
)
from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.match import Match, MatchStatistics, MomentumTracker, PlayerPerformance
from matchday.models.match_state import MatchCheckpoint, MatchState, auto_checkpoint_text
from matchday.models.tactics import TeamTactics
from matchday.utils.debug import MatchDebugger

KEY_EVENT_TYPES = frozenset(
    {
        MatchEventType.GOAL,
        MatchEventType.OWN_GOAL,
        MatchEventType.YELLOW_CARD,
        MatchEventType.RED_CARD,
        MatchEventType.HALF_TIME,
        MatchEventType.FULL_TIME,
        MatchEventType.TACTICAL_CHANGE,
    }
)


class MatchStateManager:
    """Track a streamed match and keep checkpoints of its state.

    Parameters
    ----------
    config : Optional[CheckpointConfig]
        Automatic checkpoint triggers; ``ENGINE_CONFIG.checkpoints`` when
        omitted.
    commentary : Optional[CommentaryEngine]
        Source of situational commentary.
    debugger : Optional[MatchDebugger]
        Receives checkpoint and control lines; the simulator's debugger when
        omitted.
    """

    def __init__(
        self,
        config: Optional[CheckpointConfig] = None,
        commentary: Optional[CommentaryEngine] = None,
        debugger: Optional[MatchDebugger] = None,
    ) -> None:
        self.config = config or ENGINE_CONFIG.checkpoints
        self.commentary = commentary or CommentaryEngine()
        self.debugger = debugger
        self._lock = threading.RLock()
        self._state: Optional[MatchState] = None
        self._history: Deque[MatchState] = deque(maxlen=max(1, self.config.history_size))
        self._checkpoints: List[MatchCheckpoint] = []
        self._simulator: Optional[StreamingMatchSimulator] = None
        self._subscription: Optional[Subscription] = None
        self._sequence = 0

    @property
    def current_state(self) -> Optional[MatchState]:
        """Latest state, or ``None`` when no match is managed."""
        with self._lock:
            return self._state

    @property
    def checkpoints(self) -> List[MatchCheckpoint]:
        """Checkpoints in creation order."""
        with self._lock:
            return list(self._checkpoints)

    @property
    def history(self) -> List[MatchState]:
        """Recent states, oldest first."""
        with self._lock:
            return list(self._history)

    def start_match(self, match: Match, simulator: StreamingMatchSimulator) -> MatchSimulationControls:
        """Take over a fixture and start streaming it.

        A ``Match Start`` checkpoint of the unplayed fixture is taken before
        kickoff.

        Parameters
        ----------
        match : Match
            Unplayed fixture.
        simulator : StreamingMatchSimulator
            Simulator that will play the match.

        Returns
        -------
        MatchSimulationControls
            Controls returned by the simulator.

        Raises
        ------
        RuntimeError
            When a match is already being managed.
        """
        with self._lock:
            if self._state is not None:
                raise RuntimeError("A match is already being managed")
            self._simulator = simulator
            if self.debugger is None:
                self.debugger = simulator.debugger
            self._checkpoints.clear()
            self._history.clear()
            self._set_state(MatchState.from_match(match))
            self._add_checkpoint("Match Start", "Match kicked off", {})
        self._subscription = simulator.subscribe(self._on_envelope)
        try:
            return simulator.start_match(match)
        except (RuntimeError, ValueError):
            self.end_match()
            raise

    def create_checkpoint(self, name: str, description: str = "") -> MatchCheckpoint:
        """Checkpoint the current state under a chosen name.

        Parameters
        ----------
        name : str
            Display name.
        description : str
            Longer explanation.

        Returns
        -------
        MatchCheckpoint
            The new checkpoint.

        Raises
        ------
        RuntimeError
            When no match is managed.
        """
        with self._lock:
            if self._state is None:
                raise RuntimeError("No active match to checkpoint")
            return self._add_checkpoint(name, description, {})

    def load_checkpoint(self, checkpoint: MatchCheckpoint) -> MatchState:
        """Make a checkpoint's state the current state.

        The simulator keeps playing; the restored state is replaced by the next
        envelope it publishes. A ``Restored from ...`` checkpoint records the
        restoration.

        Parameters
        ----------
        checkpoint : MatchCheckpoint
            Checkpoint to restore.

        Returns
        -------
        MatchState
            The restored state.

        Raises
        ------
        RuntimeError
            When no match is managed.
        ValueError
            When the checkpoint belongs to another match.
        """
        with self._lock:
            if self._state is None:
                raise RuntimeError("No active simulator to load a checkpoint into")
            if checkpoint.match_id != self._state.match.match_id:
                raise ValueError(f"Checkpoint {checkpoint.checkpoint_id} belongs to another match")
            self._set_state(checkpoint.state)
            self._add_checkpoint(
                f"Restored from {checkpoint.name}",
                f"Match state restored from checkpoint: {checkpoint.name}",
                {},
            )
            return checkpoint.state

    def remove_checkpoint(self, checkpoint_id: str) -> bool:
        """Forget a checkpoint.

        Parameters
        ----------
        checkpoint_id : str
            Identifier of the checkpoint.

        Returns
        -------
        bool
            ``True`` when a checkpoint was removed.
        """
        with self._lock:
            for index, checkpoint in enumerate(self._checkpoints):
                if checkpoint.checkpoint_id == checkpoint_id:
                    del self._checkpoints[index]
                    return True
            return False

    def pause(self) -> None:
        """Pause the simulator and record it in the state."""
        simulator = self._simulator
        if simulator is None:
            return
        simulator.pause()
        self._record_playback(simulator)

    def resume(self) -> None:
        """Resume the simulator and record it in the state."""
        simulator = self._simulator
        if simulator is None:
            return
        simulator.resume()
        self._record_playback(simulator)

    def set_speed(self, multiplier: float) -> None:
        """Change the simulator speed and record the clamped value.

        Parameters
        ----------
        multiplier : float
            Requested speed multiplier.
        """
        simulator = self._simulator
        if simulator is None:
            return
        simulator.set_speed(multiplier)
        self._record_playback(simulator)

    def update_tactics(self, team_id: str, tactics: TeamTactics) -> None:
        """Apply new tactics through the simulator and remember them.

        Parameters
        ----------
        team_id : str
            Team changing tactics.
        tactics : TeamTactics
            New tactics.
        """
        simulator = self._simulator
        if simulator is None:
            return
        simulator.apply_tactical_change(team_id, tactics)
        with self._lock:
            if self._state is not None:
                self._set_state(self._state.with_tactics(team_id, tactics))

    def get_statistics(self) -> Optional[MatchStatistics]:
        """Statistics of the latest snapshot.

        Returns
        -------
        Optional[MatchStatistics]
            Statistics, or ``None`` without a managed match.
        """
        state = self.current_state
        return state.match.statistics if state is not None else None

    def get_momentum(self) -> Optional[MomentumTracker]:
        """Momentum of the latest snapshot.

        Returns
        -------
        Optional[MomentumTracker]
            Momentum, or ``None`` without a managed match.
        """
        state = self.current_state
        return state.match.momentum if state is not None else None

    def get_player_performances(self) -> Dict[str, PlayerPerformance]:
        """Player performances of the latest snapshot.

        Returns
        -------
        Dict[str, PlayerPerformance]
            Performances keyed by player id; empty without a managed match.
        """
        state = self.current_state
        return dict(state.match.player_performances) if state is not None else {}

    def state_commentary(self) -> str:
        """Situational commentary for the latest snapshot.

        Returns
        -------
        str
            Commentary line; empty without a managed match.
        """
        state = self.current_state
        return self.commentary.match_state(state.match) if state is not None else ""

    def events_up_to_minute(self, minute: int) -> List[MatchEvent]:
        """Events recorded at or before a minute.

        Parameters
        ----------
        minute : int
            Last minute to include.

        Returns
        -------
        List[MatchEvent]
            Events in log order.
        """
        state = self.current_state
        if state is None:
            return []
        return [event for event in state.match.events if event.minute <= minute]

    def key_events(self) -> List[MatchEvent]:
        """Goals, cards, whistles and tactical changes.

        Returns
        -------
        List[MatchEvent]
            Key events in log order.
        """
        state = self.current_state
        if state is None:
            return []
        return [event for event in state.match.events if event.event_type in KEY_EVENT_TYPES]

    def end_match(self) -> None:
        """Stop managing the match; checkpoints stay available."""
        with self._lock:
            if self._state is not None and not self._state.match.is_completed:
                self._add_checkpoint("Match Ended", "Match management session ended", {})
            subscription, self._subscription = self._subscription, None
            self._simulator = None
            self._state = None
        if subscription is not None:
            subscription.cancel()

    def _on_envelope(self, envelope: MatchSimulationEvent) -> None:
        """Fold a published envelope into the state.

        Parameters
        ----------
        envelope : MatchSimulationEvent
            Envelope from the simulator.
        """
        with self._lock:
            if self._state is None:
                return
            state = self._state.with_match(envelope.match)
            event = envelope.event
            if event is not None:
                state = state.with_log_entry(f"{event.minute}': {envelope.commentary or event.description}")
            self._set_state(state)
            if event is not None and self.config.should_checkpoint(event.event_type.value):
                name, description = auto_checkpoint_text(state, event.event_type.value)
                self._add_checkpoint(
                    name,
                    description,
                    {"auto": True, "eventType": event.event_type.value, "minute": event.minute},
                )

    def _record_playback(self, simulator: StreamingMatchSimulator) -> None:
        """Copy the simulator's pause flag and speed into the state.

        Parameters
        ----------
        simulator : StreamingMatchSimulator
            Simulator to read.
        """
        with self._lock:
            if self._state is None:
                return
            self._set_state(
                MatchState(
                    state_id=self._state.state_id,
                    match=self._state.match,
                    is_paused=simulator.is_paused,
                    speed=simulator.speed,
                    team_tactics=self._state.team_tactics,
                    event_log=self._state.event_log,
                )
            )

    def _set_state(self, state: MatchState) -> None:
        """Make a state current and remember it.

        Parameters
        ----------
        state : MatchState
            New current state.
        """
        self._state = state
        self._history.append(state)

    def _add_checkpoint(self, name: str, description: str, metadata: Dict[str, object]) -> MatchCheckpoint:
        """Checkpoint the current state and enforce the size limit.

        Parameters
        ----------
        name : str
            Display name.
        description : str
            Longer explanation.
        metadata : Dict[str, object]
            Extra details; automatic checkpoints carry ``"auto": True``.

        Returns
        -------
        MatchCheckpoint
            The new checkpoint.
        """
        self._sequence += 1
        prefix = "auto" if metadata.get("auto") else "checkpoint"
        checkpoint = MatchCheckpoint(
            checkpoint_id=f"{prefix}-{self._state.match.match_id}-{self._sequence}",
            name=name,
            state=self._state,
            description=description,
            metadata=metadata,
        )
        self._checkpoints.append(checkpoint)
        if self.debugger is not None:
            self.debugger.log_control("checkpoint", f"{checkpoint.checkpoint_id}: {name}")
        self._trim_checkpoints()
        return checkpoint

    def _trim_checkpoints(self) -> None:
        """Drop the oldest manual, then the oldest automatic, checkpoints over the limit."""
        excess = len(self._checkpoints) - self.config.max_checkpoints
        if excess <= 0:
            return
        manual = [cp for cp in self._checkpoints if not cp.is_automatic][:excess]
        for checkpoint in manual:
            self._checkpoints.remove(checkpoint)
        excess -= len(manual)
        if excess > 0:
            del self._checkpoints[:excess]
