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
"""Tests for the streaming simulator driven by a virtual clock."""

from __future__ import annotations

import random
from typing import List

import pytest

from matchday.engine.match_simulator import MatchSimulator
from matchday.engine.scheduler import VirtualClock
from matchday.engine.streaming import MatchSimulationEvent, StreamingMatchSimulator
from matchday.models.events import MatchEventType
from matchday.models.match import Match
from matchday.models.tactics import (
    Formation,
    InstructionRole,
    MatchIntensity,
    PlayerInstructions,
    PlayerMentality,
    TeamMentality,
    TeamTactics,
)
from matchday.utils.debug import MatchDebugger
from matchday.utils.generator import generate_team


def make_match(match_id: str = "live") -> Match:
    """An unplayed fixture between two reproducible squads."""
    home = generate_team("home", random.Random(1), name="Home Town", formation=Formation.F433, capacity=40000)
    away = generate_team("away", random.Random(2), name="Away City", formation=Formation.F442, capacity=40000)
    return Match.create(match_id, home, away)


class Harness:
    """Streaming simulator on a virtual clock with a recording subscriber."""

    def __init__(self, seed: int = 1) -> None:
        self.clock = VirtualClock()
        self.debugger = MatchDebugger(max_recent=5000)
        self.simulator = StreamingMatchSimulator(seed=seed, scheduler=self.clock, debugger=self.debugger)
        self.received: List[MatchSimulationEvent] = []
        self.subscription = self.simulator.subscribe(self.received.append)

    @property
    def minute(self) -> int:
        return self.simulator.current_match.current_minute

    def ticks(self) -> List[MatchSimulationEvent]:
        return [e for e in self.received if e.metadata["kind"] == "tick"]

    def events_of(self, event_type: MatchEventType) -> List[MatchSimulationEvent]:
        return [e for e in self.received if e.event is not None and e.event.event_type is event_type]

    def log_lines(self, needle: str) -> List[str]:
        return [line for line in self.debugger.get_recent_events(5000) if needle in line]


@pytest.fixture
def harness() -> Harness:
    """Harness with a match already kicked off."""
    h = Harness()
    h.simulator.start_match(make_match())
    return h


class TestStartMatch:
    """Tests for StreamingMatchSimulator.start_match."""

    def test_kickoff_published_before_return(self, harness: Harness) -> None:
        first = harness.received[0]
        assert first.event.event_type is MatchEventType.KICKOFF
        assert first.metadata["kind"] == "event"
        assert first.commentary.startswith("The match is underway!")
        assert harness.simulator.is_running
        assert harness.clock.pending == 1

    def test_one_tick_per_interval(self, harness: Harness) -> None:
        harness.clock.advance(10.0)
        assert harness.minute == 10
        assert [t.metadata["minute"] for t in harness.ticks()] == list(range(1, 11))
        assert all(t.event is None for t in harness.ticks())

    def test_second_match_while_running_rejected(self, harness: Harness) -> None:
        with pytest.raises(RuntimeError):
            harness.simulator.start_match(make_match("other"))

    def test_completed_match_rejected(self) -> None:
        completed = MatchSimulator(seed=1).simulate_quick_result(make_match())
        h = Harness()
        with pytest.raises(ValueError):
            h.simulator.start_match(completed)
        assert h.received == []

    def test_new_match_after_previous_finished(self, harness: Harness) -> None:
        harness.simulator.skip_to_end()
        harness.simulator.start_match(make_match("next"))
        assert harness.simulator.current_match.match_id == "next"
        assert harness.simulator.is_running

    def test_streamed_match_matches_synchronous_run(self) -> None:
        h = Harness(seed=17)
        h.simulator.start_match(make_match())
        h.simulator.skip_to_end()
        streamed = h.simulator.current_match
        direct = MatchSimulator(seed=17).simulate_match(make_match())
        assert [e.description for e in streamed.events] == [e.description for e in direct.events]
        assert (streamed.home_goals, streamed.away_goals) == (direct.home_goals, direct.away_goals)


class TestPlaybackControls:
    """Tests for pause, resume, speed, jump and skip."""

    def test_pause_and_resume_continue_from_paused_minute(self, harness: Harness) -> None:
        harness.clock.advance(10.0)
        harness.simulator.pause()
        assert harness.simulator.is_paused
        assert harness.clock.pending == 0
        harness.clock.advance(50.0)
        assert harness.minute == 10
        harness.simulator.resume()
        harness.clock.advance(1.0)
        assert harness.minute == 11
        assert len(harness.log_lines("Command: pause")) == 1
        assert len(harness.log_lines("Command: resume")) == 1

    def test_pause_twice_is_a_no_op(self, harness: Harness) -> None:
        harness.simulator.pause()
        harness.simulator.pause()
        assert len(harness.log_lines("Command: pause")) == 1

    def test_speed_is_clamped(self, harness: Harness) -> None:
        harness.simulator.set_speed(100)
        assert harness.simulator.speed == 8.0
        assert harness.simulator.tick_interval == pytest.approx(0.125)
        harness.simulator.set_speed(0.01)
        assert harness.simulator.speed == 0.25
        assert harness.simulator.tick_interval == pytest.approx(4.0)

    def test_speed_change_reschedules_pending_tick(self, harness: Harness) -> None:
        harness.simulator.set_speed(2.0)
        assert harness.clock.pending == 1
        harness.clock.advance(5.0)
        assert harness.minute == 10

    def test_speed_while_paused_keeps_clock_stopped(self, harness: Harness) -> None:
        harness.simulator.pause()
        harness.simulator.set_speed(4.0)
        harness.clock.advance(10.0)
        assert harness.minute == 0
        harness.simulator.resume()
        harness.clock.advance(1.0)
        assert harness.minute == 4

    def test_jump_skips_tick_envelopes(self, harness: Harness) -> None:
        harness.simulator.jump_to_minute(30)
        assert harness.minute == 30
        assert harness.ticks() == []
        harness.clock.advance(1.0)
        assert harness.minute == 31

    def test_jump_behind_or_out_of_range_ignored(self, harness: Harness) -> None:
        harness.simulator.jump_to_minute(20)
        harness.simulator.jump_to_minute(10)
        harness.simulator.jump_to_minute(121)
        harness.simulator.jump_to_minute(-1)
        assert harness.minute == 20
        assert len(harness.log_lines("ignored target")) == 3

    def test_jump_past_full_time_finishes_match(self, harness: Harness) -> None:
        harness.simulator.jump_to_minute(120)
        match = harness.simulator.current_match
        assert match.is_completed
        assert harness.received[-1].event.event_type is MatchEventType.FULL_TIME
        assert harness.clock.pending == 0

    def test_skip_to_end(self, harness: Harness) -> None:
        harness.clock.advance(5.0)
        harness.simulator.skip_to_end()
        match = harness.simulator.current_match
        assert match.is_completed
        assert not harness.simulator.is_running
        assert harness.clock.pending == 0
        assert len(harness.events_of(MatchEventType.FULL_TIME)) == 1
        assert [t.metadata["minute"] for t in harness.ticks()] == [1, 2, 3, 4, 5]

    def test_controls_ignored_after_full_time(self, harness: Harness) -> None:
        harness.simulator.skip_to_end()
        count = len(harness.received)
        harness.simulator.pause()
        harness.simulator.jump_to_minute(100)
        harness.simulator.apply_tactical_change("home", TeamTactics.balanced())
        harness.clock.advance(10.0)
        assert len(harness.received) == count
        assert not harness.simulator.is_paused

    def test_controls_handle_delegates(self) -> None:
        h = Harness()
        controls = h.simulator.start_match(make_match())
        controls.set_speed(2.0)
        controls.pause()
        assert h.simulator.speed == 2.0
        assert h.simulator.is_paused
        controls.resume()
        controls.jump_to_minute(12)
        assert h.minute == 12
        controls.skip_to_end()
        assert h.simulator.current_match.is_completed


class TestTacticalControls:
    """Tests for in-match tactical changes."""

    def test_apply_tactical_change(self, harness: Harness) -> None:
        harness.clock.advance(3.0)
        tactics = TeamTactics(TeamMentality.ATTACKING, pressing=75, tempo=70, width=65, directness=55)
        harness.simulator.apply_tactical_change("home", tactics)
        envelope = harness.received[-1]
        assert envelope.event.event_type is MatchEventType.TACTICAL_CHANGE
        assert envelope.event.team_id == "home"
        assert envelope.event.minute == 3
        assert envelope.event.metadata["mentality"] == "attacking"
        assert "Home Town" in envelope.commentary

    def test_unknown_team_rejected(self, harness: Harness) -> None:
        with pytest.raises(ValueError):
            harness.simulator.apply_tactical_change("nobody", TeamTactics.balanced())

    def test_out_of_range_tactics_rejected(self, harness: Harness) -> None:
        before = len(harness.received)
        wild = TeamTactics(TeamMentality.ATTACKING, pressing=500, tempo=50, width=50, directness=50)
        with pytest.raises(ValueError):
            harness.simulator.apply_tactical_change("home", wild)
        assert len(harness.received) == before
        assert harness.log_lines("apply_tactical_change") == []

    def test_change_formation(self, harness: Harness) -> None:
        harness.simulator.change_formation("away", Formation.F451)
        event = harness.received[-1].event
        assert event.metadata["changeType"] == "formation"
        assert event.metadata["formation"] == "4-5-1"
        assert harness.simulator.current_match.away_team.formation is Formation.F451

    def test_player_instructions(self, harness: Harness) -> None:
        instructions = PlayerInstructions("home-p2", InstructionRole.WINGBACK, PlayerMentality.ATTACKING)
        harness.simulator.set_player_instructions("home", "home-p2", instructions)
        event = harness.received[-1].event
        assert event.player_id == "home-p2"
        assert event.metadata == {
            "changeType": "playerInstructions",
            "role": "wingback",
            "mentality": "attacking",
        }

    def test_player_instructions_validated(self, harness: Harness) -> None:
        instructions = PlayerInstructions("home-p2", InstructionRole.WINGBACK, PlayerMentality.ATTACKING)
        with pytest.raises(ValueError):
            harness.simulator.set_player_instructions("home", "away-p2", instructions)
        with pytest.raises(ValueError):
            harness.simulator.set_player_instructions("home", "home-p3", instructions)

    def test_match_intensity(self, harness: Harness) -> None:
        harness.simulator.set_match_intensity("away", MatchIntensity.VERY_HIGH)
        event = harness.received[-1].event
        assert event.team_id == "away"
        assert event.metadata["intensity"] == "veryHigh"

    def test_automatic_tactics_toggle_published(self, harness: Harness) -> None:
        harness.simulator.enable_automatic_tactics("home", True)
        event = harness.received[-1].event
        assert event.metadata == {"changeType": "automaticTactics", "enabled": True}

    def test_automatic_tactics_never_repeat_themselves(self) -> None:
        """Consecutive automatic changes for a side always differ."""
        for seed in range(5):
            h = Harness(seed=seed)
            h.simulator.start_match(make_match(f"auto{seed}"))
            h.simulator.enable_automatic_tactics("home", True)
            h.simulator.enable_automatic_tactics("away", True)
            h.simulator.skip_to_end()
            for team_id in ("home", "away"):
                changes = [
                    dict(e.event.metadata)
                    for e in h.events_of(MatchEventType.TACTICAL_CHANGE)
                    if e.event.team_id == team_id and e.event.metadata["changeType"] == "tactics"
                ]
                for previous, current in zip(changes, changes[1:]):
                    assert previous != current

    def test_no_automatic_changes_when_disabled(self, harness: Harness) -> None:
        harness.simulator.skip_to_end()
        assert harness.events_of(MatchEventType.TACTICAL_CHANGE) == []


class TestSubscribers:
    """Tests for subscription handling and envelope isolation."""

    def test_envelope_snapshots_are_isolated(self, harness: Harness) -> None:
        harness.clock.advance(5.0)
        envelope = harness.ticks()[-1]
        harness.clock.advance(30.0)
        assert envelope.match.current_minute == 5
        assert envelope.metadata["minute"] == 5

    def test_envelope_metadata_is_read_only(self, harness: Harness) -> None:
        with pytest.raises(TypeError):
            harness.received[0].metadata["kind"] = "tick"

    def test_current_match_is_a_copy(self, harness: Harness) -> None:
        harness.clock.advance(10.0)
        copy = harness.simulator.current_match
        copy.statistics.home_shots += 100
        assert harness.simulator.current_match.statistics.home_shots < 100

    def test_cancelled_subscription_stops_delivery(self, harness: Harness) -> None:
        harness.subscription.cancel()
        harness.subscription.cancel()
        assert not harness.subscription.active
        count = len(harness.received)
        harness.clock.advance(5.0)
        assert len(harness.received) == count

    def test_subscriber_may_pause_reentrantly(self) -> None:
        h = Harness()

        def pause_at_five(envelope: MatchSimulationEvent) -> None:
            if envelope.metadata["kind"] == "tick" and envelope.metadata["minute"] == 5:
                h.simulator.pause()

        h.simulator.subscribe(pause_at_five)
        h.simulator.start_match(make_match())
        h.clock.advance(20.0)
        assert h.minute == 5
        assert h.simulator.is_paused

    def test_subscriber_error_is_logged_and_halts(self) -> None:
        h = Harness()

        def explode(envelope: MatchSimulationEvent) -> None:
            if envelope.metadata["kind"] == "tick":
                raise RuntimeError("display crashed")

        h.simulator.subscribe(explode)
        h.simulator.start_match(make_match())
        with pytest.raises(RuntimeError, match="display crashed"):
            h.clock.advance(1.0)
        errors = h.log_lines("ERROR: Type: SubscriberError")
        assert len(errors) == 1
        assert "display crashed" in errors[0]
        assert h.clock.pending == 0
        h.clock.advance(10.0)
        assert h.minute == 1

    def test_envelopes_logged_with_labels(self, harness: Harness) -> None:
        harness.clock.advance(2.0)
        assert len(harness.log_lines("Event: kickoff")) == 1
        assert len(harness.log_lines("Event: tick")) == 2


class TestDispose:
    """Tests for StreamingMatchSimulator.dispose."""

    def test_dispose_is_idempotent(self, harness: Harness) -> None:
        harness.simulator.dispose()
        harness.simulator.dispose()
        assert harness.simulator.is_disposed
        assert not harness.simulator.is_running
        assert harness.clock.pending == 0
        assert not harness.subscription.active
        assert len(harness.log_lines("Command: dispose")) == 1

    def test_disposed_simulator_rejects_new_match(self, harness: Harness) -> None:
        harness.simulator.dispose()
        with pytest.raises(RuntimeError):
            harness.simulator.start_match(make_match("after"))

    def test_controls_after_dispose_do_nothing(self, harness: Harness) -> None:
        harness.simulator.dispose()
        harness.simulator.resume()
        harness.simulator.set_speed(4.0)
        harness.simulator.skip_to_end()
        harness.clock.advance(10.0)
        assert harness.simulator.speed == 1.0
        assert not harness.simulator.current_match.is_completed

    def test_subscribe_after_dispose_is_inactive(self, harness: Harness) -> None:
        harness.simulator.dispose()
        subscription = harness.simulator.subscribe(lambda envelope: None)
        assert not subscription.active


class TestTickScheduling:
    """Tests for the single pending tick."""

    def test_stale_timer_after_speed_change_is_ignored(self, harness: Harness) -> None:
        """A timer that fired just as it was replaced must not start a second tick chain."""
        stale = harness.simulator._pending
        harness.simulator.set_speed(2.0)
        stale._callback()
        assert harness.minute == 0
        assert harness.clock.pending == 1
        harness.clock.advance(0.5)
        assert harness.minute == 1
        harness.clock.advance(5.0)
        assert harness.minute == 11
        assert harness.clock.pending == 1

    def test_stale_timer_after_pause_is_ignored(self, harness: Harness) -> None:
        harness.clock.advance(3.0)
        stale = harness.simulator._pending
        harness.simulator.pause()
        stale._callback()
        assert harness.minute == 3
        assert harness.clock.pending == 0
        harness.simulator.resume()
        stale._callback()
        harness.clock.advance(1.0)
        assert harness.minute == 4
        assert harness.clock.pending == 1


def assert_consistent(match: Match) -> None:
    """Possession and momentum sum to 100 and no side has more shots on target than shots."""
    stats, momentum = match.statistics, match.momentum
    assert stats.home_possession + stats.away_possession == pytest.approx(100.0)
    assert momentum.home_momentum + momentum.away_momentum == pytest.approx(100.0)
    assert stats.home_shots_on_target <= stats.home_shots
    assert stats.away_shots_on_target <= stats.away_shots


class TestSnapshotConsistency:
    """Every published snapshot is internally consistent."""

    def test_ticks_jumps_and_skip(self) -> None:
        h = Harness(seed=23)
        h.simulator.start_match(make_match())
        h.clock.advance(12.0)
        h.simulator.jump_to_minute(50)
        h.clock.advance(6.0)
        h.simulator.skip_to_end()
        assert h.simulator.current_match.is_completed
        kinds = {e.metadata["kind"] for e in h.received}
        assert kinds == {"event", "tick"}
        for envelope in h.received:
            assert_consistent(envelope.match)

    def test_over_many_seeds(self) -> None:
        for seed in range(1, 11):
            h = Harness(seed=seed)
            h.simulator.start_match(make_match(f"seed-{seed}"))
            h.simulator.jump_to_minute(30)
            h.simulator.skip_to_end()
            for envelope in h.received:
                assert_consistent(envelope.match)
