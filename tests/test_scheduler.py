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
"""Tests for the virtual and threaded tick schedulers."""

import threading
import time

import pytest

from matchday.engine.scheduler import ThreadingScheduler, VirtualClock


class TestVirtualClock:
    """Tests for VirtualClock."""

    def test_calls_fire_in_due_order(self) -> None:
        clock = VirtualClock()
        fired = []
        clock.call_later(2.0, lambda: fired.append("late"))
        clock.call_later(1.0, lambda: fired.append("early"))
        clock.call_later(1.0, lambda: fired.append("tie"))
        assert clock.pending == 3
        assert clock.advance(1.5) == 2
        assert fired == ["early", "tie"]
        assert clock.now() == 1.5
        clock.advance(1.0)
        assert fired == ["early", "tie", "late"]
        assert clock.pending == 0

    def test_cancelled_call_never_runs(self) -> None:
        clock = VirtualClock()
        fired = []
        call = clock.call_later(1.0, lambda: fired.append(1))
        call.cancel()
        call.cancel()
        assert call.cancelled
        assert clock.pending == 0
        assert clock.advance(5.0) == 0
        assert fired == []

    def test_chained_calls_run_within_window(self) -> None:
        """A callback that reschedules itself keeps firing inside one advance."""
        clock = VirtualClock()
        fired = []

        def tick() -> None:
            fired.append(clock.now())
            clock.call_later(1.0, tick)

        clock.call_later(1.0, tick)
        assert clock.advance(3.0) == 3
        assert fired == [1.0, 2.0, 3.0]
        assert clock.pending == 1

    def test_negative_delay_runs_immediately(self) -> None:
        clock = VirtualClock(start=10.0)
        fired = []
        clock.call_later(-5.0, lambda: fired.append(clock.now()))
        clock.advance(0.0)
        assert fired == [10.0]

    def test_cannot_go_backwards(self) -> None:
        with pytest.raises(ValueError):
            VirtualClock().advance(-1.0)


class TestThreadingScheduler:
    """Tests for ThreadingScheduler."""

    def test_callback_runs_on_timer_thread(self) -> None:
        done = threading.Event()
        threads = []

        def callback() -> None:
            threads.append(threading.current_thread())
            done.set()

        ThreadingScheduler().call_later(0.01, callback)
        assert done.wait(2.0)
        assert threads[0] is not threading.main_thread()
        assert threads[0].daemon

    def test_cancel_stops_timer(self) -> None:
        fired = threading.Event()
        call = ThreadingScheduler().call_later(0.2, fired.set)
        call.cancel()
        time.sleep(0.3)
        assert not fired.is_set()

    def test_now_is_monotonic(self) -> None:
        scheduler = ThreadingScheduler()
        first = scheduler.now()
        assert scheduler.now() >= first
