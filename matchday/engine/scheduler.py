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
"""Delayed-callback schedulers driving the streaming simulator.

The streaming simulator never sleeps; it asks a :class:`TickScheduler` to call
it back after the current tick interval. :class:`ThreadingScheduler` does so on
daemon timer threads, while :class:`VirtualClock` only fires callbacks when a
test advances it explicitly.
"""

from __future__ import annotations

import heapq
import threading
import time
from typing import Callable, List, Optional, Tuple


class ScheduledCall:
    """Handle for a pending callback.

    Parameters
    ----------
    callback : Callable[[], None]
        Function to invoke when the call comes due.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cancelled = False
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` has been called."""
        return self._cancelled

    def cancel(self) -> None:
        """Prevent the callback from running; safe to call repeatedly."""
        with self._lock:
            self._cancelled = True

    def run(self) -> None:
        """Invoke the callback unless the call was cancelled."""
        with self._lock:
            if self._cancelled:
                return
        self._callback()


class TickScheduler:
    """Interface for schedulers that run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Schedule ``callback`` to run once after ``delay`` seconds.

        Parameters
        ----------
        delay : float
            Seconds to wait; negative values are treated as zero.
        callback : Callable[[], None]
            Function to invoke.

        Returns
        -------
        ScheduledCall
            Handle that can cancel the pending call.
        """
        raise NotImplementedError

    def now(self) -> float:
        """Current time on the scheduler's clock.

        Returns
        -------
        float
            Seconds on a monotonic clock.
        """
        raise NotImplementedError


class ThreadingScheduler(TickScheduler):
    """Run callbacks on daemon :class:`threading.Timer` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Start a daemon timer for ``callback``.

        Parameters
        ----------
        delay : float
            Seconds to wait.
        callback : Callable[[], None]
            Function to invoke on the timer thread.

        Returns
        -------
        ScheduledCall
            Handle whose :meth:`~ScheduledCall.cancel` also stops the timer.
        """
        call = _TimerCall(callback)
        timer = threading.Timer(max(0.0, delay), call.run)
        timer.daemon = True
        call.timer = timer
        timer.start()
        return call

    def now(self) -> float:
        """Monotonic wall-clock time.

        Returns
        -------
        float
            :func:`time.monotonic` reading.
        """
        return time.monotonic()


class _TimerCall(ScheduledCall):
    """Scheduled call backed by a running timer thread.

    Parameters
    ----------
    callback : Callable[[], None]
        Function to invoke when the timer fires.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        super().__init__(callback)
        self.timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        """Cancel the call and stop the timer thread."""
        super().cancel()
        if self.timer is not None:
            self.timer.cancel()


class VirtualClock(TickScheduler):
    """Manually advanced clock for deterministic, delay-free tests.

    Parameters
    ----------
    start : float, default=0.0
        Initial clock reading.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._sequence = 0
        self._queue: List[Tuple[float, int, ScheduledCall]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Queue ``callback`` for ``now() + delay``.

        Parameters
        ----------
        delay : float
            Seconds of virtual time to wait.
        callback : Callable[[], None]
            Function to invoke when the clock reaches the due time.

        Returns
        -------
        ScheduledCall
            Handle that can cancel the queued call.
        """
        call = ScheduledCall(callback)
        heapq.heappush(self._queue, (self._now + max(0.0, delay), self._sequence, call))
        self._sequence += 1
        return call

    def now(self) -> float:
        """Current virtual time.

        Returns
        -------
        float
            Seconds advanced so far.
        """
        return self._now

    @property
    def pending(self) -> int:
        """Number of queued calls that have not been cancelled."""
        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every call that comes due.

        Calls scheduled by a firing callback run in the same advance when their
        due time falls inside the window. Calls fire in due-time order, ties in
        scheduling order.

        Parameters
        ----------
        seconds : float
            Virtual seconds to advance; must not be negative.

        Returns
        -------
        int
            Number of callbacks that ran.

        Raises
        ------
        ValueError
            If ``seconds`` is negative.
        """
        if seconds < 0:
            raise ValueError("cannot advance the clock backwards")
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if call.cancelled:
                continue
            call.run()
            fired += 1
        self._now = target
        return fired
