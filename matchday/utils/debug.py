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
"""Structured logging utilities used to trace match simulations."""
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, List, Optional, TextIO, Tuple


class MatchDebugger:
    """Thread-safe match log kept in memory and optionally mirrored to disk.

    Parameters
    ----------
    output_dir : Optional[str], default=None
        Directory where session logs are created; created automatically when
        missing. ``None`` keeps the log in memory only.
    max_recent : int, default=200
        Number of entries retained for :meth:`get_recent_events`.
    """

    def __init__(self, output_dir: Optional[str] = None, max_recent: int = 200) -> None:
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=max_recent)
        if self.output_dir is not None:
            self.start_new_session()

    def start_new_session(self) -> None:
        """Open a fresh log file in the output directory.

        Raises
        ------
        RuntimeError
            If the debugger has no output directory.
        """
        if self.output_dir is None:
            raise RuntimeError("MatchDebugger was created without an output directory")
        if self.log_file:
            self.log_file.close()

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = self.output_dir / f"match_debug_{self.session_start}.txt"
        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== Match Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_match_event(self, minute: int, event_type: str, description: str) -> None:
        """Log a match event (goal, card, commentary tick, ...).

        Parameters
        ----------
        minute : int
            Match minute the event belongs to.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("MATCH_EVENT", f"Minute: {minute} | Event: {event_type} | Details: {description}")

    def log_control(self, command: str, details: str = "") -> None:
        """Log a control command issued to a running simulation.

        Parameters
        ----------
        command : str
            Control name, for example ``"pause"`` or ``"set_speed"``.
        details : str
            Arguments or outcome of the command.
        """
        suffix = f" | Details: {details}" if details else ""
        self._write_log("CONTROL", f"Command: {command}{suffix}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Record a log entry and mirror it to the session file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:] if limit > 0 else []
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file; in-memory entries stay readable."""
        with self._lock:
            if self.log_file:
                self.log_file.close()
                self.log_file = None
