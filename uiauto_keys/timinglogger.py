# uiauto_keys/timinglogger.py
"""
@file timinglogger.py
@brief Records of polls and gesture repeats, for tuning TimeConfig.

Each finished wait or repeat produces one PollRecord. When enabled, the
logger keeps the most recent records in memory and writes one line per
record to the stdlib logger, the console and an optional file:

    [timeout] [timing] 12:00:03 wait on text of 'Listing.status' attempts=41 elapsed=4.003s timeout=4
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger("uiauto_keys.timing")


@dataclass(frozen=True)
class PollRecord:
    """Outcome of one wait or gesture repeat."""
    event: str
    target: str
    status: str
    attempts: int
    elapsed: float
    details: Dict[str, Any] = field(default_factory=dict)
    at: float = field(default_factory=time.time)

    def format(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.at))
        parts = [
            f"[{self.status}]",
            "[timing]",
            stamp,
            f"{self.event} on {self.target}",
            f"attempts={self.attempts}",
            f"elapsed={self.elapsed:.3f}s",
        ]
        parts.extend(f"{k}={v}" for k, v in self.details.items())
        return " ".join(parts)


class TimingLogger:
    """Thread-safe sink for PollRecords. Disabled until enable() is called."""

    def __init__(self, history: int = 200) -> None:
        self._lock = threading.Lock()
        self._enabled = False
        self._console = False
        self._file_path: Optional[str] = None
        self._records: Deque[PollRecord] = deque(maxlen=history)

    def configure(
        self,
        *,
        console: bool = False,
        file_path: Optional[str] = None,
        history: Optional[int] = None,
    ) -> None:
        """
        @param console Also print each line to stdout
        @param file_path Append each line to this file
        @param history Number of records kept in memory
        """
        with self._lock:
            self._console = bool(console)
            self._file_path = file_path
            if history is not None:
                self._records = deque(self._records, maxlen=history)

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def record(
        self,
        event: str,
        target: str,
        status: str,
        attempts: int,
        elapsed: float,
        **details: Any,
    ) -> Optional[PollRecord]:
        """Store and emit one record; returns None while disabled."""
        if not self._enabled:
            return None
        entry = PollRecord(event, target, status, attempts, round(elapsed, 3), details)
        line = entry.format()
        with self._lock:
            self._records.append(entry)
            console, file_path = self._console, self._file_path
        logger.debug(line)
        if console:
            print(line, flush=True)
        if file_path:
            self._append(file_path, line)
        return entry

    def recent(self, status: Optional[str] = None) -> List[PollRecord]:
        """Kept records, oldest first, optionally only one status."""
        with self._lock:
            records = list(self._records)
        if status is None:
            return records
        return [r for r in records if r.status == status]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _append(self, file_path: str, line: str) -> None:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            logger.warning("could not write timing log %s: %s", file_path, e)


TIMING_LOGGER = TimingLogger()
