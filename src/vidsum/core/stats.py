"""Run-level processing statistics, updated from worker threads."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field


@dataclass
class ProcessingStats:
    """Counters per directory job; ``frames_written`` sums over all outputs."""

    directories_processed: int = 0
    directories_failed: int = 0
    frames_written: int = 0
    errors: list[str] = field(default_factory=list)
    processing_time: float = 0.0
    start_time: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_processed(self, frames_written: int = 0) -> None:
        with self._lock:
            self.directories_processed += 1
            self.frames_written += frames_written

    def add_failed(self, error: str) -> None:
        with self._lock:
            self.directories_failed += 1
            self.errors.append(error)

    def finalize(self) -> None:
        """Freeze elapsed time; call once after the scheduler drains."""
        with self._lock:
            self.processing_time = time.monotonic() - self.start_time

    def success_rate(self) -> float:
        """Percentage of attempted directories that produced no error."""
        total = self.directories_processed + self.directories_failed
        if total == 0:
            return 0.0
        return self.directories_processed / total * 100.0
