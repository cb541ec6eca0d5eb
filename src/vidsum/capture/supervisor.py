"""Supervisor for a long-running stream recorder process.

The recorder (ffmpeg writing rotating segment files) is restarted whenever
it exits. Restarts go through an explicit state machine:

    IDLE -> STARTING -> RUNNING -> BACKOFF -> STARTING -> ...
                 \\-> BACKOFF            (launch failed)
    any state -> STOPPED                 (stop requested / restart budget spent)

The wait before a restart stays at ``base_delay`` until
``escalate_after`` consecutive failures, then doubles up to ``max_delay``.
A run lasting at least ``sustained_run_seconds`` resets the failure count.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


class SupervisorState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"
    BACKOFF = "backoff"


_TRANSITIONS: dict[SupervisorState, set[SupervisorState]] = {
    SupervisorState.IDLE: {SupervisorState.STARTING, SupervisorState.STOPPED},
    SupervisorState.STARTING: {SupervisorState.RUNNING, SupervisorState.BACKOFF, SupervisorState.STOPPED},
    SupervisorState.RUNNING: {SupervisorState.BACKOFF, SupervisorState.STOPPED},
    SupervisorState.BACKOFF: {SupervisorState.STARTING, SupervisorState.STOPPED},
    SupervisorState.STOPPED: set(),
}


@dataclass(frozen=True)
class BackoffPolicy:
    base_delay: float = 1.0
    max_delay: float = 60.0
    escalate_after: int = 3
    sustained_run_seconds: float = 30.0

    def delay_for(self, consecutive_failures: int) -> float:
        if consecutive_failures < self.escalate_after:
            return self.base_delay
        exponent = consecutive_failures - self.escalate_after + 1
        return min(self.max_delay, self.base_delay * (2 ** exponent))


def build_segment_command(
    url: str,
    output_dir: Path,
    segment_seconds: int = 300,
    ffmpeg_binary: str = "ffmpeg",
) -> list[str]:
    """ffmpeg command recording ``url`` into time-stamped segment files."""
    cmd = [ffmpeg_binary, "-hide_banner", "-loglevel", "error"]
    if url.startswith("rtsp://"):
        cmd += ["-rtsp_transport", "tcp"]
    cmd += [
        "-i", url,
        "-c", "copy",
        "-f", "segment",
        "-segment_time", str(segment_seconds),
        "-reset_timestamps", "1",
        "-strftime", "1",
        str(Path(output_dir) / "capture_%Y%m%d_%H%M%S.mp4"),
    ]
    return cmd


class CaptureSupervisor:
    def __init__(
        self,
        launch: Callable[[], subprocess.Popen],
        policy: BackoffPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.launch = launch
        self.policy = policy or BackoffPolicy()
        self.clock = clock
        self.sleep = sleep
        self.state = SupervisorState.IDLE
        self.consecutive_failures = 0
        self.restarts = 0
        self.process: subprocess.Popen | None = None
        self._started_at = 0.0

    def _transition(self, new_state: SupervisorState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal supervisor transition {self.state.value} -> {new_state.value}")
        logger.debug(f"Supervisor {self.state.value} -> {new_state.value}")
        self.state = new_state

    def start(self) -> bool:
        """Launch the recorder. Returns True when it is running."""
        self._transition(SupervisorState.STARTING)
        try:
            self.process = self.launch()
        except OSError as e:
            logger.error(f"Failed to start recorder: {e}")
            self.process = None
            self.consecutive_failures += 1
            self._transition(SupervisorState.BACKOFF)
            return False
        self._started_at = self.clock()
        self._transition(SupervisorState.RUNNING)
        logger.info("Recorder started")
        return True

    def on_exit(self, returncode: int) -> None:
        """Record a recorder exit and move to BACKOFF."""
        run_seconds = self.clock() - self._started_at
        self.process = None
        if run_seconds >= self.policy.sustained_run_seconds:
            self.consecutive_failures = 0
        if returncode != 0 or run_seconds < self.policy.sustained_run_seconds:
            self.consecutive_failures += 1
        logger.warning(
            f"Recorder exited with status {returncode} after {run_seconds:.1f}s "
            f"({self.consecutive_failures} consecutive failures)"
        )
        self._transition(SupervisorState.BACKOFF)

    def next_delay(self) -> float:
        return self.policy.delay_for(self.consecutive_failures)

    def stop(self) -> None:
        if self.state is SupervisorState.STOPPED:
            return
        if self.process is not None and self.process.poll() is None:
            logger.info("Stopping recorder")
            self.process.terminate()
            self.process.wait()
        self.process = None
        self._transition(SupervisorState.STOPPED)

    def run(self, max_restarts: int | None = None) -> None:
        """Keep the recorder alive until stopped or the restart budget is spent."""
        try:
            while self.state is not SupervisorState.STOPPED:
                if self.start():
                    returncode = self.process.wait()
                    if self.state is SupervisorState.STOPPED:
                        break
                    self.on_exit(returncode)
                if max_restarts is not None and self.restarts >= max_restarts:
                    logger.info(f"Restart budget of {max_restarts} spent")
                    self.stop()
                    break
                delay = self.next_delay()
                logger.info(f"Restarting recorder in {delay:.1f}s")
                self.sleep(delay)
                self.restarts += 1
        except KeyboardInterrupt:
            logger.info("Interrupted")
            self.stop()
