"""Thread-safe bookkeeping of staging directories.

Every staging directory created by a worker is registered here the moment
it exists. A handle leaves the registry exactly once: either through
``remove_now`` (transient staging, removed by its owning job) or through
the final ``sweep`` run after all jobs have finished.
"""

from __future__ import annotations

import logging
import shutil
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class RemovalPolicy(str, Enum):
    LOCAL = "local"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class TempDirectoryHandle:
    path: Path
    policy: RemovalPolicy = RemovalPolicy.DEFERRED


class TempResourceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: list[TempDirectoryHandle] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def pending(self) -> list[TempDirectoryHandle]:
        with self._lock:
            return list(self._handles)

    def register(self, handle: TempDirectoryHandle) -> TempDirectoryHandle:
        with self._lock:
            self._handles.append(handle)
        return handle

    def create(self, path: Path, policy: RemovalPolicy) -> TempDirectoryHandle:
        """Create ``path`` empty and register it for removal.

        A directory left at ``path`` by an interrupted earlier run is deleted
        first so its frames never leak into this run.
        """
        if path.exists():
            logger.warning(f"Removing stale staging directory: {path}")
            shutil.rmtree(path)
        path.mkdir(parents=True)
        handle = self.register(TempDirectoryHandle(path=path, policy=policy))
        logger.info(f"Created {policy.value} staging directory: {path}")
        return handle

    def remove_now(self, handle: TempDirectoryHandle) -> bool:
        """Unregister and delete ``handle``. Returns False if it was already gone."""
        with self._lock:
            if handle not in self._handles:
                return False
            self._handles.remove(handle)
        logger.info(f"Removing staging directory: {handle.path}")
        _remove_tree(handle.path)
        return True

    def sweep(self) -> int:
        """Delete every handle still registered. Returns how many were taken."""
        with self._lock:
            remaining, self._handles = self._handles, []
        for handle in remaining:
            logger.info(f"Cleaning up staging directory: {handle.path}")
            _remove_tree(handle.path)
        return len(remaining)


def _remove_tree(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        logger.debug(f"Staging directory already gone: {path}")
    except OSError as e:
        logger.warning(f"Failed to remove staging directory {path}: {e}")
