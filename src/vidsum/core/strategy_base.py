"""Base class for assembly strategies.

An assembly strategy turns one ``DirectoryJob`` into one summary video.
Strategies are built once per job runner from the configuration and then
reused for every directory that runner sees.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import ClassVar

from .contracts import AssemblyResult, DirectoryJob, SummaryConfig
from .temp_registry import TempResourceRegistry

logger = logging.getLogger(__name__)


class BaseAssembly(ABC):
    """Abstract base for assembly strategies.

    Subclasses must:
    1. Set ``name``
    2. Implement run() and validate_job()

    Example:
        class DirectNativeAssembly(BaseAssembly):
            name = "direct_native"

            def run(self, job: DirectoryJob) -> AssemblyResult: ...
            def validate_job(self, job: DirectoryJob) -> bool: ...
    """

    name: ClassVar[str] = ""

    def __init__(self, config: SummaryConfig, registry: TempResourceRegistry):
        self.config = config
        self.registry = registry

    @abstractmethod
    def run(self, job: DirectoryJob) -> AssemblyResult:
        """Produce the summary video for ``job``."""
        ...

    def validate_job(self, job: DirectoryJob) -> bool:
        """Check that the job has something to process."""
        if not job.video_list:
            logger.error(f"No videos in job for {job.directory_path}")
            return False
        return True

    def execute(self, job: DirectoryJob) -> AssemblyResult:
        """Run with logging, timing, and validation."""
        strategy = self.name or self.__class__.__name__
        logger.info(
            f"[{strategy}] {threading.current_thread().name} processing {job.directory_path} "
            f"({len(job.video_list)} videos, tag: '{job.directory_tag}')"
        )

        if not self.validate_job(job):
            raise ValueError(f"[{strategy}] Job validation failed for {job.directory_path}")

        self.config.output_directory.mkdir(parents=True, exist_ok=True)
        t0 = time.time()
        result = self.run(job)
        result.elapsed_seconds = time.time() - t0
        logger.info(
            f"[{strategy}] Done '{job.directory_tag}' in {result.elapsed_seconds:.1f}s "
            f"({result.frames_written} frames -> {result.output_path})"
        )
        return result

    def output_path(self, job: DirectoryJob):
        return self.config.output_path_for(job.directory_tag)

    def result(self, job: DirectoryJob, **kwargs) -> AssemblyResult:
        return AssemblyResult(directory_tag=job.directory_tag, strategy=self.name, **kwargs)
