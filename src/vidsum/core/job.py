"""Directory job runner: strategy resolution and failure isolation."""

from __future__ import annotations

import logging
from enum import Enum

from .contracts import AssemblyResult, CreationMode, DirectoryJob, ExtractionMode, SummaryConfig
from .stats import ProcessingStats
from .strategy_base import BaseAssembly
from .temp_registry import TempResourceRegistry

logger = logging.getLogger(__name__)


class StrategyKind(str, Enum):
    DIRECT_NATIVE = "direct_native"
    DIRECT_EXTERNAL = "direct_external"
    STAGED_CONCAT = "staged_concat"


def resolve_strategy_kind(config: SummaryConfig) -> StrategyKind:
    """Map (extraction mode, creation mode) to an assembly strategy."""
    if config.video_creation_mode is CreationMode.DIRECT:
        if config.extraction_mode is ExtractionMode.OPENCV:
            return StrategyKind.DIRECT_NATIVE
        return StrategyKind.DIRECT_EXTERNAL
    return StrategyKind.STAGED_CONCAT


def build_assembly(config: SummaryConfig, registry: TempResourceRegistry, decoder=None) -> BaseAssembly:
    from vidsum.strategies.direct_external import DirectExternalAssembly
    from vidsum.strategies.direct_native import DirectNativeAssembly
    from vidsum.strategies.extraction import ExternalSample, build_extractor
    from vidsum.strategies.staged_concat import StagedConcatAssembly

    kind = resolve_strategy_kind(config)
    if kind is StrategyKind.DIRECT_EXTERNAL:
        extractor = ExternalSample(config.frame_interval, config.ffmpeg_binary)
        return DirectExternalAssembly(config, registry, extractor)

    extractor = build_extractor(config, decoder)
    if kind is StrategyKind.DIRECT_NATIVE:
        return DirectNativeAssembly(config, registry, extractor)
    return StagedConcatAssembly(config, registry, extractor)


class DirectoryJobRunner:
    """Runs directory jobs with one strategy resolved up front.

    Any error raised by a job is logged and recorded in the stats; it never
    reaches the scheduler, so other directories carry on.
    """

    def __init__(
        self,
        config: SummaryConfig,
        registry: TempResourceRegistry,
        stats: ProcessingStats,
        decoder=None,
    ):
        self.config = config
        self.registry = registry
        self.stats = stats
        self.assembly = build_assembly(config, registry, decoder)
        logger.info(
            f"Processing with: extraction={config.extraction_mode.value}, "
            f"creation={config.video_creation_mode.value}, strategy={self.assembly.name}"
        )

    def run(self, job: DirectoryJob) -> AssemblyResult | None:
        try:
            result = self.assembly.execute(job)
        except Exception as e:
            logger.exception(f"Error processing directory {job.directory_path}: {e}")
            self.stats.add_failed(f"Directory {job.directory_path}: {e}")
            return None
        self.stats.add_processed(result.frames_written)
        return result
