"""Batch orchestrator: loads the config, fans jobs out, sweeps staging dirs."""

from __future__ import annotations

import concurrent.futures
import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .contracts import AssemblyResult, FanOutMode, SummaryConfig
from .errors import ConfigurationError
from .job import DirectoryJobRunner
from .scanner import build_jobs, scan_directories
from .stats import ProcessingStats
from .temp_registry import TempResourceRegistry

logger = logging.getLogger(__name__)


def load_config(config_path: Path) -> SummaryConfig:
    """Load and validate a YAML (or JSON) summary config."""
    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Unable to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Unable to parse config file {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    try:
        return SummaryConfig(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}:\n{e}") from e


def resolve_num_threads(config: SummaryConfig) -> int:
    return config.num_threads or os.cpu_count() or 1


def run_summaries(
    config: SummaryConfig,
    stats: ProcessingStats | None = None,
    registry: TempResourceRegistry | None = None,
    decoder=None,
) -> ProcessingStats:
    """Process every configured directory into its summary video."""
    stats = stats or ProcessingStats()
    registry = registry if registry is not None else TempResourceRegistry()

    jobs = build_jobs(scan_directories(config.input_directories, config.video_extensions))
    logger.info(f"Scheduling {len(jobs)} directory jobs ({config.processing_mode.value})")
    results: list[AssemblyResult] = []

    try:
        runner = DirectoryJobRunner(config, registry, stats, decoder)
        if config.processing_mode is FanOutMode.SEQUENTIAL:
            for job in jobs:
                result = runner.run(job)
                if result is not None:
                    results.append(result)
        else:
            num_threads = resolve_num_threads(config)
            logger.info(f"Running in parallel mode with {num_threads} workers")
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=num_threads, thread_name_prefix="vidsum"
            ) as executor:
                future_map = {executor.submit(runner.run, job): job for job in jobs}
                for future in concurrent.futures.as_completed(future_map):
                    result = future.result()
                    if result is not None:
                        results.append(result)
    finally:
        swept = registry.sweep()
        if swept:
            logger.info(f"Swept {swept} staging directories")
        stats.finalize()

    for result in sorted(results, key=lambda r: r.directory_tag):
        logger.info(f"Summary '{result.directory_tag}': {result.frames_written} frames -> {result.output_path}")
    logger.info(f"Total execution time: {stats.processing_time:.1f}s")
    return stats


def run_from_config_file(config_path: Path) -> ProcessingStats:
    """Execute the batch from a config file."""
    config = load_config(config_path)
    return run_summaries(config)
