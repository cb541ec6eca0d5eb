"""vidsum core: contracts, scanning, ordering, staging registry, stats."""

from .contracts import (
    AssemblyResult,
    CreationMode,
    DirectoryJob,
    ExtractionMode,
    FanOutMode,
    SampledFrame,
    SummaryConfig,
)
from .errors import ConfigurationError, ExtractionError, TranscoderError, VidsumError, WriterError
from .logging import setup_logging
from .ordering import order_frames, parse_frame_filename
from .scanner import build_jobs, scan_directories
from .stats import ProcessingStats
from .temp_registry import RemovalPolicy, TempDirectoryHandle, TempResourceRegistry

__all__ = [
    "AssemblyResult",
    "CreationMode",
    "DirectoryJob",
    "ExtractionMode",
    "FanOutMode",
    "SampledFrame",
    "SummaryConfig",
    "ConfigurationError",
    "ExtractionError",
    "TranscoderError",
    "VidsumError",
    "WriterError",
    "setup_logging",
    "order_frames",
    "parse_frame_filename",
    "build_jobs",
    "scan_directories",
    "ProcessingStats",
    "RemovalPolicy",
    "TempDirectoryHandle",
    "TempResourceRegistry",
]
