"""Pydantic models shared across the summary pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_VIDEO_EXTENSIONS = ["mp4", "mov", "avi", "mkv"]


class ExtractionMode(str, Enum):
    """How frames are pulled out of a source video."""

    OPENCV = "opencv"
    FFMPEG = "ffmpeg"


class CreationMode(str, Enum):
    """How sampled frames become the summary video."""

    DIRECT = "direct"
    TEMP_FRAMES = "temp_frames"


class FanOutMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class DecoderBackend(str, Enum):
    """OpenCV capture API used to open source videos."""

    ANY = "any"
    FFMPEG = "ffmpeg"
    GSTREAMER = "gstreamer"
    MSMF = "msmf"
    AVFOUNDATION = "avfoundation"


class SummaryConfig(BaseModel):
    """Top-level batch configuration loaded from a YAML/JSON file.

    Shared read-only by every worker, hence frozen.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    input_directories: list[Path] = Field(..., min_length=1, description="Directories to scan for videos")
    output_directory: Path = Field(..., description="Where summaries and staging dirs are written")
    output_prefix: str = Field(..., min_length=1, description="Prefix of every output filename")
    output_fps: int = Field(..., gt=0, description="Frame rate of the summary videos")
    frame_interval: int = Field(..., ge=1, description="Frame-index stride between samples")
    extraction_mode: ExtractionMode = Field(ExtractionMode.OPENCV, description="opencv|ffmpeg")
    video_creation_mode: CreationMode = Field(CreationMode.TEMP_FRAMES, description="direct|temp_frames")
    processing_mode: FanOutMode = Field(FanOutMode.PARALLEL, description="sequential|parallel")
    num_threads: int | None = Field(None, ge=1, description="Worker pool size (None = CPU count)")
    ffmpeg_binary: str = Field("ffmpeg", description="External transcoder executable")
    writer_fourcc: str = Field("mp4v", min_length=4, max_length=4, description="FourCC for direct writers")
    decoder_backend: DecoderBackend = Field(DecoderBackend.ANY, description="OpenCV capture backend")
    video_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS),
        description="File extensions treated as source videos",
    )

    @field_validator("video_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower().lstrip(".") for ext in value if ext.strip(".")]

    def output_path_for(self, directory_tag: str) -> Path:
        """Summary video path for one directory; unique per tag."""
        return self.output_directory / f"{self.output_prefix}_{directory_tag}.mp4"


def directory_tag(directory: str | Path) -> str:
    """Final path segment of an input directory, ``default`` when empty."""
    return Path(directory).name or "default"


class DirectoryJob(BaseModel):
    """One input directory's videos, processed end-to-end by a single worker."""

    directory_path: Path
    directory_tag: str
    video_list: list[Path] = Field(default_factory=list)

    @field_validator("video_list")
    @classmethod
    def _sort_videos(cls, value: list[Path]) -> list[Path]:
        return sorted(value, key=str)

    @classmethod
    def from_directory(cls, directory: str | Path, videos: list[Path]) -> DirectoryJob:
        return cls(
            directory_path=Path(directory),
            directory_tag=directory_tag(directory),
            video_list=videos,
        )


@dataclass(frozen=True)
class SampledFrame:
    """A sampled frame; payload is an image array or a staged file path."""

    source_video_index: int
    frame_index: int
    payload: Any


class AssemblyResult(BaseModel):
    """Outcome of one directory job."""

    directory_tag: str
    strategy: str
    output_path: Path | None = Field(None, description="Summary video, None when nothing was written")
    frames_written: int = 0
    videos_used: int = 0
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)
