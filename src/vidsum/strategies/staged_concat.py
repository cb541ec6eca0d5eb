"""Staged assembly: stage all sampled frames, then ffmpeg-concat them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from vidsum.core.contracts import AssemblyResult, DirectoryJob, SummaryConfig
from vidsum.core.ordering import list_staged_frames
from vidsum.core.strategy_base import BaseAssembly
from vidsum.core.temp_registry import RemovalPolicy, TempResourceRegistry
from vidsum.utils.subprocess_utils import run_command
from .extraction import ExtractionStrategy

logger = logging.getLogger(__name__)

LIST_FILE_NAME = "ffmpeg_list.txt"


def write_concat_list(frames: list[Path], list_file: Path) -> int:
    """Write an ffmpeg concat list, one ``file '<abs path>'`` line per frame."""
    count = 0
    with open(list_file, "w", encoding="utf-8", newline="\n") as f:
        for frame in frames:
            path_str = str(frame.resolve()).replace("\\", "/")
            f.write(f"file '{path_str}'\n")
            count += 1
    return count


def build_concat_command(ffmpeg_binary: str, list_file: Path, output_path: Path, fps: int) -> list[str]:
    return [
        ffmpeg_binary,
        "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", str(list_file),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-r", str(fps),
        str(output_path),
    ]


class StagedConcatAssembly(BaseAssembly):
    """Default strategy; works with either extraction strategy.

    The staging directory persists until the scheduler's final sweep.
    """

    name: ClassVar[str] = "staged_concat"

    def __init__(self, config: SummaryConfig, registry: TempResourceRegistry, extractor: ExtractionStrategy):
        super().__init__(config, registry)
        self.extractor = extractor

    def staging_dir(self, job: DirectoryJob) -> Path:
        return self.config.output_directory / f"{self.config.output_prefix}_{job.directory_tag}_temp"

    def run(self, job: DirectoryJob) -> AssemblyResult:
        handle = self.registry.create(self.staging_dir(job), RemovalPolicy.DEFERRED)

        for video_index, video_path in enumerate(job.video_list):
            logger.info(
                f"  Staging frames ({self.extractor.name}) {video_index + 1}/{len(job.video_list)}: {video_path}"
            )
            self.extractor.extract(video_path, video_index, handle.path)

        frames = list_staged_frames(handle.path)
        if not frames:
            logger.info(f"No frames staged in {handle.path}; no video will be created")
            return self.result(job)

        output_path = self.output_path(job)
        list_file = handle.path / LIST_FILE_NAME
        write_concat_list(frames, list_file)
        try:
            logger.info(f"Concatenating {len(frames)} frames into {output_path}")
            run_command(
                build_concat_command(self.config.ffmpeg_binary, list_file, output_path, self.config.output_fps)
            )
        except BaseException:
            if output_path.exists():
                logger.info(f"Removing partial output {output_path}")
                output_path.unlink()
            raise
        finally:
            list_file.unlink(missing_ok=True)

        return self.result(
            job,
            output_path=output_path,
            frames_written=len(frames),
            videos_used=len(job.video_list),
            params={"staging_dir": str(handle.path), "extraction": self.extractor.name},
        )
