"""Direct assembly from ffmpeg-extracted frames.

ffmpeg samples every video into a transient staging directory; the images
are then read back in frame order and written through one OpenCV writer.
The staging directory is removed as soon as this job is done with it.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar

import cv2

from vidsum.core.contracts import AssemblyResult, DirectoryJob, SummaryConfig
from vidsum.core.ordering import list_staged_frames
from vidsum.core.strategy_base import BaseAssembly
from vidsum.core.temp_registry import RemovalPolicy, TempResourceRegistry
from vidsum.utils.video_io import OutputWriter, image_size
from .extraction import ExternalSample

logger = logging.getLogger(__name__)


class DirectExternalAssembly(BaseAssembly):
    name: ClassVar[str] = "direct_external"

    def __init__(self, config: SummaryConfig, registry: TempResourceRegistry, extractor: ExternalSample):
        super().__init__(config, registry)
        self.extractor = extractor

    def staging_dir(self, job: DirectoryJob) -> Path:
        dir_name = (
            f"{self.config.output_prefix}_{job.directory_tag}"
            f"_ffmpeg_direct_temp_{threading.get_ident()}"
        )
        return self.config.output_directory / dir_name

    def run(self, job: DirectoryJob) -> AssemblyResult:
        handle = self.registry.create(self.staging_dir(job), RemovalPolicy.LOCAL)
        try:
            for video_index, video_path in enumerate(job.video_list):
                logger.info(f"  Extracting via ffmpeg {video_index + 1}/{len(job.video_list)}: {video_path}")
                self.extractor.extract(video_path, video_index, handle.path)
            return self._write_frames(job, list_staged_frames(handle.path))
        finally:
            self.registry.remove_now(handle)

    def _write_frames(self, job: DirectoryJob, frames: list[Path]) -> AssemblyResult:
        if not frames:
            logger.info(f"No frames extracted for {job.directory_path}; skipping video creation")
            return self.result(job)

        writer = OutputWriter(self.output_path(job), self.config.output_fps, self.config.writer_fourcc)
        try:
            for frame_path in frames:
                image = cv2.imread(str(frame_path), cv2.IMREAD_COLOR)
                if image is None or image.size == 0:
                    logger.warning(f"Failed to read frame image {frame_path}, skipping")
                    continue
                if not writer.is_open:
                    logger.info(f"Frame size {image_size(image)} taken from {frame_path.name}")
                    writer.open(image_size(image))
                writer.write(image)
        except BaseException:
            writer.discard()
            raise

        output = writer.finish()
        return self.result(
            job,
            output_path=output,
            frames_written=writer.frames_written,
            videos_used=len(job.video_list),
            params={"frames_staged": len(frames), "frames_skipped": writer.frames_skipped},
        )
