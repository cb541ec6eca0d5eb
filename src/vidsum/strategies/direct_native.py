"""Direct assembly: sample with OpenCV and stream straight into the writer.

No staging directory is used, so memory stays bounded to one frame. The
output resolution is locked to the first video that reports a usable
frame size; frames of any other size are dropped with a warning.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsum.core.contracts import AssemblyResult, DirectoryJob, SummaryConfig
from vidsum.core.strategy_base import BaseAssembly
from vidsum.core.temp_registry import TempResourceRegistry
from vidsum.utils.video_io import OutputWriter, frame_size
from .extraction import NativeSample

logger = logging.getLogger(__name__)


class DirectNativeAssembly(BaseAssembly):
    name: ClassVar[str] = "direct_native"

    def __init__(self, config: SummaryConfig, registry: TempResourceRegistry, extractor: NativeSample):
        super().__init__(config, registry)
        self.extractor = extractor

    def run(self, job: DirectoryJob) -> AssemblyResult:
        writer = OutputWriter(self.output_path(job), self.config.output_fps, self.config.writer_fourcc)
        videos_used = 0

        try:
            for video_index, video_path in enumerate(job.video_list):
                logger.info(f"  Video {video_index + 1}/{len(job.video_list)}: {video_path}")
                cap = self.extractor.open(video_path)
                if cap is None:
                    continue
                try:
                    if not writer.is_open:
                        width, height = frame_size(cap)
                        if width <= 0 or height <= 0:
                            logger.warning(f"No valid frame size from {video_path}, trying next video")
                            continue
                        logger.info(f"Output frame size {width}x{height} taken from {video_path}")
                        writer.open((width, height))

                    for frame in self.extractor.sample(cap, video_index, video_path):
                        writer.write(frame.payload)
                    videos_used += 1
                finally:
                    cap.release()
        except BaseException:
            writer.discard()
            raise

        if not writer.is_open:
            logger.info(f"Writer never opened for {job.directory_path}; no output created")
        output = writer.finish()
        if output is None:
            logger.info(f"No frames written for {job.directory_path}; no output kept")

        return self.result(
            job,
            output_path=output,
            frames_written=writer.frames_written,
            videos_used=videos_used,
            params={"frames_skipped": writer.frames_skipped, "interval": self.extractor.interval},
        )
