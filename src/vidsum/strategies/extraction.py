"""Frame extraction strategies: native OpenCV sampling and ffmpeg sampling."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Iterator

import cv2

from vidsum.core.contracts import DecoderBackend, ExtractionMode, SampledFrame, SummaryConfig
from vidsum.core.errors import ConfigurationError, ExtractionError
from vidsum.core.ordering import order_frames, staged_frame_name
from vidsum.utils.subprocess_utils import run_command
from vidsum.utils.video_io import Decoder, frame_count, make_decoder

logger = logging.getLogger(__name__)


class ExtractionStrategy(ABC):
    name: ClassVar[str] = ""

    def __init__(self, interval: int):
        self.interval = interval

    @abstractmethod
    def extract(self, video_path: Path, video_index: int, staging_dir: Path) -> list[Path]:
        """Stage sampled frames of one video; returns the files written."""
        ...


class NativeSample(ExtractionStrategy):
    """Seek-and-read sampling through the OpenCV decoder.

    Unopenable videos, failed seeks and empty frames are skipped with a
    warning; a failed read ends sampling of that video.
    """

    name: ClassVar[str] = "opencv"

    def __init__(self, interval: int, decoder: Decoder | None = None):
        if interval < 1:
            raise ConfigurationError(f"frame_interval must be >= 1, got {interval}")
        super().__init__(interval)
        self.decoder = decoder or make_decoder(DecoderBackend.ANY)

    def open(self, video_path: Path):
        """Open ``video_path``; None (after a warning) if the decoder refuses it."""
        try:
            cap = self.decoder(video_path)
        except cv2.error as e:
            logger.warning(f"Failed to create capture for {video_path}, skipping: {e}")
            return None
        if not cap.isOpened():
            logger.warning(f"Failed to open video {video_path}, skipping")
            cap.release()
            return None
        return cap

    def sample(self, cap, video_index: int, video_path: Path) -> Iterator[SampledFrame]:
        total = frame_count(cap)
        for frame_index in range(0, total, self.interval):
            if not cap.set(cv2.CAP_PROP_POS_FRAMES, frame_index):
                logger.warning(f"Failed to seek to frame {frame_index} in {video_path}, skipping frame")
                continue
            ok, frame = cap.read()
            if not ok:
                logger.info(f"Finished reading frames or hit a read error in {video_path}")
                break
            if frame is None or frame.size == 0:
                logger.warning(f"Read empty frame at index {frame_index} from {video_path}, skipping frame")
                continue
            yield SampledFrame(video_index, frame_index, frame)

    def extract(self, video_path: Path, video_index: int, staging_dir: Path) -> list[Path]:
        cap = self.open(video_path)
        if cap is None:
            return []

        written: list[Path] = []
        try:
            for frame in self.sample(cap, video_index, video_path):
                out = staging_dir / staged_frame_name(frame.source_video_index, frame.frame_index)
                if not cv2.imwrite(str(out), frame.payload):
                    raise ExtractionError(f"Failed to write staged frame {out}")
                written.append(out)
        finally:
            cap.release()

        logger.info(f"Staged {len(written)} frames from {video_path}")
        return written


class ExternalSample(ExtractionStrategy):
    """Sampling by one ffmpeg ``select`` invocation per video.

    Any non-zero ffmpeg exit raises ``TranscoderError``; callers treat that
    as fatal for the whole directory.
    """

    name: ClassVar[str] = "ffmpeg"

    def __init__(self, interval: int, ffmpeg_binary: str = "ffmpeg"):
        super().__init__(interval)
        self.ffmpeg_binary = ffmpeg_binary

    def build_command(self, video_path: Path, video_index: int, staging_dir: Path) -> list[str]:
        pattern = staging_dir / f"video{video_index}_frame%06d.jpg"
        return [
            self.ffmpeg_binary,
            "-i", str(video_path),
            "-vf", f"select=not(mod(n\\,{self.interval}))",
            "-vsync", "vfr",
            "-q:v", "2",
            str(pattern),
            "-hide_banner",
            "-loglevel", "warning",
        ]

    def extract(self, video_path: Path, video_index: int, staging_dir: Path) -> list[Path]:
        if self.interval < 1:
            raise ConfigurationError(
                f"frame_interval must be greater than 0 for ffmpeg extraction, got {self.interval}"
            )
        staging_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Running ffmpeg frame extraction for video {video_index}: {video_path}")
        run_command(self.build_command(video_path, video_index, staging_dir))

        written = order_frames(list(staging_dir.glob(f"video{video_index}_frame*.jpg")))
        logger.info(f"Extracted {len(written)} frames with ffmpeg from {video_path}")
        return written


def build_extractor(config: SummaryConfig, decoder: Decoder | None = None) -> ExtractionStrategy:
    if config.extraction_mode is ExtractionMode.FFMPEG:
        return ExternalSample(config.frame_interval, config.ffmpeg_binary)
    return NativeSample(config.frame_interval, decoder or make_decoder(config.decoder_backend))
