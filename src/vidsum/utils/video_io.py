"""OpenCV-backed frame decoder and output writer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import cv2
import numpy as np

from vidsum.core.contracts import DecoderBackend
from vidsum.core.errors import WriterError

logger = logging.getLogger(__name__)

_BACKENDS = {
    DecoderBackend.ANY: cv2.CAP_ANY,
    DecoderBackend.FFMPEG: cv2.CAP_FFMPEG,
    DecoderBackend.GSTREAMER: cv2.CAP_GSTREAMER,
    DecoderBackend.MSMF: cv2.CAP_MSMF,
    DecoderBackend.AVFOUNDATION: cv2.CAP_AVFOUNDATION,
}

# Opens a source video; must return an object with the cv2.VideoCapture API.
Decoder = Callable[[Path], Any]


def open_capture(video_path: Path, backend: DecoderBackend = DecoderBackend.ANY) -> cv2.VideoCapture:
    return cv2.VideoCapture(str(video_path), _BACKENDS[backend])


def make_decoder(backend: DecoderBackend) -> Decoder:
    """Decoder bound to one capture backend."""
    def _open(video_path: Path) -> cv2.VideoCapture:
        return open_capture(video_path, backend)

    return _open


def frame_count(cap) -> int:
    return max(0, int(cap.get(cv2.CAP_PROP_FRAME_COUNT)))


def frame_size(cap) -> tuple[int, int]:
    """(width, height) reported by the capture; zeros when unknown."""
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    return width, height


def image_size(image: np.ndarray) -> tuple[int, int]:
    h, w = image.shape[:2]
    return w, h


class OutputWriter:
    """Summary video writer whose resolution is fixed by the first open.

    Frames of any other size are skipped and counted, never fatal.
    """

    def __init__(self, path: Path, fps: float, fourcc: str = "mp4v"):
        self.path = Path(path)
        self.fps = fps
        self.fourcc = fourcc
        self.size: tuple[int, int] | None = None
        self.frames_written = 0
        self.frames_skipped = 0
        self._writer: cv2.VideoWriter | None = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    def open(self, size: tuple[int, int]) -> None:
        if self._writer is not None:
            raise WriterError(f"Writer for {self.path} is already open at {self.size}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        writer = cv2.VideoWriter(
            str(self.path),
            cv2.VideoWriter_fourcc(*self.fourcc),
            float(self.fps),
            size,
            True,
        )
        if not writer.isOpened():
            writer.release()
            self.discard()
            raise WriterError(f"Failed to open VideoWriter for {self.path} ({self.fourcc}, {size})")
        self._writer = writer
        self.size = size
        logger.info(f"Opened VideoWriter for {self.path} at {size[0]}x{size[1]}")

    def write(self, frame: np.ndarray) -> bool:
        """Write one frame. Returns False when it was skipped for its size."""
        if self._writer is None:
            raise WriterError(f"Writer for {self.path} is not open")
        if image_size(frame) != self.size:
            self.frames_skipped += 1
            logger.warning(
                f"Frame size {image_size(frame)} does not match writer size {self.size}, skipping"
            )
            return False
        try:
            self._writer.write(frame)
        except cv2.error as e:
            raise WriterError(f"Write to {self.path} failed: {e}") from e
        self.frames_written += 1
        return True

    def close(self) -> None:
        if self._writer is not None:
            self._writer.release()
            self._writer = None

    def discard(self) -> None:
        """Release and delete the partial output file."""
        self.close()
        if self.path.exists():
            logger.info(f"Removing partial output {self.path}")
            self.path.unlink()

    def finish(self) -> Path | None:
        """Close the writer; keep the file only if at least one frame landed."""
        if self.frames_written == 0:
            self.discard()
            return None
        self.close()
        return self.path
