"""Shared pytest fixtures for vidsum tests."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest

from vidsum.core.contracts import SummaryConfig


class FakeCapture:
    """Stand-in for cv2.VideoCapture with exact frame control."""

    def __init__(
        self,
        frames: list[np.ndarray],
        opened: bool = True,
        size: tuple[int, int] | None = None,
        fail_seek: tuple[int, ...] = (),
        empty_at: tuple[int, ...] = (),
        frame_count: int | None = None,
    ):
        self.frames = frames
        self.opened = opened
        if size is None:
            size = (frames[0].shape[1], frames[0].shape[0]) if frames else (0, 0)
        self.size = size
        self.fail_seek = set(fail_seek)
        self.empty_at = set(empty_at)
        self.frame_count = len(frames) if frame_count is None else frame_count
        self.pos = 0
        self.released = False

    def isOpened(self) -> bool:
        return self.opened

    def get(self, prop) -> float:
        if prop == cv2.CAP_PROP_FRAME_COUNT:
            return float(self.frame_count)
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return float(self.size[0])
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return float(self.size[1])
        return 0.0

    def set(self, prop, value) -> bool:
        index = int(value)
        if index in self.fail_seek:
            return False
        self.pos = index
        return True

    def read(self):
        if self.pos >= len(self.frames):
            return False, None
        index = self.pos
        self.pos += 1
        if index in self.empty_at:
            return True, np.empty((0, 0, 3), dtype=np.uint8)
        return True, self.frames[index]

    def release(self) -> None:
        self.released = True


def _make_frames(count: int, width: int = 64, height: int = 48) -> list[np.ndarray]:
    return [np.full((height, width, 3), (i * 7) % 255, dtype=np.uint8) for i in range(count)]


@pytest.fixture
def make_frames():
    """Factory: ``make_frames(count, width=64, height=48)``."""
    return _make_frames


@pytest.fixture
def fake_capture_cls():
    return FakeCapture


@pytest.fixture
def fake_decoder():
    """Factory building a decoder from ``{filename: FakeCapture kwargs}``.

    Every open returns a fresh capture; unknown files come back unopened.
    The returned decoder records every path it was asked to open.
    """

    def _factory(captures: dict[str, dict]):
        opened: list[Path] = []

        def _decoder(video_path: Path) -> FakeCapture:
            opened.append(Path(video_path))
            kwargs = captures.get(Path(video_path).name)
            if kwargs is None:
                return FakeCapture([], opened=False)
            return FakeCapture(**kwargs)

        _decoder.opened = opened
        return _decoder

    return _factory


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for a SummaryConfig rooted in ``tmp_path``."""

    def _factory(input_directories: list[Path] | None = None, **overrides) -> SummaryConfig:
        values = {
            "input_directories": input_directories or [tmp_path / "in"],
            "output_directory": tmp_path / "out",
            "output_prefix": "summary",
            "output_fps": 10,
            "frame_interval": 10,
        }
        values.update(overrides)
        return SummaryConfig(**values)

    return _factory


@pytest.fixture
def video_dirs(tmp_path: Path):
    """Factory creating ``{dir_name: [video names]}`` as empty placeholder files."""

    def _factory(layout: dict[str, list[str]]) -> list[Path]:
        dirs = []
        for dir_name, files in layout.items():
            directory = tmp_path / "in" / dir_name
            directory.mkdir(parents=True, exist_ok=True)
            for name in files:
                (directory / name).write_bytes(b"")
            dirs.append(directory)
        return dirs

    return _factory


def count_video_frames(video_path: Path) -> int:
    """Decode ``video_path`` to the end and count frames."""
    cap = cv2.VideoCapture(str(video_path))
    count = 0
    while True:
        ok, _ = cap.read()
        if not ok:
            break
        count += 1
    cap.release()
    return count


@pytest.fixture
def count_frames():
    return count_video_frames


def create_synthetic_video(
    video_path: Path,
    num_frames: int = 30,
    resolution: tuple[int, int] = (160, 120),
    fps: float = 30.0,
) -> Path:
    """Write a small mp4v video whose frames differ from each other."""
    video_path.parent.mkdir(parents=True, exist_ok=True)
    width, height = resolution
    writer = cv2.VideoWriter(str(video_path), cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height))
    for i in range(num_frames):
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)
        frame[:, :, 1] = (i * 8) % 255
        cv2.putText(frame, f"F:{i:03d}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        writer.write(frame)
    writer.release()
    return video_path


@pytest.fixture
def synthetic_video():
    """Factory: ``synthetic_video(path, num_frames=30, resolution=(160, 120))``."""
    return create_synthetic_video
