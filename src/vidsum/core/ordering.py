"""Deterministic ordering of staged frame files.

Staged frames are named ``video<N>_frame<M>.jpg``. Sorting by the parsed
``(N, M)`` pair keeps every frame of a lower-indexed source video ahead of
the next video, and frames of one video in capture order.
"""

from __future__ import annotations

import functools
import re
from pathlib import Path

_FRAME_NAME = re.compile(r"^video(\d+)_frame(\d+)$")


def staged_frame_name(video_index: int, frame_index: int, ext: str = "jpg") -> str:
    """Filename used by the native extractor (fixed-width, sorts lexically too)."""
    return f"video{video_index:03d}_frame{frame_index:07d}.{ext}"


def parse_frame_filename(name: str | Path) -> tuple[int, int] | None:
    """Recover ``(video_index, frame_index)`` from a staged frame name."""
    match = _FRAME_NAME.match(Path(name).stem)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def compare_frame_names(a: str | Path, b: str | Path) -> int:
    """Three-way comparison; unparsable names sort after parsable ones."""
    key_a = parse_frame_filename(a)
    key_b = parse_frame_filename(b)
    if key_a is not None and key_b is not None:
        return (key_a > key_b) - (key_a < key_b)
    if key_a is not None:
        return -1
    if key_b is not None:
        return 1
    return 0


frame_sort_key = functools.cmp_to_key(compare_frame_names)


def order_frames(paths: list[Path]) -> list[Path]:
    """Sort staged frames; unparsable names keep path order at the end."""
    return sorted(sorted(paths), key=frame_sort_key)


def list_staged_frames(staging_dir: Path, ext: str = "jpg") -> list[Path]:
    """Ordered list of frame images inside a staging directory."""
    frames = [
        p for p in staging_dir.iterdir()
        if p.is_file() and p.suffix.lower() == f".{ext}"
    ]
    return order_frames(frames)
