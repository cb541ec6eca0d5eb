"""Discover source videos in the configured input directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .contracts import DEFAULT_VIDEO_EXTENSIONS, DirectoryJob, directory_tag
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def scan_directories(
    directories: list[Path],
    extensions: list[str] | None = None,
) -> dict[Path, list[Path]]:
    """Group the top-level video files of each directory.

    Missing or unreadable directories are logged and skipped. Directories
    without any matching file are left out of the result.
    """
    allowed = {ext.lower().lstrip(".") for ext in (extensions or DEFAULT_VIDEO_EXTENSIONS)}
    videos_by_dir: dict[Path, list[Path]] = {}

    for directory in directories:
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Input path is not a directory, skipping: {directory}")
            continue

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list directory {directory}, skipping: {e}")
            continue

        videos = [
            Path(os.path.normpath(entry))
            for entry in entries
            if entry.is_file() and entry.suffix.lower().lstrip(".") in allowed
        ]
        if videos:
            videos_by_dir[directory] = videos
            logger.info(f"Found {len(videos)} videos in {directory}")
        else:
            logger.info(f"No videos in {directory}")

    return videos_by_dir


def build_jobs(videos_by_dir: dict[Path, list[Path]]) -> list[DirectoryJob]:
    """One job per directory; tags must be unique so outputs never collide."""
    jobs: list[DirectoryJob] = []
    seen: dict[str, Path] = {}
    for directory, videos in videos_by_dir.items():
        tag = directory_tag(directory)
        if tag in seen:
            raise ConfigurationError(
                f"Directories {seen[tag]} and {directory} share the tag '{tag}'; "
                "their summary videos would overwrite each other"
            )
        seen[tag] = directory
        jobs.append(DirectoryJob.from_directory(directory, videos))
    return jobs
