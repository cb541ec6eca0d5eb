"""Subprocess runner for the external transcoder (ffmpeg)."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from vidsum.core.errors import TranscoderError

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: float | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command, blocking until it exits.

    ``timeout`` defaults to None: the wait is unbounded, so a hung child
    hangs its calling worker. A non-zero exit raises ``TranscoderError``
    carrying both captured streams when ``check`` is set.
    """
    cmd_str = " ".join(cmd)
    logger.info(f"Running: {cmd_str}")

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise TranscoderError(cmd_str, -1, "", f"executable not found: {e}") from e

    if result.stdout:
        logger.debug(f"stdout: {result.stdout[-500:]}")
    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        logger.error(f"stdout: {result.stdout}")
        logger.error(f"stderr: {result.stderr}")
        raise TranscoderError(cmd_str, result.returncode, result.stdout, result.stderr)
    return result
