"""Exception types raised by the summary pipeline.

``ConfigurationError`` aborts a whole run before any job is scheduled.
The other subclasses abort a single directory job and are recorded in
``ProcessingStats`` by the job runner.
"""

from __future__ import annotations


class VidsumError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(VidsumError):
    """Unreadable or invalid configuration."""


class ExtractionError(VidsumError):
    """Frames could not be staged for a directory."""


class WriterError(VidsumError):
    """The output video could not be opened or written."""


class TranscoderError(VidsumError):
    """The external transcoder exited with a non-zero status."""

    def __init__(self, cmd: str, returncode: int, stdout: str = "", stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command failed with exit status {returncode}: {cmd}\n"
            f"stdout: {stdout.strip()}\n"
            f"stderr: {stderr.strip()}"
        )
