"""
Errors raised by the playlist editing workflow.

These are user-facing: the command layer turns them into a ``Failure`` with
the exception message and ``exit_code``.
"""

from __future__ import annotations

from pathlib import Path


class CommandError(Exception):
    """Base class for errors reported to the user."""

    exit_code: int = 1


class UserInputError(CommandError):
    """Missing option, out-of-range index or otherwise invalid argument."""

    exit_code = 2


class LocalFileError(CommandError):
    """A local file could not be found or read."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(message)
        self.path = Path(path)


class TranscodeFailedError(CommandError):
    """The server reported a transcode phase outside the known set."""

    def __init__(self, upload_id: str, phase: str) -> None:
        super().__init__(f"Transcoding failed with status: {phase}")
        self.upload_id = upload_id
        self.phase = phase


class TranscodeTimeoutError(CommandError):
    """Polling ceiling reached without a terminal transcode state."""

    exit_code = 3

    def __init__(self, upload_id: str, attempts: int, interval: float) -> None:
        super().__init__(
            f"Transcoding timed out after {attempts * interval:g} seconds. "
            f"Check again later with 'yoto track status {upload_id}'"
        )
        self.upload_id = upload_id
        self.attempts = attempts
