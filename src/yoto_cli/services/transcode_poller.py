"""
Transcode Poller - waits for a server-side audio transcode job to finish.

A job moves through ``queued`` -> ``processing`` (reported by some endpoints
as ``transcoding``) -> ``complete``. Any other phase is treated as failure.
The job is complete as soon as either the phase says so or a
``transcodedSha256`` is present.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from yoto_cli.api.exceptions import YotoNotFoundError
from yoto_cli.api.models import TranscodedAudioResponse
from yoto_cli.errors import TranscodeFailedError, TranscodeTimeoutError

if TYPE_CHECKING:
    from yoto_cli.api.client import YotoApiClient

YOTO_REF_PREFIX = "yoto:#"

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_ATTEMPTS = 60


class TranscodeState(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


IN_PROGRESS_PHASES = frozenset({"queued", "processing", "transcoding"})


def classify_job(job: TranscodedAudioResponse.Transcode) -> TranscodeState:
    """Map a transcode job snapshot onto pending/complete/failed."""
    phase = job.progress.phase if job.progress else None
    if phase == "complete" or job.transcoded_sha256:
        return TranscodeState.COMPLETE
    if phase and phase not in IN_PROGRESS_PHASES:
        return TranscodeState.FAILED
    return TranscodeState.PENDING


@dataclass
class TrackResult:
    """Outcome of an upload. Only ``upload_id`` is set when not waiting."""

    upload_id: str
    track_url: str | None = None
    sha256: str | None = None
    duration: float | None = None
    format: str | None = None
    channels: str | None = None

    @classmethod
    def from_job(cls, job: TranscodedAudioResponse.Transcode) -> TrackResult:
        info = job.transcoded_info
        return cls(
            upload_id=job.upload_id,
            track_url=f"{YOTO_REF_PREFIX}{job.transcoded_sha256}",
            sha256=job.transcoded_sha256,
            duration=info.duration if info else None,
            format=info.format if info else None,
            channels=info.channels if info else None,
        )


class TranscodePoller:
    """
    Polls the transcode endpoint on a fixed interval until a terminal state.

    ``sleep`` is injectable so tests can run the full attempt budget without
    waiting on the wall clock.
    """

    def __init__(
        self,
        client: YotoApiClient,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_attempt: Callable[[int, int], None] | None = None,
    ) -> None:
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._on_attempt = on_attempt

    async def fetch(self, upload_id: str) -> TranscodedAudioResponse.Transcode:
        response = await self.client.get_transcoded_audio(upload_id)
        return response.transcode

    async def poll_until_done(self, upload_id: str, wait: bool = True) -> TrackResult:
        """
        Wait for the transcode of ``upload_id`` to finish.

        Raises:
            TranscodeFailedError: the job reported an unknown phase
            TranscodeTimeoutError: ``max_attempts`` polls without a terminal state
        """
        if not wait:
            return TrackResult(upload_id=upload_id)

        for attempt in range(1, self.max_attempts + 1):
            if self._on_attempt:
                self._on_attempt(attempt, self.max_attempts)

            try:
                job = await self.fetch(upload_id)
            except YotoNotFoundError:
                # The job record may not exist yet right after the upload
                logger.debug(f"Transcode {upload_id} not found yet (attempt {attempt})")
            else:
                state = classify_job(job)
                phase = job.progress.phase if job.progress else None
                logger.debug(
                    f"Transcode {upload_id} attempt {attempt}/{self.max_attempts}: "
                    f"phase={phase} state={state.value}"
                )
                if state is TranscodeState.COMPLETE:
                    logger.info(f"Transcode {upload_id} complete: {job.transcoded_sha256}")
                    return TrackResult.from_job(job)
                if state is TranscodeState.FAILED:
                    raise TranscodeFailedError(upload_id, phase or "")

            if attempt < self.max_attempts:
                await self._sleep(self.interval)

        raise TranscodeTimeoutError(upload_id, self.max_attempts, self.interval)
