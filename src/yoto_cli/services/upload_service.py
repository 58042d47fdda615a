"""
Audio upload service.

Uploads are content addressed: the SHA-256 of the file bytes is sent when
requesting an upload slot, and the server answers without an upload URL when
it already stores a blob with that digest.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from yoto_cli.api.client import AUDIO_MIME_TYPES
from yoto_cli.errors import LocalFileError
from yoto_cli.services.transcode_poller import TrackResult, TranscodePoller

if TYPE_CHECKING:
    from yoto_cli.api.client import YotoApiClient


def calculate_sha256(file_bytes: bytes) -> str:
    """Hex SHA-256 digest of ``file_bytes``."""
    return hashlib.sha256(file_bytes).hexdigest()


def read_local_file(path: Path | str, kind: str = "File") -> bytes:
    """Read a local file, raising ``LocalFileError`` with a readable message."""
    file_path = Path(path)
    if not file_path.is_file():
        raise LocalFileError(f"{kind} not found: {path}", file_path)
    try:
        return file_path.read_bytes()
    except OSError as e:
        raise LocalFileError(f"Could not read {path}: {e}", file_path) from e


@dataclass
class UploadSlot:
    upload_id: str
    upload_url: str | None

    @property
    def already_stored(self) -> bool:
        return self.upload_url is None


@dataclass
class AudioUpload:
    """Audio upload result, with the local file details kept for the card."""

    result: TrackResult
    sha256: str
    file_size: int
    filename: str
    deduplicated: bool

    @property
    def upload_id(self) -> str:
        return self.result.upload_id

    @property
    def track_url(self) -> str | None:
        return self.result.track_url

    @property
    def duration(self) -> float | None:
        return self.result.duration


class AudioUploader:
    """Hashes, uploads and (optionally) waits for transcode of audio files."""

    def __init__(self, client: YotoApiClient, poller: TranscodePoller) -> None:
        self.client = client
        self.poller = poller

    async def request_upload_slot(self, digest: str, filename: str) -> UploadSlot:
        response = await self.client.get_audio_upload_url(digest, filename)
        slot = UploadSlot(
            upload_id=response.upload.upload_id,
            upload_url=response.upload.upload_url,
        )
        logger.debug(f"Upload slot {slot.upload_id} for {filename} (stored={slot.already_stored})")
        return slot

    async def put_bytes(self, upload_url: str, file_bytes: bytes, filename: str) -> None:
        mime_type = AUDIO_MIME_TYPES.get(Path(filename).suffix.lower(), "audio/mpeg")
        await self.client.upload_file(upload_url, file_bytes, mime_type=mime_type)

    async def upload_and_transcode(self, path: Path | str, wait: bool = True) -> AudioUpload:
        """
        Upload ``path`` (skipping the transfer on a dedup hit) and wait for
        the transcode when ``wait`` is set.
        """
        file_path = Path(path)
        file_bytes = read_local_file(path)
        filename = file_path.name
        digest = calculate_sha256(file_bytes)
        logger.info(f"Uploading {filename} ({len(file_bytes)} bytes, sha256={digest[:12]}...)")

        slot = await self.request_upload_slot(digest, filename)
        if slot.upload_url:
            await self.put_bytes(slot.upload_url, file_bytes, filename)
            logger.info(f"Uploaded {filename}")
        else:
            logger.info(f"{filename} already exists on server")

        result = await self.poller.poll_until_done(slot.upload_id, wait=wait)
        return AudioUpload(
            result=result,
            sha256=digest,
            file_size=len(file_bytes),
            filename=filename,
            deduplicated=slot.already_stored,
        )
