"""Shared fixtures: an in-memory stand-in for ``YotoApiClient``."""

from __future__ import annotations

import hashlib
from typing import Any

import pytest
from dependency_injector import providers

from yoto_cli.api.exceptions import YotoNotFoundError
from yoto_cli.api.models import (
    AudioUploadUrlResponse,
    Card,
    CardContent,
    CardMetadata,
    Device,
    DeviceStatus,
    DisplayIconManifest,
    IconUploadResponse,
    NewCardRequest,
    TranscodedAudioResponse,
    UpdateCardRequest,
)
from yoto_cli.container import Container
from yoto_cli.core.config import Settings
from yoto_cli.services.content_editor import ContentEditor
from yoto_cli.services.entry_service import EntryService
from yoto_cli.services.icon_resolver import IconResolver
from yoto_cli.services.playlist_service import PlaylistService
from yoto_cli.services.transcode_poller import TranscodePoller
from yoto_cli.services.upload_service import AudioUploader

DEFAULT_ICON = "default-icon-id"
TRANSCODED_DURATION = 125.0


class FakeAuth:
    token_data = None

    def is_authenticated(self) -> bool:
        return False


class FakeYotoClient:
    """
    Keeps cards as wire-shaped dicts so every fetch parses a fresh copy,
    the same as a real round trip.

    ``transcode_script`` lists the phase reported by successive transcode
    fetches; the last entry repeats. ``"missing"`` answers with a 404.
    """

    def __init__(self) -> None:
        self.cards: dict[str, dict[str, Any]] = {}
        self.stored_digests: set[str] = set()
        self.upload_digests: dict[str, str] = {}
        self.puts: list[dict[str, Any]] = []
        self.writes: list[dict[str, Any]] = []
        self.transcode_script: list[str] = ["complete"]
        self.transcode_calls = 0
        self.transcoded_sha256: str | None = None
        self.icon_media: dict[str, str] = {}
        self.icon_uploads: list[dict[str, Any]] = []
        self.public_icons: dict[str, Any] = {"displayIcons": []}
        self.user_icons: dict[str, Any] = {"displayIcons": []}
        self.devices: list[dict[str, Any]] = []
        self.commands: list[tuple[str, str, dict[str, Any] | None]] = []
        self.auth = FakeAuth()
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    def is_authenticated(self) -> bool:
        return False

    def reset_authentication(self) -> None:
        pass

    def add_card(self, card_id: str, title: str = "Bedtime", chapters: list | None = None, **extra: Any) -> None:
        self.cards[card_id] = {
            "cardId": card_id,
            "title": title,
            "content": {"chapters": chapters or []},
            **extra,
        }

    def stored_card(self, card_id: str) -> Card:
        return Card.model_validate(self.cards[card_id])

    # content

    async def get_my_content(self) -> list[Card]:
        return [Card.model_validate(data) for data in self.cards.values()]

    async def get_content(self, card_id: str, playable: bool = False) -> Card:
        if card_id not in self.cards:
            raise YotoNotFoundError(f"Not found: {card_id}")
        return Card.model_validate(self.cards[card_id])

    async def create_content(
        self,
        title: str,
        content: CardContent | None = None,
        metadata: CardMetadata | None = None,
    ) -> Card:
        card_id = f"card{len(self.cards) + 1}"
        payload = NewCardRequest(title=title, content=content or CardContent(), metadata=metadata)
        self.cards[card_id] = {"cardId": card_id, **payload.model_dump(exclude_none=True)}
        return self.stored_card(card_id)

    async def update_content(
        self,
        card_id: str,
        title: str,
        content: CardContent,
        metadata: CardMetadata | None = None,
    ) -> Card:
        payload = UpdateCardRequest(
            card_id=card_id, title=title, content=content, metadata=metadata
        ).model_dump(exclude_none=True)
        self.writes.append(payload)
        self.cards[card_id] = payload
        return self.stored_card(card_id)

    async def delete_content(self, card_id: str) -> None:
        if card_id not in self.cards:
            raise YotoNotFoundError(f"Not found: {card_id}")
        del self.cards[card_id]

    # media

    async def get_audio_upload_url(self, sha256: str, filename: str | None = None) -> AudioUploadUrlResponse:
        upload_id = f"upload-{sha256[:8]}"
        self.upload_digests[upload_id] = sha256
        upload_url = None if sha256 in self.stored_digests else f"https://uploads.test/{upload_id}"
        return AudioUploadUrlResponse.model_validate(
            {"upload": {"uploadId": upload_id, "uploadUrl": upload_url}}
        )

    async def upload_file(self, upload_url: str, file_bytes: bytes, mime_type: str = "audio/mpeg") -> None:
        self.puts.append({"url": upload_url, "size": len(file_bytes), "mime_type": mime_type})
        self.stored_digests.add(hashlib.sha256(file_bytes).hexdigest())

    async def get_transcoded_audio(self, upload_id: str, loudnorm: bool = False) -> TranscodedAudioResponse:
        self.transcode_calls += 1
        phase = self.transcode_script[min(self.transcode_calls, len(self.transcode_script)) - 1]
        if phase == "missing":
            raise YotoNotFoundError(f"Not found: {upload_id}")

        job: dict[str, Any] = {"uploadId": upload_id, "progress": {"phase": phase, "percent": 50}}
        if phase == "complete":
            digest = self.upload_digests.get(upload_id, upload_id)
            job["transcodedSha256"] = self.transcoded_sha256 or f"t{digest[:16]}"
            job["transcodedInfo"] = {
                "duration": TRANSCODED_DURATION,
                "format": "aac",
                "channels": "stereo",
            }
        return TranscodedAudioResponse.model_validate({"transcode": job})

    # icons

    async def upload_icon(
        self,
        icon_bytes: bytes,
        filename: str = "icon.png",
        auto_convert: bool = True,
    ) -> IconUploadResponse:
        digest = hashlib.sha256(icon_bytes).hexdigest()
        new = digest not in self.icon_media
        media_id = self.icon_media.setdefault(digest, f"icon-{digest[:10]}")
        self.icon_uploads.append({"filename": filename, "auto_convert": auto_convert})
        return IconUploadResponse.model_validate(
            {
                "displayIcon": {
                    "mediaId": media_id,
                    "new": new,
                    "url": f"https://icons.test/{media_id}" if new else {},
                }
            }
        )

    async def get_public_icons(self) -> DisplayIconManifest:
        return DisplayIconManifest.model_validate(self.public_icons)

    async def get_user_icons(self) -> DisplayIconManifest:
        return DisplayIconManifest.model_validate(self.user_icons)

    # devices

    async def get_devices(self) -> list[Device]:
        return [Device.model_validate(d) for d in self.devices]

    async def get_device_status(self, device_id: str) -> DeviceStatus:
        return DeviceStatus.model_validate({"deviceId": device_id, "isOnline": True})

    async def send_device_command(
        self,
        device_id: str,
        command: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        self.commands.append((device_id, command, payload))


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def track_dict(key: str, title: str, **extra: Any) -> dict[str, Any]:
    return {"key": key, "title": title, "trackUrl": f"yoto:#{title.lower()}", "type": "audio", **extra}


def chapter_dict(key: str, title: str, tracks: list | None = None, **extra: Any) -> dict[str, Any]:
    return {"key": key, "title": title, "tracks": tracks or [], **extra}


@pytest.fixture
def fake_client() -> FakeYotoClient:
    return FakeYotoClient()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def poller(fake_client, sleep) -> TranscodePoller:
    return TranscodePoller(fake_client, interval=5.0, max_attempts=60, sleep=sleep)


@pytest.fixture
def uploader(fake_client, poller) -> AudioUploader:
    return AudioUploader(fake_client, poller)


@pytest.fixture
def icons(fake_client) -> IconResolver:
    return IconResolver(fake_client)


@pytest.fixture
def editor(fake_client) -> ContentEditor:
    return ContentEditor(fake_client)


@pytest.fixture
def entry_service(editor, uploader, icons) -> EntryService:
    return EntryService(editor, uploader, icons, default_icon=DEFAULT_ICON)


@pytest.fixture
def playlist_service(fake_client, editor, uploader, icons) -> PlaylistService:
    return PlaylistService(fake_client, editor, uploader, icons, default_icon=DEFAULT_ICON)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        yoto_token_file=tmp_path / "tokens.json",
        yoto_default_icon=DEFAULT_ICON,
        yoto_poll_interval=0.0,
        yoto_poll_max_attempts=3,
    )


@pytest.fixture
def container(fake_client, settings):
    c = Container()
    c.settings.override(providers.Object(settings))
    c.api_client.override(providers.Object(fake_client))
    yield c
    c.reset_override()
