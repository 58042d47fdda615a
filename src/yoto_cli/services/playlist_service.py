"""
Playlist Service - card, chapter and track operations.

All edits go through ``ContentEditor.edit`` (fetch, mutate, write back).
Uploads needed by an edit happen before the fetch so the document is held
in memory for as short a time as possible.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from yoto_cli.api.client import YotoApiClient
from yoto_cli.api.models import (
    Card,
    CardContent,
    CardMetadata,
    Chapter,
    ChapterDisplay,
    Track,
    TrackDisplay,
    TrackEvents,
    TrackOnEnd,
)
from yoto_cli.errors import UserInputError
from yoto_cli.services.content_editor import (
    ContentEditor,
    append_chapter,
    append_track,
    get_chapter,
    get_track,
    make_key,
    remove_chapter,
    remove_track,
    set_display_icon,
)
from yoto_cli.services.icon_resolver import IconResolver, icon_ref
from yoto_cli.services.sources import SourceKind, classify_source
from yoto_cli.services.upload_service import AudioUpload, AudioUploader

# Friendly end-of-track names and the raw commands the API stores
ON_END_COMMANDS = {
    "continue": "none",
    "pause": "stop",
    "loop": "repeat",
}


def normalize_on_end(value: str) -> str:
    """Accept ``continue``/``pause``/``loop`` or the raw ``none``/``stop``/``repeat``."""
    value = value.strip().lower()
    if value in ON_END_COMMANDS:
        return ON_END_COMMANDS[value]
    if value in ON_END_COMMANDS.values():
        return value
    choices = ", ".join([*ON_END_COMMANDS, *ON_END_COMMANDS.values()])
    raise UserInputError(f"Invalid on-end action {value!r}. Choose one of: {choices}")


@dataclass
class ChapterAdded:
    card_id: str
    index: int
    chapter: Chapter
    track_url: str | None = None
    duration: float | None = None


@dataclass
class TrackAdded:
    card_id: str
    chapter_index: int
    chapter_title: str
    index: int
    track: Track
    upload: AudioUpload | None = None


class PlaylistService:
    def __init__(
        self,
        client: YotoApiClient,
        editor: ContentEditor,
        uploader: AudioUploader,
        icons: IconResolver,
        default_icon: str,
    ) -> None:
        self.client = client
        self.editor = editor
        self.uploader = uploader
        self.icons = icons
        self.default_icon = default_icon

    # ========================================================================
    # Cards
    # ========================================================================

    async def list_playlists(self) -> list[Card]:
        return await self.client.get_my_content()

    async def get_playlist(self, card_id: str, playable: bool = False) -> Card:
        return await self.client.get_content(card_id, playable=playable)

    async def create_playlist(
        self,
        title: str,
        description: str | None = None,
        author: str | None = None,
    ) -> Card:
        content = CardContent(chapters=[], playback_type="linear")
        metadata = CardMetadata(description=description, author=author)
        card = await self.client.create_content(title, content, metadata)
        logger.info(f"Created card {card.card_id}")
        return card

    async def update_playlist(
        self,
        card_id: str,
        title: str | None = None,
        description: str | None = None,
        author: str | None = None,
        playback_type: str | None = None,
    ) -> Card:
        async with self.editor.edit(card_id) as card:
            if title:
                card.title = title
            if description is not None or author is not None:
                metadata = card.metadata or CardMetadata()
                if description is not None:
                    metadata.description = description
                if author is not None:
                    metadata.author = author
                card.metadata = metadata
            if playback_type is not None:
                card.content.playback_type = playback_type
        return card

    async def delete_playlist(self, card_id: str) -> None:
        await self.client.delete_content(card_id)
        logger.info(f"Deleted card {card_id}")

    # ========================================================================
    # Chapters
    # ========================================================================

    async def add_chapter(
        self,
        card_id: str,
        title: str,
        icon: str | None = None,
        file: Path | str | None = None,
    ) -> ChapterAdded:
        """Append a chapter, with one track when ``file`` is given."""
        upload = None
        if file:
            upload = await self.uploader.upload_and_transcode(file, wait=True)
            if not upload.track_url:
                raise UserInputError("Failed to get track URL from upload")

        media_id = await self.icons.resolve(icon) if icon else self.default_icon

        async with self.editor.edit(card_id) as card:
            tracks = []
            if upload:
                tracks.append(
                    Track(
                        key="01",
                        title=title,
                        track_url=upload.track_url,
                        type="audio",
                        duration=upload.duration,
                    )
                )
            chapter = Chapter(
                key=make_key(len(card.content.chapters)),
                title=title,
                icon=media_id,
                display=ChapterDisplay(icon_16x16=icon_ref(media_id)),
                tracks=tracks,
            )
            index = append_chapter(card, chapter)

        return ChapterAdded(
            card_id=card_id,
            index=index,
            chapter=chapter,
            track_url=upload.track_url if upload else None,
            duration=upload.duration if upload else None,
        )

    async def update_chapter(
        self,
        card_id: str,
        index: int,
        title: str | None = None,
        icon: str | None = None,
    ) -> Chapter:
        async with self.editor.edit(card_id) as card:
            chapter = get_chapter(card, index)
            if title:
                chapter.title = title
            if icon:
                media_id = await self.icons.resolve(icon)
                chapter.icon = media_id
                set_display_icon(chapter, icon_ref(media_id))
        return chapter

    async def delete_chapter(self, card_id: str, index: int) -> Chapter:
        async with self.editor.edit(card_id) as card:
            removed = remove_chapter(card, index)
        return removed

    # ========================================================================
    # Tracks
    # ========================================================================

    async def add_track(
        self,
        card_id: str,
        chapter_index: int,
        title: str,
        source: str,
        icon: str | None = None,
        duration: float | None = None,
    ) -> TrackAdded:
        """
        Append a track to a chapter.

        ``source`` may be a ``yoto:#`` reference, an http(s) URL or a local
        file, which is uploaded first. An explicit ``duration`` wins over the
        one reported by the transcode.
        """
        upload = None
        track_url = source
        if classify_source(source) is SourceKind.LOCAL:
            upload = await self.uploader.upload_and_transcode(source, wait=True)
            if not upload.track_url:
                raise UserInputError("Failed to get track URL from upload")
            track_url = upload.track_url
            if duration is None:
                duration = upload.duration

        media_id = await self.icons.resolve(icon) if icon else None

        async with self.editor.edit(card_id) as card:
            chapter = get_chapter(card, chapter_index)
            track = Track(
                key=make_key(len(chapter.tracks) + 1),
                title=title,
                track_url=track_url,
                type="audio",
                duration=duration,
                icon=media_id,
                display=TrackDisplay(icon_16x16=icon_ref(media_id)) if media_id else None,
            )
            index = append_track(chapter, track)

        return TrackAdded(
            card_id=card_id,
            chapter_index=chapter_index,
            chapter_title=chapter.title,
            index=index,
            track=track,
            upload=upload,
        )

    async def update_track(
        self,
        card_id: str,
        chapter_index: int,
        track_index: int,
        title: str | None = None,
        icon: str | None = None,
        url: str | None = None,
        on_end: str | None = None,
    ) -> Track:
        on_end_cmd = normalize_on_end(on_end) if on_end is not None else None

        async with self.editor.edit(card_id) as card:
            chapter = get_chapter(card, chapter_index)
            track = get_track(chapter, track_index)
            if title:
                track.title = title
            if icon:
                set_display_icon(track, icon_ref(await self.icons.resolve(icon)))
            if url:
                track.track_url = url
            if on_end_cmd is not None:
                track.events = TrackEvents(on_end=TrackOnEnd(cmd=on_end_cmd))
        return track

    async def delete_track(
        self,
        card_id: str,
        chapter_index: int,
        track_index: int,
    ) -> tuple[Chapter, Track]:
        async with self.editor.edit(card_id) as card:
            chapter = get_chapter(card, chapter_index)
            removed = remove_track(chapter, track_index)
        return chapter, removed
