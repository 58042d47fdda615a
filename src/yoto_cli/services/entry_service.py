"""
Entry Service - a chapter holding exactly one track, managed as one unit.

Chapter and track carry duplicate title and icon fields; every operation here
keeps them in sync.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from yoto_cli.api.models import Chapter, ChapterDisplay, Track, TrackDisplay
from yoto_cli.errors import UserInputError
from yoto_cli.services.content_editor import (
    ContentEditor,
    append_chapter,
    get_chapter,
    make_key,
    remove_chapter,
    set_display_icon,
)
from yoto_cli.services.icon_resolver import IconResolver, icon_ref
from yoto_cli.services.upload_service import AudioUploader


@dataclass
class EntryAdded:
    card_id: str
    index: int
    title: str
    track_url: str
    duration: float | None


class EntryService:
    def __init__(
        self,
        editor: ContentEditor,
        uploader: AudioUploader,
        icons: IconResolver,
        default_icon: str,
    ) -> None:
        self.editor = editor
        self.uploader = uploader
        self.icons = icons
        self.default_icon = default_icon

    async def add_entry(
        self,
        card_id: str,
        title: str,
        file: Path | str | None,
        icon: str | None = None,
    ) -> EntryAdded:
        """
        Upload ``file``, resolve ``icon`` and append a chapter with a single
        track pointing at the transcoded audio.
        """
        if not file:
            raise UserInputError("--file is required for entry add")

        upload = await self.uploader.upload_and_transcode(file, wait=True)
        if not upload.track_url:
            raise UserInputError("Failed to get track URL from upload")

        media_id = await self.icons.resolve(icon) if icon else self.default_icon
        ref = icon_ref(media_id)

        async with self.editor.edit(card_id) as card:
            next_index = len(card.content.chapters)
            overlay_label = str(next_index + 1)

            track = Track(
                key="01",
                title=title,
                track_url=upload.track_url,
                type="audio",
                format=upload.result.format or "aac",
                channels=upload.result.channels,
                duration=upload.duration,
                file_size=upload.file_size,
                overlay_label=overlay_label,
                display=TrackDisplay(icon_16x16=ref),
            )
            chapter = Chapter(
                key=make_key(next_index),
                title=title,
                duration=upload.duration,
                tracks=[track],
                overlay_label=overlay_label,
                display=ChapterDisplay(icon_16x16=ref),
                file_size=upload.file_size,
                original_file_name=Path(upload.filename).stem,
            )
            index = append_chapter(card, chapter)

        logger.info(f"Added entry {title!r} at index {index} of card {card_id}")
        return EntryAdded(
            card_id=card_id,
            index=index,
            title=title,
            track_url=upload.track_url,
            duration=upload.duration,
        )

    async def update_entry(
        self,
        card_id: str,
        index: int,
        title: str | None = None,
        icon: str | None = None,
    ) -> Chapter:
        """Change title and/or icon on the chapter and on every track under it."""
        async with self.editor.edit(card_id) as card:
            chapter = get_chapter(card, index, label="Entry")

            if title:
                chapter.title = title
                for track in chapter.tracks:
                    track.title = title

            if icon:
                ref = icon_ref(await self.icons.resolve(icon))
                set_display_icon(chapter, ref)
                for track in chapter.tracks:
                    set_display_icon(track, ref)

        return chapter

    async def delete_entry(self, card_id: str, index: int) -> Chapter:
        async with self.editor.edit(card_id) as card:
            removed = remove_chapter(card, index, label="Entry")
        return removed
