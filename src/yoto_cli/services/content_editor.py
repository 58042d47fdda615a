"""
Content document editor.

The API has no partial update: every change is a full fetch, an in-memory
edit of the chapter/track lists and a write-back of the whole document.
Nothing guards against concurrent edits, the last write wins. Chapters and
tracks are addressed by their position at fetch time.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from loguru import logger

from yoto_cli.api.models import (
    Card,
    CardContent,
    CardMetadata,
    Chapter,
    ChapterDisplay,
    Track,
    TrackDisplay,
)
from yoto_cli.errors import UserInputError

if TYPE_CHECKING:
    from yoto_cli.api.client import YotoApiClient

MAX_KEY_LENGTH = 20


def make_key(index: int) -> str:
    """Short positional key, e.g. ``03``. The API caps keys at 20 chars."""
    key = str(index).zfill(2)
    if len(key) > MAX_KEY_LENGTH:
        raise UserInputError(f"Key {key!r} exceeds {MAX_KEY_LENGTH} characters")
    return key


def get_chapter(card: Card, index: int, label: str = "Chapter") -> Chapter:
    chapters = card.content.chapters
    if index < 0 or index >= len(chapters):
        raise UserInputError(f"{label} {index} not found. Use 0-based index.")
    return chapters[index]


def get_track(chapter: Chapter, index: int) -> Track:
    if index < 0 or index >= len(chapter.tracks):
        raise UserInputError(f"Track {index} not found. Use 0-based index.")
    return chapter.tracks[index]


def append_chapter(card: Card, chapter: Chapter) -> int:
    """Append ``chapter`` and return its index."""
    card.content.chapters.append(chapter)
    return len(card.content.chapters) - 1


def remove_chapter(card: Card, index: int, label: str = "Chapter") -> Chapter:
    get_chapter(card, index, label)
    return card.content.chapters.pop(index)


def append_track(chapter: Chapter, track: Track) -> int:
    chapter.tracks.append(track)
    return len(chapter.tracks) - 1


def remove_track(chapter: Chapter, index: int) -> Track:
    get_track(chapter, index)
    return chapter.tracks.pop(index)


def set_display_icon(item: Chapter | Track, ref: str) -> None:
    """Set ``display.icon16x16`` keeping any other display fields."""
    display_cls = TrackDisplay if isinstance(item, Track) else ChapterDisplay
    current = item.display or display_cls()
    item.display = current.model_copy(update={"icon_16x16": ref})


class ContentEditor:
    """Fetches and writes back whole card documents."""

    def __init__(self, client: YotoApiClient) -> None:
        self.client = client

    async def fetch(self, card_id: str) -> Card:
        card = await self.client.get_content(card_id)
        logger.debug(f"Fetched card {card_id} ({len(card.content.chapters)} chapters)")
        return card

    async def write(
        self,
        card_id: str,
        title: str,
        content: CardContent,
        metadata: CardMetadata | None = None,
    ) -> Card:
        logger.debug(f"Writing back card {card_id} ({len(content.chapters)} chapters)")
        return await self.client.update_content(card_id, title, content, metadata)

    @asynccontextmanager
    async def edit(self, card_id: str) -> AsyncIterator[Card]:
        """
        Fetch ``card_id``, yield it for in-place edits, then write it back.

        Nothing is written if the block raises.

        Example:
            ```python
            async with editor.edit(card_id) as card:
                remove_chapter(card, 2)
            ```
        """
        card = await self.fetch(card_id)
        yield card
        await self.write(card_id, card.title, card.content, card.metadata)
