"""Entry commands: a chapter and its single track managed as one unit."""

from __future__ import annotations

from pathlib import Path

from yoto_cli import output
from yoto_cli.container import Container
from yoto_cli.result import returns_result
from yoto_cli.services.entry_service import EntryAdded


@returns_result
async def add_entry(
    container: Container,
    card_id: str,
    title: str,
    file: Path | None = None,
    icon: str | None = None,
    as_json: bool = False,
) -> EntryAdded:
    added = await container.entry_service().add_entry(card_id, title, file, icon=icon)

    if as_json:
        output.json(
            {
                "cardId": added.card_id,
                "entryIndex": added.index,
                "title": added.title,
                "trackUrl": added.track_url,
                "duration": added.duration,
            }
        )
        return added

    output.success(f'Added entry "{title}" to playlist')
    if added.duration:
        output.info(f"Duration: {output.format_duration(added.duration)}")
    return added


@returns_result
async def update_entry(
    container: Container,
    card_id: str,
    index: int,
    title: str | None = None,
    icon: str | None = None,
) -> None:
    chapter = await container.entry_service().update_entry(card_id, index, title=title, icon=icon)
    output.success(f'Updated entry "{chapter.title}"')


@returns_result
async def delete_entry(container: Container, card_id: str, index: int) -> None:
    removed = await container.entry_service().delete_entry(card_id, index)
    output.success(f'Deleted entry "{removed.title}"')
