"""
Playlist, chapter and track commands.

Each command prints its own output and returns a ``Result``; none of them
exit the process.
"""

from __future__ import annotations

from pathlib import Path

from yoto_cli import output
from yoto_cli.container import Container
from yoto_cli.result import returns_result
from yoto_cli.services.transcode_poller import TrackResult, TranscodeState, classify_job


def _print_track_result(result: TrackResult) -> None:
    output.info(f"Track URL: {result.track_url}")
    if result.duration:
        output.info(f"Duration: {output.format_duration(result.duration)}")
    output.info(f'Use with: yoto track add <cardId> <chapterIdx> "Title" "{result.track_url}"')


def _track_result_json(result: TrackResult) -> dict:
    return {
        "trackUrl": result.track_url,
        "sha256": result.sha256,
        "uploadId": result.upload_id,
        "duration": result.duration,
    }


# ============================================================================
# Playlists
# ============================================================================


@returns_result
async def list_playlists(container: Container, as_json: bool = False) -> None:
    cards = await container.playlist_service().list_playlists()

    if as_json:
        output.json([card.model_dump(mode="json", exclude_none=True) for card in cards])
        return

    if not cards:
        output.info("No playlists found.")
        return

    output.table(
        ["Title", "Card ID", "Updated"],
        [[card.title, card.card_id, (card.updated_at or "-")[:10]] for card in cards],
    )


@returns_result
async def get_playlist(
    container: Container,
    card_id: str,
    as_json: bool = False,
    playable: bool = False,
) -> None:
    card = await container.playlist_service().get_playlist(card_id, playable=playable)

    if as_json:
        output.json(card.model_dump(mode="json", exclude_none=True))
        return

    output.info(f"\nTitle: {card.title}")
    output.info(f"Card ID: {card.card_id}")
    if card.metadata and card.metadata.author:
        output.info(f"Author: {card.metadata.author}")
    if card.metadata and card.metadata.description:
        output.info(f"Description: {card.metadata.description}")

    chapters = card.content.chapters
    output.info(f"\nChapters ({len(chapters)}):")
    for i, chapter in enumerate(chapters):
        output.info(f"\n  {i + 1}. {chapter.title}")
        if chapter.icon:
            output.info(f"     Icon: {chapter.icon}")
        output.info(f"     Tracks ({len(chapter.tracks)}):")
        for j, track in enumerate(chapter.tracks):
            duration = f" ({output.format_duration(track.duration)})" if track.duration else ""
            output.info(f"       {j + 1}. {track.title}{duration}")
            if track.track_url:
                output.info(f"          URL: {track.track_url}")


@returns_result
async def create_playlist(
    container: Container,
    title: str,
    description: str | None = None,
    author: str | None = None,
) -> None:
    card = await container.playlist_service().create_playlist(title, description, author)
    output.success(f"Created playlist: {card.title}")
    output.info(f"Card ID: {card.card_id}")


@returns_result
async def update_playlist(
    container: Container,
    card_id: str,
    title: str | None = None,
    description: str | None = None,
    author: str | None = None,
    playback_type: str | None = None,
) -> None:
    card = await container.playlist_service().update_playlist(
        card_id,
        title=title,
        description=description,
        author=author,
        playback_type=playback_type,
    )
    output.success(f'Updated playlist "{card.title}"')


@returns_result
async def delete_playlist(container: Container, card_id: str) -> None:
    await container.playlist_service().delete_playlist(card_id)
    output.success(f"Deleted playlist: {card_id}")


# ============================================================================
# Chapters
# ============================================================================


@returns_result
async def add_chapter(
    container: Container,
    card_id: str,
    title: str,
    icon: str | None = None,
    file: Path | None = None,
    as_json: bool = False,
) -> None:
    added = await container.playlist_service().add_chapter(card_id, title, icon=icon, file=file)

    if as_json:
        output.json(
            {
                "cardId": card_id,
                "chapterIndex": added.index,
                "title": title,
                "trackUrl": added.track_url,
                "duration": added.duration,
            }
        )
        return

    if added.track_url:
        output.success(f'Added chapter "{title}" with track to playlist')
        if added.duration:
            output.info(f"Duration: {output.format_duration(added.duration)}")
    else:
        output.success(f'Added chapter "{title}" to playlist')


@returns_result
async def update_chapter(
    container: Container,
    card_id: str,
    chapter_index: int,
    title: str | None = None,
    icon: str | None = None,
) -> None:
    chapter = await container.playlist_service().update_chapter(
        card_id, chapter_index, title=title, icon=icon
    )
    output.success(f'Updated chapter "{chapter.title}"')


@returns_result
async def delete_chapter(container: Container, card_id: str, chapter_index: int) -> None:
    removed = await container.playlist_service().delete_chapter(card_id, chapter_index)
    output.success(f'Deleted chapter "{removed.title}"')


# ============================================================================
# Tracks
# ============================================================================


@returns_result
async def add_track(
    container: Container,
    card_id: str,
    chapter_index: int,
    title: str,
    source: str,
    icon: str | None = None,
    duration: float | None = None,
) -> None:
    added = await container.playlist_service().add_track(
        card_id, chapter_index, title, source, icon=icon, duration=duration
    )
    output.success(f'Added track "{title}" to chapter "{added.chapter_title}"')


@returns_result
async def update_track(
    container: Container,
    card_id: str,
    chapter_index: int,
    track_index: int,
    title: str | None = None,
    icon: str | None = None,
    url: str | None = None,
    on_end: str | None = None,
) -> None:
    track = await container.playlist_service().update_track(
        card_id,
        chapter_index,
        track_index,
        title=title,
        icon=icon,
        url=url,
        on_end=on_end,
    )
    output.success(f'Updated track "{track.title}"')


@returns_result
async def delete_track(
    container: Container,
    card_id: str,
    chapter_index: int,
    track_index: int,
) -> None:
    chapter, removed = await container.playlist_service().delete_track(
        card_id, chapter_index, track_index
    )
    output.success(f'Deleted track "{removed.title}" from chapter "{chapter.title}"')


@returns_result
async def upload_audio(
    container: Container,
    file: Path,
    as_json: bool = False,
    wait: bool = True,
) -> TrackResult:
    upload = await container.audio_uploader().upload_and_transcode(file, wait=wait)
    result = upload.result

    if not wait:
        output.info(f"Upload ID: {result.upload_id}")
        output.info(f"Use 'yoto track status {result.upload_id}' to check status")
        return result

    if as_json:
        output.json(_track_result_json(result))
        return result

    output.success("Transcoding complete")
    _print_track_result(result)
    return result


@returns_result
async def get_transcode_status(
    container: Container,
    upload_id: str,
    as_json: bool = False,
    wait: bool = False,
) -> None:
    if wait:
        result = await container.transcode_poller().poll_until_done(upload_id, wait=True)
        if as_json:
            output.json(_track_result_json(result))
            return
        output.success("Transcoding complete")
        _print_track_result(result)
        return

    response = await container.api_client().get_transcoded_audio(upload_id)
    job = response.transcode

    if as_json:
        output.json(job.model_dump(mode="json", exclude_none=True))
        return

    if classify_job(job) is TranscodeState.COMPLETE:
        output.success("Transcoding complete")
        _print_track_result(TrackResult.from_job(job))
        return

    phase = job.progress.phase if job.progress else "unknown"
    percent = job.progress.percent if job.progress else None
    suffix = f" ({percent:g}%)" if percent is not None else ""
    output.info(f"Status: {phase}{suffix}")
    output.info("Run with --wait to poll until complete")
