"""
CLI entry point for the Yoto playlist tool.

Indices (chapter, track, entry) are 0-based everywhere.
"""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv

from yoto_cli import output
from yoto_cli.commands import auth as auth_commands
from yoto_cli.commands import content as content_commands
from yoto_cli.commands import devices as device_commands
from yoto_cli.commands import entry as entry_commands
from yoto_cli.commands import icons as icon_commands
from yoto_cli.container import Container, open_container
from yoto_cli.core.logging import configure_logging
from yoto_cli.result import Failure, Result

app = typer.Typer(
    name="yoto",
    help="Yoto CLI - Manage Yoto MYO playlists, icons and players",
    no_args_is_help=True,
)
auth_app = typer.Typer(help="Sign in to your Yoto account", no_args_is_help=True)
playlist_app = typer.Typer(help="Manage playlists (MYO cards)", no_args_is_help=True)
chapter_app = typer.Typer(help="Manage chapters in a playlist", no_args_is_help=True)
track_app = typer.Typer(help="Manage tracks and audio uploads", no_args_is_help=True)
entry_app = typer.Typer(
    help="Manage playlist entries (chapter + track as one unit)", no_args_is_help=True
)
icon_app = typer.Typer(help="Manage display icons", no_args_is_help=True)
device_app = typer.Typer(help="Manage Yoto players", no_args_is_help=True)

app.add_typer(auth_app, name="auth")
app.add_typer(playlist_app, name="playlist")
app.add_typer(chapter_app, name="chapter")
app.add_typer(track_app, name="track")
app.add_typer(entry_app, name="entry")
app.add_typer(icon_app, name="icon")
app.add_typer(device_app, name="device")

container = Container()

ICON_HELP = "Icon (file path, mediaId, or yoto:#mediaId)"
JSON_HELP = "Output as JSON"


def _dispatch(command: Callable[..., Awaitable[Result[Any]]], *args: Any, **kwargs: Any) -> Any:
    """Run an async command and turn a ``Failure`` into a nonzero exit."""

    async def _invoke() -> Result[Any]:
        async with open_container(container) as c:
            return await command(c, *args, **kwargs)

    result = asyncio.run(_invoke())
    if isinstance(result, Failure):
        output.error(result.message)
        raise typer.Exit(code=result.exit_code)
    return result.value


@app.callback()
def root(
    log_level: str = typer.Option("warning", "--log-level", "-l", help="Logging level"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
) -> None:
    load_dotenv()
    configure_logging(log_level=log_level, debug=debug)


# ============================================================================
# auth
# ============================================================================


@auth_app.command("login")
def auth_login(
    timeout: int = typer.Option(300, "--timeout", help="Seconds to wait for authorization"),
) -> None:
    """Sign in with the device code flow."""
    _dispatch(auth_commands.login, timeout=timeout)


@auth_app.command("logout")
def auth_logout() -> None:
    """Forget stored tokens."""
    _dispatch(auth_commands.logout)


@auth_app.command("status")
def auth_status() -> None:
    """Show whether you are signed in."""
    if not _dispatch(auth_commands.status):
        raise typer.Exit(code=1)


# ============================================================================
# playlist
# ============================================================================


@playlist_app.command("list")
def playlist_list(as_json: bool = typer.Option(False, "--json", help=JSON_HELP)) -> None:
    """List your playlists."""
    _dispatch(content_commands.list_playlists, as_json=as_json)


@playlist_app.command("show")
def playlist_show(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    playable: bool = typer.Option(False, "--playable", help="Include playable URLs for tracks"),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Show a playlist with its chapters and tracks."""
    _dispatch(content_commands.get_playlist, card_id, as_json=as_json, playable=playable)


@playlist_app.command("create")
def playlist_create(
    title: str = typer.Argument(..., help="Playlist title"),
    description: str | None = typer.Option(None, "--description", help="Playlist description"),
    author: str | None = typer.Option(None, "--author", help="Playlist author"),
) -> None:
    """Create an empty playlist."""
    _dispatch(content_commands.create_playlist, title, description=description, author=author)


@playlist_app.command("edit")
def playlist_edit(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    description: str | None = typer.Option(None, "--description", help="New description"),
    author: str | None = typer.Option(None, "--author", help="New author"),
    playback_type: str | None = typer.Option(
        None, "--playback-type", help="Playback type (e.g., linear)"
    ),
) -> None:
    """Update playlist title or metadata."""
    _dispatch(
        content_commands.update_playlist,
        card_id,
        title=title,
        description=description,
        author=author,
        playback_type=playback_type,
    )


@playlist_app.command("delete")
def playlist_delete(card_id: str = typer.Argument(..., help="The playlist card ID")) -> None:
    """Delete a playlist."""
    _dispatch(content_commands.delete_playlist, card_id)


# ============================================================================
# chapter
# ============================================================================


@chapter_app.command("add")
def chapter_add(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    title: str = typer.Argument(..., help="Chapter title"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
    file: Path | None = typer.Option(None, "--file", help="Audio file to upload as a track"),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Append a chapter, optionally with an uploaded track."""
    _dispatch(content_commands.add_chapter, card_id, title, icon=icon, file=file, as_json=as_json)


@chapter_app.command("edit")
def chapter_edit(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    chapter_index: int = typer.Argument(..., help="Chapter index (0-based)"),
    title: str | None = typer.Option(None, "--title", help="New chapter title"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
) -> None:
    """Update a chapter's title or icon."""
    _dispatch(content_commands.update_chapter, card_id, chapter_index, title=title, icon=icon)


@chapter_app.command("delete")
def chapter_delete(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    chapter_index: int = typer.Argument(..., help="Chapter index (0-based)"),
) -> None:
    """Delete a chapter and its tracks."""
    _dispatch(content_commands.delete_chapter, card_id, chapter_index)


# ============================================================================
# track
# ============================================================================


@track_app.command("add")
def track_add(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    chapter_index: int = typer.Argument(..., help="Chapter index (0-based)"),
    title: str = typer.Argument(..., help="Track title"),
    source: str = typer.Argument(..., help="yoto:#hash, https:// URL or local audio file"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
    duration: float | None = typer.Option(
        None, "--duration", help="Duration in seconds (auto-detected for uploads)"
    ),
) -> None:
    """Append a track to a chapter."""
    _dispatch(
        content_commands.add_track,
        card_id,
        chapter_index,
        title,
        source,
        icon=icon,
        duration=duration,
    )


@track_app.command("edit")
def track_edit(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    chapter_index: int = typer.Argument(..., help="Chapter index (0-based)"),
    track_index: int = typer.Argument(..., help="Track index (0-based)"),
    title: str | None = typer.Option(None, "--title", help="New track title"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
    url: str | None = typer.Option(None, "--url", help="New track URL"),
    on_end: str | None = typer.Option(
        None, "--on-end", help="When the track ends: continue, pause or loop"
    ),
) -> None:
    """Update a track."""
    _dispatch(
        content_commands.update_track,
        card_id,
        chapter_index,
        track_index,
        title=title,
        icon=icon,
        url=url,
        on_end=on_end,
    )


@track_app.command("delete")
def track_delete(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    chapter_index: int = typer.Argument(..., help="Chapter index (0-based)"),
    track_index: int = typer.Argument(..., help="Track index (0-based)"),
) -> None:
    """Delete a track from a chapter."""
    _dispatch(content_commands.delete_track, card_id, chapter_index, track_index)


@track_app.command("upload")
def track_upload(
    file: Path = typer.Argument(..., help="Audio file to upload"),
    wait: bool = typer.Option(
        True, "--wait/--no-wait", help="Wait for transcoding to complete"
    ),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Upload and transcode an audio file."""
    _dispatch(content_commands.upload_audio, file, as_json=as_json, wait=wait)


@track_app.command("status")
def track_status(
    upload_id: str = typer.Argument(..., help="Upload ID from 'yoto track upload --no-wait'"),
    wait: bool = typer.Option(False, "--wait", help="Wait for transcoding to complete"),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Check the transcoding status of an upload."""
    _dispatch(content_commands.get_transcode_status, upload_id, as_json=as_json, wait=wait)


# ============================================================================
# entry
# ============================================================================


@entry_app.command("add")
def entry_add(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    title: str = typer.Argument(..., help="Title used for both chapter and track"),
    file: Path | None = typer.Option(None, "--file", help="Audio file to upload (required)"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Add an entry (chapter with one uploaded track)."""
    _dispatch(entry_commands.add_entry, card_id, title, file=file, icon=icon, as_json=as_json)


@entry_app.command("update")
def entry_update(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    index: int = typer.Argument(..., help="Entry index (0-based)"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    icon: str | None = typer.Option(None, "--icon", help=ICON_HELP),
) -> None:
    """Update an entry's title or icon on both chapter and track."""
    _dispatch(entry_commands.update_entry, card_id, index, title=title, icon=icon)


@entry_app.command("delete")
def entry_delete(
    card_id: str = typer.Argument(..., help="The playlist card ID"),
    index: int = typer.Argument(..., help="Entry index (0-based)"),
) -> None:
    """Delete an entry."""
    _dispatch(entry_commands.delete_entry, card_id, index)


# ============================================================================
# icon
# ============================================================================


@icon_app.command("list")
def icon_list(
    mine: bool = typer.Option(False, "--mine", help="List only your uploaded icons"),
    tag: str | None = typer.Option(None, "--tag", help="Filter public icons by tag"),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """List public icons or your own."""
    if mine:
        _dispatch(icon_commands.list_user_icons, as_json=as_json)
    else:
        _dispatch(icon_commands.list_public_icons, tag=tag, as_json=as_json)


@icon_app.command("upload")
def icon_upload(
    file: Path = typer.Argument(..., help="PNG, JPEG or GIF image"),
    convert: bool = typer.Option(
        True, "--convert/--no-convert", help="Let the server resize the image to 16x16"
    ),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Upload a custom icon image."""
    _dispatch(icon_commands.upload_icon, file, auto_convert=convert, as_json=as_json)


# ============================================================================
# device
# ============================================================================


@device_app.command("list")
def device_list(as_json: bool = typer.Option(False, "--json", help=JSON_HELP)) -> None:
    """List your Yoto players."""
    _dispatch(device_commands.list_devices, as_json=as_json)


@device_app.command("show")
def device_show(
    device_id: str = typer.Argument(..., help="The device ID"),
    as_json: bool = typer.Option(False, "--json", help=JSON_HELP),
) -> None:
    """Show player status (volume, battery, active card)."""
    _dispatch(device_commands.get_device_status, device_id, as_json=as_json)


def _register_playback_command(name: str, description: str) -> None:
    @device_app.command(name, help=description)
    def _command(device_id: str = typer.Argument(..., help="The device ID")) -> None:
        _dispatch(device_commands.send_command, device_id, name)


for _name, _description in (
    ("play", "Start or resume playback"),
    ("pause", "Pause playback"),
    ("stop", "Stop playback"),
    ("next", "Skip to the next track"),
    ("previous", "Go to the previous track"),
):
    _register_playback_command(_name, _description)


@device_app.command("volume")
def device_volume(
    device_id: str = typer.Argument(..., help="The device ID"),
    level: int = typer.Argument(..., help="Volume level (0-100)"),
) -> None:
    """Set the volume level."""
    _dispatch(device_commands.send_command, device_id, "volume", level=level)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
