"""
Dependency Injection Container using dependency-injector.

Wires the API client and the playlist editing services together.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from yoto_cli import output
from yoto_cli.api.client import YotoApiClient
from yoto_cli.core.config import Settings, get_settings
from yoto_cli.services.content_editor import ContentEditor
from yoto_cli.services.entry_service import EntryService
from yoto_cli.services.icon_resolver import IconResolver
from yoto_cli.services.playlist_service import PlaylistService
from yoto_cli.services.transcode_poller import TranscodePoller
from yoto_cli.services.upload_service import AudioUploader


class Container(containers.DeclarativeContainer):
    """Application DI container."""

    settings = providers.Singleton(get_settings)

    api_client = providers.Singleton(
        YotoApiClient,
        config=providers.Callable(Settings.api_config, settings),
        token_file=settings.provided.yoto_token_file,
    )

    transcode_poller = providers.Factory(
        TranscodePoller,
        client=api_client,
        interval=settings.provided.yoto_poll_interval,
        max_attempts=settings.provided.yoto_poll_max_attempts,
        on_attempt=providers.Object(output.transcode_progress),
    )

    audio_uploader = providers.Factory(
        AudioUploader,
        client=api_client,
        poller=transcode_poller,
    )

    icon_resolver = providers.Factory(
        IconResolver,
        client=api_client,
    )

    content_editor = providers.Factory(
        ContentEditor,
        client=api_client,
    )

    playlist_service = providers.Factory(
        PlaylistService,
        client=api_client,
        editor=content_editor,
        uploader=audio_uploader,
        icons=icon_resolver,
        default_icon=settings.provided.yoto_default_icon,
    )

    entry_service = providers.Factory(
        EntryService,
        editor=content_editor,
        uploader=audio_uploader,
        icons=icon_resolver,
        default_icon=settings.provided.yoto_default_icon,
    )


@asynccontextmanager
async def open_container(container: Container | None = None) -> AsyncIterator[Container]:
    """Yield a container whose API client is initialized, closing it afterwards."""
    container = container or Container()
    client = container.api_client()
    await client.initialize()
    try:
        yield container
    finally:
        await client.close()
