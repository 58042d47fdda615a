"""
Icon resolver - turns a user supplied icon reference into a media id.

Accepted forms:
- ``yoto:#<mediaId>``: the prefix is stripped, the id is trusted as-is
- a local image path (``./``, ``../``, ``/`` or an image extension): uploaded
  with server side auto-resize to 16x16
- anything else: assumed to be a media id already
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from yoto_cli.services.transcode_poller import YOTO_REF_PREFIX
from yoto_cli.services.upload_service import calculate_sha256, read_local_file

if TYPE_CHECKING:
    from yoto_cli.api.client import YotoApiClient

ICON_FILE_PATTERN = re.compile(r"\.(png|jpe?g|gif)$", re.IGNORECASE)
PATH_PREFIXES = ("./", "../", "/")


def icon_ref(media_id: str) -> str:
    """``yoto:#`` reference used in ``display.icon16x16``."""
    return f"{YOTO_REF_PREFIX}{media_id}"


def looks_like_icon_path(ref: str) -> bool:
    return ref.startswith(PATH_PREFIXES) or bool(ICON_FILE_PATTERN.search(ref))


class IconResolver:
    def __init__(self, client: YotoApiClient, auto_convert: bool = True) -> None:
        self.client = client
        self.auto_convert = auto_convert

    async def upload(self, path: Path | str, auto_convert: bool | None = None) -> str:
        """Upload a local image and return its media id."""
        icon_path = Path(path)
        icon_bytes = read_local_file(path, kind="Icon file")
        logger.info(f"Uploading icon {icon_path.name} (sha256={calculate_sha256(icon_bytes)[:12]}...)")
        response = await self.client.upload_icon(
            icon_bytes,
            filename=icon_path.name,
            auto_convert=self.auto_convert if auto_convert is None else auto_convert,
        )
        media_id = response.display_icon.media_id
        logger.debug(f"Icon {icon_path.name} -> {media_id} (new={response.display_icon.new})")
        return media_id

    async def resolve(self, ref: str) -> str:
        """Return the media id for ``ref``, uploading local files."""
        if ref.startswith(YOTO_REF_PREFIX):
            return ref[len(YOTO_REF_PREFIX) :]

        if looks_like_icon_path(ref):
            return await self.upload(ref)

        return ref
