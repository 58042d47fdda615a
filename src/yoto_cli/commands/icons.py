"""Display icon commands."""

from __future__ import annotations

from pathlib import Path

from yoto_cli import output
from yoto_cli.api.models import PublicIcon
from yoto_cli.container import Container
from yoto_cli.result import returns_result
from yoto_cli.services.icon_resolver import icon_ref


def filter_by_tag(icons: list[PublicIcon], tag: str | None) -> list[PublicIcon]:
    """Case-insensitive exact tag match. No tag returns everything."""
    if not tag:
        return icons
    wanted = tag.lower()
    return [icon for icon in icons if wanted in (t.lower() for t in icon.public_tags)]


@returns_result
async def list_public_icons(
    container: Container,
    tag: str | None = None,
    as_json: bool = False,
) -> list[PublicIcon]:
    manifest = await container.api_client().get_public_icons()
    icons = filter_by_tag(
        [icon for icon in manifest.display_icons if isinstance(icon, PublicIcon)],
        tag,
    )

    if as_json:
        output.json([icon.model_dump(mode="json") for icon in icons])
        return icons

    if not icons:
        output.info(f'No icons found with tag "{tag}".' if tag else "No icons found.")
        return icons

    output.table(
        ["Title", "Media ID", "Tags"],
        [[icon.title or "-", icon.media_id, ", ".join(icon.public_tags)] for icon in icons],
    )
    output.info(f"\n{len(icons)} icons")
    return icons


@returns_result
async def list_user_icons(container: Container, as_json: bool = False) -> None:
    manifest = await container.api_client().get_user_icons()
    icons = manifest.display_icons

    if as_json:
        output.json([icon.model_dump(mode="json") for icon in icons])
        return

    if not icons:
        output.info("No custom icons uploaded yet. Use 'yoto icon upload <file>'.")
        return

    output.table(
        ["Media ID", "Created"],
        [[icon.media_id, icon.created_at[:10]] for icon in icons],
    )


@returns_result
async def upload_icon(
    container: Container,
    file: Path,
    auto_convert: bool = True,
    as_json: bool = False,
) -> str:
    media_id = await container.icon_resolver().upload(file, auto_convert=auto_convert)

    if as_json:
        output.json({"mediaId": media_id, "iconRef": icon_ref(media_id)})
        return media_id

    output.success(f"Uploaded icon: {Path(file).name}")
    output.info(f"Media ID: {media_id}")
    output.info(f"Use with: --icon {icon_ref(media_id)}")
    return media_id
