"""Services package: upload, transcode polling, icons and card editing."""

from yoto_cli.services.content_editor import ContentEditor
from yoto_cli.services.entry_service import EntryAdded, EntryService
from yoto_cli.services.icon_resolver import IconResolver, icon_ref
from yoto_cli.services.playlist_service import ChapterAdded, PlaylistService, TrackAdded
from yoto_cli.services.sources import SourceKind, classify_source
from yoto_cli.services.transcode_poller import TrackResult, TranscodePoller
from yoto_cli.services.upload_service import AudioUpload, AudioUploader, calculate_sha256

__all__ = [
    "AudioUpload",
    "AudioUploader",
    "ChapterAdded",
    "ContentEditor",
    "EntryAdded",
    "EntryService",
    "IconResolver",
    "PlaylistService",
    "SourceKind",
    "TrackAdded",
    "TrackResult",
    "TranscodePoller",
    "calculate_sha256",
    "classify_source",
    "icon_ref",
]
