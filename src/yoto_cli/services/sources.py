"""
Track source classification.

Checked in order: ``yoto:#`` references, then ``http(s)://`` URLs. Anything
else, including bare names without an extension, is treated as a local file
path and goes through upload + transcode. A mistyped URL scheme therefore
ends up as a "file not found" error rather than a dedicated message.
"""

from __future__ import annotations

from enum import Enum

from yoto_cli.services.transcode_poller import YOTO_REF_PREFIX

URL_PREFIXES = ("http://", "https://")


class SourceKind(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    LOCAL = "local"


def classify_source(source: str) -> SourceKind:
    if source.startswith(YOTO_REF_PREFIX):
        return SourceKind.INTERNAL
    if source.startswith(URL_PREFIXES):
        return SourceKind.EXTERNAL
    return SourceKind.LOCAL
