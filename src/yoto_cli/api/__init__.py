"""
Yoto API client package.

Provides an async client for interacting with the Yoto API.
"""

from yoto_cli.api.auth import TokenStorage, YotoAuthClient
from yoto_cli.api.client import YotoApiClient
from yoto_cli.api.config import YotoApiConfig
from yoto_cli.api.exceptions import (
    YotoApiError,
    YotoAuthError,
    YotoNetworkError,
    YotoNotFoundError,
    YotoRateLimitError,
    YotoResponseError,
    YotoServerError,
    YotoTimeoutError,
    YotoValidationError,
)
from yoto_cli.api.models import (
    Card,
    CardContent,
    CardMetadata,
    Chapter,
    ChapterDisplay,
    Device,
    DeviceStatus,
    DisplayIconManifest,
    PublicIcon,
    TokenData,
    Track,
    TrackDisplay,
    TranscodedAudioResponse,
    UserIcon,
)

__all__ = [
    # Client
    "TokenStorage",
    "YotoApiClient",
    "YotoApiConfig",
    "YotoAuthClient",
    # Exceptions
    "YotoApiError",
    "YotoAuthError",
    "YotoNetworkError",
    "YotoNotFoundError",
    "YotoRateLimitError",
    "YotoResponseError",
    "YotoServerError",
    "YotoTimeoutError",
    "YotoValidationError",
    # Models
    "Card",
    "CardContent",
    "CardMetadata",
    "Chapter",
    "ChapterDisplay",
    "Device",
    "DeviceStatus",
    "DisplayIconManifest",
    "PublicIcon",
    "TokenData",
    "Track",
    "TrackDisplay",
    "TranscodedAudioResponse",
    "UserIcon",
]
