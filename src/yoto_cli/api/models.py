"""
Pydantic models for Yoto API data structures.

These models represent the request and response bodies exchanged with the
Yoto API. Content documents (cards, chapters, tracks) keep unknown keys so a
fetch followed by a full write-back never drops fields the server returned.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Union

from pydantic import BaseModel as _BaseModel
from pydantic import ConfigDict, Discriminator, Field, Tag


class BaseModel(_BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        validate_by_alias=True,
        validate_by_name=True,
        serialize_by_alias=True,
        extra="ignore",
    )


class ContentModel(BaseModel):
    """Base for content document parts that are written back verbatim."""

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Track and Chapter Models
# =============================================================================


class TrackDisplay(ContentModel):
    """Track display icon configuration."""

    icon_16x16: str | None = Field(default=None, alias="icon16x16")


class ChapterDisplay(ContentModel):
    """Chapter display icon configuration."""

    icon_16x16: str | None = Field(default=None, alias="icon16x16")


class TrackOnEnd(ContentModel):
    # "none" (continue), "stop" (pause), "repeat" (loop)
    cmd: str | None = None


class TrackEvents(ContentModel):
    on_end: TrackOnEnd | None = Field(default=None, alias="onEnd")


class Track(ContentModel):
    """
    Represents a Yoto track.

    ``track_url`` is either ``yoto:#<sha256>`` for audio hosted by Yoto or a
    plain ``https://`` URL for externally hosted audio.
    """

    key: str
    title: str
    track_url: str | None = Field(default=None, alias="trackUrl")
    type: str | None = None
    format: str | None = None
    channels: str | int | None = None
    duration: float | None = None
    file_size: float | None = Field(default=None, alias="fileSize")
    icon: str | None = None
    overlay_label: str | None = Field(default=None, alias="overlayLabel")
    display: TrackDisplay | None = None
    ambient: Any | None = None
    events: TrackEvents | None = None


class Chapter(ContentModel):
    """Represents a chapter containing zero or more tracks."""

    key: str
    title: str
    icon: str | None = None
    overlay_label: str | None = Field(default=None, alias="overlayLabel")
    tracks: list[Track] = Field(default_factory=list)
    duration: float | None = None
    file_size: float | None = Field(default=None, alias="fileSize")
    display: ChapterDisplay | None = None
    original_file_name: str | None = Field(default=None, alias="_originalFileName")
    available_from: Any | None = Field(default=None, alias="availableFrom")
    ambient: Any | None = None
    default_track_display: Any | None = Field(default=None, alias="defaultTrackDisplay")
    default_track_ambient: Any | None = Field(default=None, alias="defaultTrackAmbient")


# =============================================================================
# Card Models
# =============================================================================


class CardConfig(ContentModel):
    """Card playback configuration."""

    resume_timeout: int | None = Field(default=None, alias="resumeTimeout")


class CardMetadata(ContentModel):
    """Card metadata information."""

    author: str | None = None
    category: str | None = None
    description: str | None = None


class CardContent(ContentModel):
    """Card content structure. Chapter order is playback order."""

    chapters: list[Chapter] = Field(default_factory=list)
    config: CardConfig | None = None
    playback_type: str | None = Field(default=None, alias="playbackType")
    activity: str | None = None
    version: str | None = None
    hidden: bool | None = None
    restricted: bool | None = None


class Card(ContentModel):
    """Represents a Yoto card (playlist)."""

    card_id: str = Field(..., alias="cardId")
    title: str
    content: CardContent = Field(default_factory=CardContent)
    metadata: CardMetadata | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    user_id: str | None = Field(default=None, alias="userId")
    availability: str | None = None
    deleted: bool | None = None


class NewCardRequest(BaseModel):
    """Request body for creating a new card."""

    title: str
    content: CardContent = Field(default_factory=CardContent)
    metadata: CardMetadata | None = None


class UpdateCardRequest(BaseModel):
    """Full write-back body for an existing card."""

    card_id: str = Field(..., alias="cardId")
    title: str
    content: CardContent
    metadata: CardMetadata | None = None


# =============================================================================
# Device Models
# =============================================================================


class Device(BaseModel):
    """Represents a Yoto device."""

    device_id: str = Field(..., alias="deviceId")
    name: str
    description: str | None = None
    online: bool | None = None
    device_type: str | None = Field(default=None, alias="deviceType")
    device_family: str | None = Field(default=None, alias="deviceFamily")


class DeviceStatus(BaseModel):
    """Device status information."""

    device_id: str | None = Field(default=None, alias="deviceId")
    active_card: str | None = Field(default=None, alias="activeCard")
    battery_level_percentage: float | None = Field(default=None, alias="batteryLevelPercentage")
    is_charging: bool | None = Field(default=None, alias="isCharging")
    is_online: bool | None = Field(default=None, alias="isOnline")
    card_insertion_state: int | None = Field(default=None, alias="cardInsertionState")
    user_volume_percentage: float | None = Field(default=None, alias="userVolumePercentage")
    system_volume_percentage: float | None = Field(default=None, alias="systemVolumePercentage")
    wifi_strength: int | None = Field(default=None, alias="wifiStrength")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


# =============================================================================
# Auth Models
# =============================================================================


class TokenResponse(BaseModel):
    """OAuth token response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: str | None = None
    scope: str | None = None


@dataclass
class TokenData:
    """Token data with expiration tracking."""

    access_token: str
    refresh_token: str | None
    expires_at: float

    def is_expired(self, buffer_seconds: float = 30.0) -> bool:
        """Check if token is expired (with buffer)."""
        return time.time() >= (self.expires_at - buffer_seconds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenData:
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=data["expires_at"],
        )

    @classmethod
    def from_token_response(cls, response: TokenResponse) -> TokenData:
        expires_at = time.time() + response.expires_in
        return cls(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            expires_at=expires_at,
        )


class DeviceAuthResponse(BaseModel):
    """Response from device authorization flow."""

    device_code: str
    user_code: str
    verification_uri: str
    verification_uri_complete: str
    expires_in: int
    interval: int = 5


# =============================================================================
# Media Models
# =============================================================================


class AudioUploadUrlResponse(BaseModel):
    """Response from audio upload URL request.

    ``upload_url`` is None when the server already stores a blob with the
    requested digest.
    """

    class Upload(BaseModel):
        upload_url: str | None = Field(default=None, alias="uploadUrl")
        upload_id: str = Field(..., alias="uploadId")

    upload: Upload


class TranscodedAudioResponse(BaseModel):
    """Response from transcoded audio endpoint."""

    class Transcode(BaseModel):
        class Progress(BaseModel):
            phase: str
            percent: float | None = None

        class TranscodeInfo(BaseModel):
            duration: float | None = None
            codec: str | None = None
            format: str | None = None
            channels: str | None = None
            file_size: int | None = Field(default=None, alias="fileSize")
            metadata: dict[str, Any] | None = None

        upload_id: str = Field(..., alias="uploadId")
        upload_sha256: str | None = Field(default=None, alias="uploadSha256")
        progress: Progress | None = None
        transcoded_sha256: str | None = Field(default=None, alias="transcodedSha256")
        transcoded_info: TranscodeInfo | None = Field(default=None, alias="transcodedInfo")

    transcode: Transcode


class IconUploadResponse(BaseModel):
    """Response from icon upload."""

    class UploadedIcon(BaseModel):
        display_icon_id: str | None = Field(default=None, alias="displayIconId")
        media_id: str = Field(..., alias="mediaId")
        new: bool | None = None
        # the API answers with an empty object when the icon was a duplicate
        url: str | dict[str, Any] | None = None
        user_id: str | None = Field(default=None, alias="userId")

    display_icon: UploadedIcon = Field(..., alias="displayIcon")


# =============================================================================
# Display Icon Models
# =============================================================================


class PublicIcon(BaseModel):
    """An icon from the public Yoto icon catalogue."""

    created_at: str = Field(alias="createdAt")
    display_icon_id: str = Field(alias="displayIconId")
    media_id: str = Field(alias="mediaId")
    new: bool | None = None
    public: bool
    public_tags: list[str] = Field(alias="publicTags")
    # documented as required but sometimes omitted by the API
    title: str | None = None
    url: str
    user_id: str = Field(alias="userId")


class UserIcon(BaseModel):
    """An icon uploaded by the current user. Has no tags or title."""

    created_at: str = Field(alias="createdAt")
    display_icon_id: str = Field(alias="displayIconId")
    media_id: str = Field(alias="mediaId")
    public: bool
    url: str
    user_id: str = Field(alias="userId")


def _icon_kind(value: Any) -> str | None:
    if isinstance(value, dict):
        return "public" if "publicTags" in value or "public_tags" in value else "user"
    if isinstance(value, PublicIcon):
        return "public"
    if isinstance(value, UserIcon):
        return "user"
    return None


DisplayIcon = Annotated[
    Union[
        Annotated[PublicIcon, Tag("public")],
        Annotated[UserIcon, Tag("user")],
    ],
    Discriminator(_icon_kind),
]


class DisplayIconManifest(BaseModel):
    """Container for a list of display icons."""

    display_icons: list[DisplayIcon] = Field(default_factory=list, alias="displayIcons")
