"""
Yoto API Client.

Async client for the Yoto API with:
- Automatic token refresh
- Error mapping onto the YotoApiError hierarchy
- Request retry logic for idempotent API calls
- Typed requests and responses
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

import httpx
from loguru import logger
from pydantic import ValidationError

from yoto_cli.api.auth import TokenStorage, YotoAuthClient
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
    AudioUploadUrlResponse,
    Card,
    CardContent,
    CardMetadata,
    Device,
    DeviceStatus,
    DisplayIconManifest,
    IconUploadResponse,
    NewCardRequest,
    TranscodedAudioResponse,
    UpdateCardRequest,
)

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".opus": "audio/opus",
    ".wma": "audio/x-ms-wma",
}

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
}


def _validate(model: Any, data: Any, what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise YotoResponseError(f"Unexpected {what} response shape", errors=e.errors()) from e


class YotoApiClient:
    """
    Yoto API client.

    Example:
        ```python
        from yoto_cli.api import YotoApiClient, YotoApiConfig

        config = YotoApiConfig(client_id="your_client_id")

        async with YotoApiClient(config, token_file=Path("tokens.json")) as client:
            card = await client.get_content("5ukMR")
        ```
    """

    def __init__(
        self,
        config: YotoApiConfig,
        token_file: Path | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize Yoto API client.

        Args:
            config: API configuration
            token_file: Path to token storage file, None keeps tokens in memory
            http_client: Optional pre-configured HTTP client
        """
        self.config = config
        self._http_client = http_client

        token_storage = TokenStorage(token_file) if token_file else None
        self.auth = YotoAuthClient(config, token_storage, http_client)

        self._request_count = 0

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
            )
        return self._http_client

    async def initialize(self) -> None:
        await self.auth.initialize()

    async def close(self) -> None:
        """Close all connections."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        await self.auth.close()

    async def __aenter__(self) -> YotoApiClient:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> None:
        """Convert HTTP errors to specific exceptions."""
        status = error.response.status_code
        text = error.response.text

        if status == 401:
            raise YotoAuthError(f"Unauthorized: {text}") from error
        elif status == 403:
            raise YotoAuthError(f"Forbidden: {text}") from error
        elif status == 404:
            raise YotoNotFoundError(f"Not found: {text}") from error
        elif status in (400, 422):
            raise YotoValidationError(f"Validation error: {text}") from error
        elif status == 429:
            retry_after = error.response.headers.get("Retry-After")
            raise YotoRateLimitError(
                f"Rate limited: {text}",
                retry_after=float(retry_after) if retry_after else None,
            ) from error
        elif 500 <= status < 600:
            raise YotoServerError(f"Server error {status}: {text}") from error
        else:
            raise YotoApiError(f"HTTP {status}: {text}") from error

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        require_auth: bool = True,
        retry_count: int = 0,
    ) -> httpx.Response:
        """
        Make authenticated API request with retry logic.

        Args:
            method: HTTP method
            path: API path (relative to base_url)
            params: Query parameters
            json: JSON body
            content: Raw bytes to send as request body
            headers: Additional headers
            require_auth: Whether authentication is required
            retry_count: Current retry attempt

        Raises:
            Various YotoApiError subclasses
        """
        url = urljoin(self.config.base_url, path)

        request_headers = dict(headers or {})
        if require_auth:
            token = await self.auth.get_valid_token()
            request_headers["Authorization"] = f"Bearer {token}"

        if json is not None and "Content-Type" not in request_headers:
            request_headers["Content-Type"] = "application/json"

        self._request_count += 1
        logger.debug(f"{method} {path} (attempt {retry_count + 1})")

        async def _retry() -> httpx.Response:
            return await self._request(
                method,
                path,
                params=params,
                json=json,
                content=content,
                headers=headers,
                require_auth=require_auth,
                retry_count=retry_count + 1,
            )

        try:
            response = await self.client.request(
                method=method,
                url=url,
                params=params,
                json=json,
                content=content,
                headers=request_headers,
            )
            response.raise_for_status()
            return response

        except httpx.TimeoutException as e:
            if retry_count < self.config.max_retries:
                delay = self.config.retry_delay * (self.config.retry_backoff**retry_count)
                logger.warning(f"Request timeout, retrying in {delay}s...")
                await asyncio.sleep(delay)
                return await _retry()
            raise YotoTimeoutError(f"Request timeout after {retry_count + 1} attempts") from e

        except httpx.HTTPStatusError as e:
            # Handle 401 by refreshing token and retrying once
            if e.response.status_code == 401 and require_auth and retry_count == 0:
                logger.info("Got 401, refreshing token and retrying...")
                await self.auth.refresh_access_token()
                return await _retry()

            if e.response.status_code == 429:
                retry_after = e.response.headers.get("Retry-After")
                if retry_after and retry_count < self.config.max_retries:
                    delay = float(retry_after)
                    logger.warning(f"Rate limited, waiting {delay}s...")
                    await asyncio.sleep(delay)
                    return await _retry()

            self._handle_http_error(e)

        except httpx.RequestError as e:
            if retry_count < self.config.max_retries:
                delay = self.config.retry_delay * (self.config.retry_backoff**retry_count)
                logger.warning(f"Network error, retrying in {delay}s: {e}")
                await asyncio.sleep(delay)
                return await _retry()
            raise YotoNetworkError(f"Network error after {retry_count + 1} attempts: {e}") from e

        raise YotoApiError("Unhandled request error")

    # ========================================================================
    # Authentication Methods
    # ========================================================================

    async def authenticate(
        self,
        callback: Callable[[str, str], None] | None = None,
        timeout: int = 300,
    ) -> None:
        """
        Perform device code authentication flow.

        Args:
            callback: Optional callback(verification_url, user_code) for custom UI
            timeout: Maximum time to wait for authentication

        Raises:
            YotoAuthError: If authentication fails
        """
        device_auth = await self.auth.get_device_code()

        if callback:
            callback(device_auth.verification_uri_complete, device_auth.user_code)
        else:
            logger.info(f"Visit: {device_auth.verification_uri_complete}")
            logger.info(
                f"Or go to {device_auth.verification_uri} and enter: {device_auth.user_code}"
            )

        await self.auth.poll_for_token(
            device_code=device_auth.device_code,
            interval=device_auth.interval,
            timeout=timeout,
        )

    def is_authenticated(self) -> bool:
        return self.auth.is_authenticated()

    def reset_authentication(self) -> None:
        self.auth.clear_tokens()

    # ========================================================================
    # Content Management
    # ========================================================================

    async def get_my_content(self) -> list[Card]:
        """Get all of the user's MYO (Make Your Own) cards."""
        response = await self._request("GET", "/content/mine")
        data = response.json()

        # Handle both {"cards": [...]} and direct list responses
        cards_data = data.get("cards", data) if isinstance(data, dict) else data
        return [_validate(Card, card, "card") for card in cards_data]

    async def get_content(self, card_id: str, playable: bool = False) -> Card:
        """
        Get a card document by ID.

        Args:
            card_id: Card ID
            playable: Ask the server to include playable (signed) track URLs
        """
        params = {"playable": "true"} if playable else None
        response = await self._request("GET", f"/content/{card_id}", params=params)
        data = response.json()
        card_data = data.get("card", data)
        return _validate(Card, card_data, "card")

    async def _post_content(self, request: NewCardRequest | UpdateCardRequest) -> Card:
        # The API rejects null values for optional fields
        payload = request.model_dump(exclude_none=True)
        response = await self._request("POST", "/content", json=payload)
        data = response.json()
        card_data = data.get("card", data)
        return _validate(Card, card_data, "card")

    async def create_content(
        self,
        title: str,
        content: CardContent | None = None,
        metadata: CardMetadata | None = None,
    ) -> Card:
        """Create a new card."""
        request = NewCardRequest(
            title=title,
            content=content or CardContent(),
            metadata=metadata,
        )
        return await self._post_content(request)

    async def update_content(
        self,
        card_id: str,
        title: str,
        content: CardContent,
        metadata: CardMetadata | None = None,
    ) -> Card:
        """
        Write back a whole card document.

        There is no partial update endpoint: ``content`` replaces the stored
        content entirely.
        """
        if not card_id:
            raise YotoValidationError("Card ID is required for update")
        request = UpdateCardRequest(
            card_id=card_id,
            title=title,
            content=content,
            metadata=metadata,
        )
        return await self._post_content(request)

    async def delete_content(self, card_id: str) -> None:
        await self._request("DELETE", f"/content/{card_id}")

    # ========================================================================
    # Media Upload
    # ========================================================================

    async def get_audio_upload_url(
        self,
        sha256: str,
        filename: str | None = None,
    ) -> AudioUploadUrlResponse:
        """
        Get signed upload URL for audio file.

        If the file already exists on the server, ``upload_url`` is None.
        """
        params: dict[str, str] = {"sha256": sha256}
        if filename:
            params["filename"] = filename

        response = await self._request("GET", "/media/transcode/audio/uploadUrl", params=params)
        return _validate(AudioUploadUrlResponse, response.json(), "upload URL")

    async def upload_file(
        self,
        upload_url: str,
        file_bytes: bytes,
        mime_type: str = "audio/mpeg",
    ) -> None:
        """
        PUT file bytes to a signed upload URL.

        The transfer is not retried; any failure is raised to the caller.
        """
        headers = {"Content-Type": mime_type}
        try:
            response = await self.client.put(
                upload_url,
                content=file_bytes,
                headers=headers,
                timeout=self.config.upload_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise YotoApiError(
                f"Upload failed with HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise YotoNetworkError(f"Upload failed: {e}") from e

    async def get_transcoded_audio(
        self,
        upload_id: str,
        loudnorm: bool = False,
    ) -> TranscodedAudioResponse:
        """Fetch the current state of a transcode job."""
        response = await self._request(
            "GET",
            f"/media/upload/{upload_id}/transcoded",
            params={"loudnorm": "true" if loudnorm else "false"},
        )
        return _validate(TranscodedAudioResponse, response.json(), "transcode")

    # ========================================================================
    # Icons
    # ========================================================================

    async def upload_icon(
        self,
        icon_bytes: bytes,
        filename: str = "icon.png",
        auto_convert: bool = True,
    ) -> IconUploadResponse:
        """
        Upload a custom 16x16 display icon.

        Args:
            icon_bytes: The icon image data
            filename: Filename for the upload
            auto_convert: Let the server resize the image to 16x16
        """
        params = {
            "autoConvert": str(auto_convert).lower(),
            "filename": filename,
        }
        ext = Path(filename).suffix.lower()
        headers = {"Content-Type": IMAGE_MIME_TYPES.get(ext, "application/octet-stream")}

        response = await self._request(
            "POST",
            "/media/displayIcons/user/me/upload",
            params=params,
            content=icon_bytes,
            headers=headers,
        )
        return _validate(IconUploadResponse, response.json(), "icon upload")

    async def get_public_icons(self) -> DisplayIconManifest:
        response = await self._request("GET", "/media/displayIcons/user/yoto")
        return _validate(DisplayIconManifest, response.json(), "icon list")

    async def get_user_icons(self) -> DisplayIconManifest:
        response = await self._request("GET", "/media/displayIcons/user/me")
        return _validate(DisplayIconManifest, response.json(), "icon list")

    # ========================================================================
    # Device Management
    # ========================================================================

    async def get_devices(self) -> list[Device]:
        response = await self._request("GET", "/device-v2/devices/mine")
        data = response.json()
        devices_data = data.get("devices", data) if isinstance(data, dict) else data
        return [_validate(Device, device, "device") for device in devices_data]

    async def get_device_status(self, device_id: str) -> DeviceStatus:
        response = await self._request("GET", f"/device-v2/{device_id}/status")
        return _validate(DeviceStatus, response.json(), "device status")

    async def send_device_command(
        self,
        device_id: str,
        command: str,
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Send a playback command (play, pause, stop, next, previous, volume)."""
        await self._request(
            "POST",
            f"/device-v2/{device_id}/command/{command}",
            json=payload or {},
        )
