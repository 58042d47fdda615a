"""
Yoto API Authentication Client.

Handles the OAuth device code flow and on-disk token persistence.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urljoin

import httpx
from loguru import logger

from yoto_cli.api.config import YotoApiConfig
from yoto_cli.api.exceptions import YotoApiError, YotoAuthError, YotoNetworkError
from yoto_cli.api.models import DeviceAuthResponse, TokenData, TokenResponse


class TokenStorage:
    """Manages token persistence in a JSON file."""

    def __init__(self, token_file: Path) -> None:
        self.token_file = token_file

    def save(self, token_data: TokenData) -> None:
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            with self.token_file.open("w") as f:
                json.dump(token_data.to_dict(), f, indent=2)
            logger.debug(f"Saved tokens to {self.token_file}")
        except OSError as e:
            logger.error(f"Failed to save tokens: {e}")
            raise YotoApiError(f"Token save failed: {e}") from e

    def load(self) -> TokenData | None:
        if not self.token_file.exists():
            return None

        try:
            with self.token_file.open("r") as f:
                data = json.load(f)
            return TokenData.from_dict(data)
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Failed to load tokens: {e}")
            return None

    def clear(self) -> None:
        if self.token_file.exists():
            self.token_file.unlink()
            logger.debug("Cleared stored tokens")


class YotoAuthClient:
    """
    Handles OAuth authentication and token management for Yoto API.

    Supports device code flow and automatic token refresh.
    """

    def __init__(
        self,
        config: YotoApiConfig,
        token_storage: TokenStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.token_storage = token_storage
        self._client = http_client
        self._owns_client = http_client is None
        self._token_data: TokenData | None = None
        self._token_lock = asyncio.Lock()

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> YotoAuthClient:
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Load previously stored tokens, if any."""
        if self.token_storage is None:
            return
        self._token_data = self.token_storage.load()
        if self._token_data and self._token_data.is_expired():
            logger.info("Stored token expired, will need refresh")

    def set_token(self, token_data: TokenData) -> None:
        self._token_data = token_data

    def _store(self, token_data: TokenData) -> None:
        self._token_data = token_data
        if self.token_storage is not None:
            self.token_storage.save(token_data)

    async def get_device_code(self) -> DeviceAuthResponse:
        """
        Request device authorization code.

        Returns device code and verification URLs for user authentication.
        """
        url = urljoin(self.config.auth_url, "/oauth/device/code")
        data = {
            "client_id": self.config.client_id,
            "scope": "profile offline_access",
            "audience": self.config.base_url,
        }

        try:
            response = await self.client.post(url, data=data)
            response.raise_for_status()
            return DeviceAuthResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise YotoAuthError(f"Device code request failed: {e.response.text}") from e
        except httpx.RequestError as e:
            raise YotoNetworkError(f"Network error: {e}") from e

    async def poll_for_token(
        self,
        device_code: str,
        interval: int = 5,
        timeout: int = 300,
        callback: Callable[[str], None] | None = None,
    ) -> TokenData:
        """
        Poll for token using device code.

        Args:
            device_code: Device code from get_device_code
            interval: Polling interval in seconds
            timeout: Maximum time to poll
            callback: Optional callback for status updates

        Returns:
            TokenData with access and refresh tokens

        Raises:
            YotoAuthError: If authentication fails or times out
        """
        url = urljoin(self.config.auth_url, "/oauth/token")
        data = {
            "grant_type": "urn:ietf:params:oauth:grant-type:device_code",
            "device_code": device_code,
            "client_id": self.config.client_id,
        }

        start_time = time.time()

        while True:
            if time.time() - start_time > timeout:
                raise YotoAuthError("Authentication timeout")

            try:
                response = await self.client.post(url, data=data)

                if response.status_code == 200:
                    token_response = TokenResponse.model_validate(response.json())
                    token_data = TokenData.from_token_response(token_response)
                    self._store(token_data)
                    if callback:
                        callback("Authentication successful!")
                    return token_data

                elif response.status_code in (400, 403):
                    error = response.json().get("error")
                    if error == "authorization_pending":
                        if callback:
                            callback("Waiting for user authorization...")
                    elif error == "slow_down":
                        interval = int(interval * 1.5)
                        if callback:
                            callback(f"Rate limited, slowing down to {interval}s")
                    elif error == "expired_token":
                        raise YotoAuthError("Device code expired")
                    elif error == "access_denied":
                        raise YotoAuthError("User denied authorization")
                    else:
                        raise YotoAuthError(f"Authorization error: {error}")
                else:
                    raise YotoAuthError(f"Unexpected status: {response.status_code}")

            except httpx.RequestError as e:
                logger.warning(f"Polling error: {e}")

            await asyncio.sleep(interval)

    async def refresh_access_token(self) -> TokenData:
        """
        Refresh access token using refresh token.

        Raises:
            YotoAuthError: If refresh fails
        """
        if not self._token_data or not self._token_data.refresh_token:
            raise YotoAuthError("No refresh token available")

        url = urljoin(self.config.auth_url, "/oauth/token")
        data = {
            "grant_type": "refresh_token",
            "client_id": self.config.client_id,
            "refresh_token": self._token_data.refresh_token,
        }

        try:
            response = await self.client.post(url, data=data)
            response.raise_for_status()

            token_response = TokenResponse.model_validate(response.json())
            # Keep old refresh token if new one not provided
            if not token_response.refresh_token:
                token_response.refresh_token = self._token_data.refresh_token

            token_data = TokenData.from_token_response(token_response)
            self._store(token_data)
            logger.info("Access token refreshed successfully")
            return token_data

        except httpx.HTTPStatusError as e:
            raise YotoAuthError(f"Token refresh failed: {e.response.text}") from e
        except httpx.RequestError as e:
            raise YotoNetworkError(f"Network error during refresh: {e}") from e

    async def get_valid_token(self) -> str:
        """
        Get a valid access token, refreshing if necessary.

        Raises:
            YotoAuthError: If no token available and refresh fails
        """
        async with self._token_lock:
            if not self._token_data:
                raise YotoAuthError("Not authenticated. Run 'yoto auth login' first.")

            if self._token_data.is_expired():
                logger.info("Token expired, refreshing...")
                await self.refresh_access_token()

            return self._token_data.access_token

    @property
    def token_data(self) -> TokenData | None:
        return self._token_data

    def is_authenticated(self) -> bool:
        """Check if client holds a usable token."""
        if self._token_data is None:
            return False
        return not self._token_data.is_expired() or bool(self._token_data.refresh_token)

    def clear_tokens(self) -> None:
        """Clear all stored tokens."""
        self._token_data = None
        if self.token_storage is not None:
            self.token_storage.clear()
