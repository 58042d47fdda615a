"""
Application configuration using pydantic-settings.

Loads configuration from environment variables (or a ``.env`` file) with
sensible defaults.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from yoto_cli.api.config import YotoApiConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Yoto API configuration
    yoto_client_id: str = "GBW0M3PLOXIuXk2ev6EsP0PTBHEbSVpt"
    yoto_base_url: str = "https://api.yotoplay.com"
    yoto_auth_url: str = "https://login.yotoplay.com"
    yoto_api_timeout: float = 30.0
    yoto_upload_timeout: float = 120.0

    # Paths
    yoto_token_file: Path = Path.home() / ".config" / "yoto-cli" / "tokens.json"

    # Content defaults
    yoto_default_icon: str = "aUm9i3ex3qqAMYBv-i-O-pYMKuMJGICtR3Vhf289u2Q"

    # Transcode polling: 60 attempts at 5s is a 5 minute ceiling
    yoto_poll_interval: float = 5.0
    yoto_poll_max_attempts: int = 60

    def api_config(self) -> YotoApiConfig:
        return YotoApiConfig(
            client_id=self.yoto_client_id,
            base_url=self.yoto_base_url,
            auth_url=self.yoto_auth_url,
            timeout=self.yoto_api_timeout,
            upload_timeout=self.yoto_upload_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
