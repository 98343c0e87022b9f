"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from streetview_publish.adapters.publish_client import DEFAULT_BASE_URL

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    streetview_api_key: str
    streetview_access_token: str
    streetview_base_url: str = DEFAULT_BASE_URL
    request_timeout_seconds: float = 15
    upload_timeout_seconds: float = 120
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def credentials(self) -> dict[str, str]:
        """Return the credentials mapping accepted by an upload session."""
        return {
            "api_key": self.streetview_api_key,
            "access_token": self.streetview_access_token,
        }
