"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from snapplate.domain.providers import Provider, ServerDefaults
from snapplate.services.log_store import ASSUMED_QUOTA_BYTES

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    ai_api_key: str | None = None
    ai_provider: Provider | None = None
    ai_model: str | None = None
    ai_custom_api_url: str | None = None
    data_dir: str = ".snapplate"
    storage_quota_bytes: int = ASSUMED_QUOTA_BYTES
    app_referer: str = "https://snapplate.app"
    app_title: str = "Snapplate"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        env_ignore_empty=True,
        extra="ignore",
    )

    def server_defaults(self) -> ServerDefaults:
        """Provider defaults used when a caller opts into server config."""
        return ServerDefaults(
            api_key=_blank_to_none(self.ai_api_key),
            provider=self.ai_provider,
            model=_blank_to_none(self.ai_model),
            custom_url=_blank_to_none(self.ai_custom_api_url),
        )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None
