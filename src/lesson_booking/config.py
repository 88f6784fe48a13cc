"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:3000"
    request_timeout_seconds: float = 10.0
    default_image: str = "default.jpg"
    offline_mode: bool = False
    state_dir: str = ".storefront"
    log_level: str = "INFO"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_state_table: str = "storefront_state"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Return True when snapshots should be stored in Supabase."""
        return bool(self.supabase_url and self.supabase_service_key)


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from a service base URL."""
    cleaned = raw.strip().rstrip("/")
    if not cleaned:
        raise ValueError("api_base_url must not be empty")
    return cleaned
