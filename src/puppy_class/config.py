"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    supabase_sessions_table: str = "puppy_sessions"
    supabase_subscriptions_table: str = "push_subscriptions"
    supabase_photo_bucket: str = "puppy-class"
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:admin@example.com"
    static_dir: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def push_enabled(self) -> bool:
        """Return true when both VAPID keys are configured."""
        return bool(self.vapid_public_key and self.vapid_private_key)


class ClientSettings(BaseSettings):
    """Offline client settings loaded from environment variables."""

    server_base_url: str = "http://localhost:3000"
    cache_name: str = "puppy-yoga-cache-v8"
    database_path: Path = Path("puppy-yoga-db.sqlite3")
    sync_tag: str = "sync-sessions"
    network_timeout_seconds: float | None = 10.0
    connectivity_poll_seconds: float = 15.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
