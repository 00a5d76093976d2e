"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    notification_webhook_url: str | None = None
    default_timezone: str = "UTC"
    candidate_pool_limit: int = 50
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_health_conditions(raw: str | None) -> list[str]:
    """Parse comma-separated health conditions into normalized names."""
    if raw is None:
        return []
    conditions: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip().lower().replace(" ", "_")
        if value and value not in conditions:
            conditions.append(value)
    return conditions
