"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    spoonacular_api_key: str
    spoonacular_base_url: str = "https://api.spoonacular.com"
    admin_token: str
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    recipe_cache_table: str = "kv_store"
    provider_max_attempts: int = 3
    provider_retry_delay_seconds: float = 1.0
    fetch_deadline_seconds: float | None = 30.0
    fallback_seed: int | None = None
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def supabase_enabled(self) -> bool:
        """Return True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)
