"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536
    storage_bucket: str = "images"
    storage_cache_control: str = "3600"
    image_fetch_timeout_seconds: float = 20.0
    session_cookie_prefix: str = "sb-"
    session_cookie_suffix: str = "-auth-token"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
