"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from askdocs.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Blob storage
    azure_storage_container_name: str | None = None
    azure_storage_connection_string: SecretStr | None = None

    # Search index
    azure_search_endpoint: str | None = None
    azure_search_index_name: str | None = None
    azure_search_api_key: SecretStr | None = None
    azure_search_max_results: int = Field(1, ge=1)
    azure_search_content_field: str = "content"

    # Chat completion
    azure_openai_endpoint: str | None = None
    azure_openai_api_key: SecretStr | None = None
    azure_openai_deployment: str = "gpt-4o"
    azure_openai_api_version: str = "2024-06-01"

    # Request limits
    max_upload_bytes: int = 50 * 1024 * 1024
    context_char_limit: int = 6000

    # UI
    ui_origin: str = "http://localhost:8501"

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def require_setting(value: str | SecretStr | None, message: str) -> str:
    """Return a configured value or raise ConfigurationError when it is blank."""
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    if value is None or not value.strip():
        raise ConfigurationError(message)
    return value
