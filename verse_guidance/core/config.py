"""
verse-guidance - Application Configuration

Patterns Applied:
- Pydantic Settings with SettingsConfigDict
- Environment variable prefix VG_ for verse-guidance
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with VG_ prefix.
    Example: VG_VERSE_API_BASE_URL=http://localhost:9000/v1, VG_PORT=8090
    """

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8090

    # Application metadata
    service_name: str = "verse-guidance"
    version: str = "0.1.0"
    environment: str = "development"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = True

    # Tracing configuration
    tracing_enabled: bool = True
    tracing_console_export: bool = False

    # Remote verse source (AlQuran Cloud)
    verse_api_base_url: str = "https://api.alquran.cloud/v1"
    search_language: str = "en"
    original_edition: str = "quran-uthmani"
    translation_edition: str = "en.asad"
    audio_edition: str = "ar.alafasy"
    request_timeout: float = 10.0

    # Matching engine
    cache_ttl_seconds: float = 300.0
    initial_match_threshold: int = 5
    additional_match_threshold: int = 10
    theme_catalog_path: str | None = None
    random_seed: int | None = None

    model_config = SettingsConfigDict(
        env_prefix="VG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance with values from environment
    """
    return Settings()
