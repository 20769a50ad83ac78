"""Application configuration."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    # Database
    database_url: str

    # Supabase (auth + storage)
    supabase_url: str
    supabase_service_role_key: str
    storage_bucket: str = "interview-audio"

    # OpenAI
    openai_api_key: str
    openai_base_url: str = "https://api.openai.com/v1"
    transcription_model: str = "whisper-1"
    transcription_language: str = "en"
    analysis_model: str = "gpt-4o-mini"
    analysis_temperature: float = 0.7
    analysis_max_tokens: int = 2000
    http_timeout_seconds: int = 120

    # Processing pipeline
    base64_chunk_size: int = 32768
    max_upload_bytes: int = 100 * 1024 * 1024
    share_link_default_days: int = 7
    mark_failed_on_error: bool = False
    handler_rate_limit: str = "30/minute"

    # Application
    log_level: str = "INFO"
    log_format: str = "json"
    expose_error_details: bool = False

    # CORS (comma-separated)
    cors_allow_origins: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        """Parse allowed origins from comma-separated env var."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",")]

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_key(cls, v: str) -> str:
        """Validate OpenAI API key is present."""
        if not v or not v.strip():
            raise ValueError(
                "OPENAI_API_KEY is required for transcription and analysis. "
                "Set it in the environment or .env file"
            )
        return v.strip()

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("base64_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Chunk size must be positive."""
        if v <= 0:
            raise ValueError("BASE64_CHUNK_SIZE must be a positive integer")
        return v


settings = Settings()
