from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Storage
    database_url: str = Field(
        default="sqlite+pysqlite:///./oneshare.db", validation_alias="DATABASE_URL"
    )

    # Limits of the default user that backs the public page
    # (more users can be provisioned through the store directly)
    default_user_token: str = "default"
    default_retention_limit_minutes: int = 60 * 24 * 7  # 0 means no limit
    default_max_message_size_bytes: int = 10 * 1024  # 0 means no limit
    default_message_creation_limit_minutes: int = 0  # 0 means no cooldown

    # Expired message cleanup
    sweep_interval_seconds: int = 60
    sweep_batch_size: int = 500

    # Public prefix for generated share links, e.g. "https://share.example.com".
    # When empty the request host is used.
    share_base_url: str = ""

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    @field_validator(
        "default_retention_limit_minutes",
        "default_max_message_size_bytes",
        "default_message_creation_limit_minutes",
    )
    @classmethod
    def validate_limit_not_negative(cls, v: int) -> int:
        """Validate user limits are zero (unlimited) or positive."""
        if v < 0:
            raise ValueError("User limits must not be negative")
        return v

    @field_validator("sweep_interval_seconds")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        """Validate sweep interval is reasonable."""
        if v < 1:
            raise ValueError("sweep_interval_seconds should be at least 1 second")
        if v > 3600:
            raise ValueError("sweep_interval_seconds should not exceed 1 hour")
        return v

    @field_validator("sweep_batch_size")
    @classmethod
    def validate_batch_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sweep_batch_size must be at least 1")
        return v

    @field_validator("share_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
