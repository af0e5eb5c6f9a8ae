from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMATS = ("text", "structured", "json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Deployment environment - "production" turns on event logging
    environment: str = "development"

    # Debug mode - includes exception text in 500 responses
    debug: bool = False

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    # Rate limit registry housekeeping (window and quota are fixed constants)
    rate_limit_max_entries: Optional[int] = None  # None = unbounded
    rate_limit_sweep_interval_seconds: float = 0  # 0 = no periodic sweep

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format is one the logging setup understands."""
        v = v.strip().lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return v

    @field_validator("rate_limit_max_entries")
    @classmethod
    def validate_max_entries(cls, v: Optional[int]) -> Optional[int]:
        """Validate the registry bound is positive when set."""
        if v is not None and v < 1:
            raise ValueError("rate_limit_max_entries must be at least 1")
        return v

    @field_validator("rate_limit_sweep_interval_seconds")
    @classmethod
    def validate_sweep_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("rate_limit_sweep_interval_seconds cannot be negative")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
