"""Application configuration using pydantic-settings.

Settings come from environment variables prefixed with ``SHEETFACTORY_`` or
from a ``.env`` file. Every setting has a working default, so the compiler and
the server start without any configuration.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example environment:
    - SHEETFACTORY_PORT=8080
    - SHEETFACTORY_PERSIST_GENERATED=true
    - SHEETFACTORY_TEMPLATES_DIR=/var/lib/sheetfactory/templates
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETFACTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined in Settings
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    environment: str = "development"
    log_level: str = "INFO"

    # Rate limit for the generate endpoint (slowapi syntax)
    generate_rate_limit: str = "60/minute"

    # Persistence of generated workbooks (off by default)
    persist_generated: bool = False
    templates_dir: Path = Path("templates")

    # Also path-scan string values inside header/rows subtrees
    scan_business_data: bool = False

    # Upper bound on data rows per sheet; None means unbounded
    max_rows_per_sheet: int | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of: {allowed}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @field_validator("max_rows_per_sheet")
    @classmethod
    def validate_max_rows(cls, v: int | None) -> int | None:
        """Validate the row bound is positive when set."""
        if v is not None and v < 1:
            raise ValueError("max_rows_per_sheet must be a positive integer")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
