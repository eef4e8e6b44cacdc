"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backoffice.config.commission_constants import DEFAULT_MAX_CHAIN_DEPTH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/backoffice.log"

    # Commission engine
    commission_max_chain_depth: int = Field(
        default=DEFAULT_MAX_CHAIN_DEPTH,
        ge=1,
        le=1000,
        description="Upper bound on referrer-chain hops walked per order",
    )

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(
                f"Invalid LOG_LEVEL {v!r}. Expected one of: {', '.join(sorted(allowed))}"
            )
        return level

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Validate production-specific requirements."""
        if self.environment == "production":
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    "DEBUG must be False in production environment. "
                    "Set DEBUG=false in your .env file."
                )

            if self.database_url.startswith("sqlite"):
                logger.warning(
                    "DATABASE_URL points at SQLite in production. "
                    "Row-level locking is unavailable; concurrent ledger "
                    "writes rely on the unique constraint only."
                )

        return self


# Global settings instance
settings = Settings()
