from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENV: Literal["dev", "prod"] = "dev"

    # Database
    DATABASE_URL: str
    MIGRATE_ON_STARTUP: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str | None = "logs"  # unset to log to stdout only
    LOG_REDACT_PII: bool = True
    SLACK_WEBHOOK_URL: str | None = None

    # Lawsuit acquisition
    ACQUISITION_ENABLED: bool = True
    ACQUISITION_INTERVAL_SECONDS: int = 6 * 60 * 60
    FEED_TIMEOUT_SECONDS: float = 15.0

    # PII at rest
    DATA_ENCRYPTION_KEY: str = ""  # Fernet.generate_key().decode()
    PII_HASH_KEY: str = ""

    # Quiet hours are evaluated in this zone
    QUIET_HOURS_TIMEZONE: str = "UTC"

    # Fixed-window budget per client address, shared by all limited routes
    RATE_LIMIT_REQUESTS: int = 60
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    DOCS_ENABLED: bool | None = None  # None follows ENV

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        # Managed Postgres providers still hand out the legacy scheme
        if value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://"):]
        return value

    @field_validator("QUIET_HOURS_TIMEZONE")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        if value.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {value}")
        return value

    @property
    def is_production(self) -> bool:
        return self.ENV == "prod"

    @property
    def debug_enabled(self) -> bool:
        return not self.is_production

    @property
    def effective_log_level(self) -> str:
        """DEBUG is raised to INFO in production."""
        if self.is_production and self.LOG_LEVEL.upper() == "DEBUG":
            return "INFO"
        return self.LOG_LEVEL

    @property
    def docs_enabled(self) -> bool:
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return not self.is_production


settings = Settings()
