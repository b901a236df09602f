from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Database (async driver, e.g. postgresql+asyncpg:// or sqlite+aiosqlite://)
    DATABASE_URL: str

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str | None = "logs"  # empty disables the rotating file sink
    SLACK_WEBHOOK_URL: str | None = None

    # Daily price ingestion
    INGESTION_ENABLED: bool = True
    INGESTION_HOUR_UTC: int = Field(0, ge=0, le=23)  # midnight UTC

    # Random-walk price source
    PRICE_WALK_MAX_STEP: float = Field(0.05, ge=0, lt=1)  # +/- 5% per day
    SEED_PRICE_MIN: float = Field(1.0, gt=0)
    SEED_PRICE_MAX: float = 1000.0

    # Portfolio aggregation
    PORTFOLIO_CONCURRENCY: int = Field(8, ge=1)

    # Quotes in flight at once during ingestion; each may open a session
    INGESTION_CONCURRENCY: int = Field(8, ge=1)

    # Identity: header carrying the user id verified by the upstream gateway
    USER_ID_HEADER: str = "X-User-Id"

    # Docs Configuration
    DOCS_ENABLED: bool | None = None  # Override docs setting (None = auto based on ENV)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @model_validator(mode="after")
    def _check_seed_range(self) -> "Settings":
        if self.SEED_PRICE_MIN > self.SEED_PRICE_MAX:
            raise ValueError("SEED_PRICE_MIN must not exceed SEED_PRICE_MAX")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "dev"

    @property
    def debug_enabled(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.is_development

    @property
    def effective_log_level(self) -> str:
        """Return appropriate log level based on environment."""
        if self.is_production:
            # In production, minimum INFO level (ignore DEBUG)
            return self.LOG_LEVEL if self.LOG_LEVEL.upper() != "DEBUG" else "INFO"
        return self.LOG_LEVEL

    @property
    def docs_enabled(self) -> bool:
        """Swagger/ReDoc docs enabled based on environment or override."""
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return self.is_development


settings = Settings()
