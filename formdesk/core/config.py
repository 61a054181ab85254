"""Application configuration with environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./formdesk.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Rate Limiting (requests per minute)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_SUBMIT: int = 20  # Public form submissions

    # Forms
    MAX_PAYLOAD_DEPTH: int = 32

    # Exports
    CSV_ESCAPE_FORMULAS: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; callers pass the result on explicitly."""
    return Settings()
