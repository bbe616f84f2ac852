"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Recovery Engine: muscle, connective tissue and injury-risk simulation."
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["Roberto Martelloni"]
    AUTHORS_EMAILS: List[str] = ["rmartelloni@gmail.com"]
    PROJECT_URL: str = "https://github.com/boos/recovery-engine"

    DEBUG: bool = False

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "postgres"
    # Full URL override (e.g. sqlite:///./recovery.db for local runs)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # Recovery engine
    LOOKBACK_DAYS: int = 90
    CONTEXT_DAYS: int = 7
    SNAPSHOT_TTL_MINUTES: int = 30
    ASSESSMENT_TIMEOUT_SECONDS: float = 5.0
    PARALLEL_BUILDERS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                f":{self.DATABASE_PORT}"
                f"/{self.DATABASE_DBNAME}")


# Global settings instance
settings = Settings()
