"""Application settings module."""
import json
import logging
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    DATABASE_URL: Optional[str] = None
    # JSON blob: {"driver", "user", "password", "host", "port", "database"}
    DATABASE_CREDENTIALS: Optional[SecretStr] = None
    API_KEY: Optional[SecretStr] = None

    HOST: str = "0.0.0.0"
    PORT: int = 10000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    PENDING_BATCH_SIZE: int = 10
    SETTLEMENT_MAX_RETRIES: int = 3
    SCAN_STATE_BACKEND: str = "memory"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    def resolve_database_url(self) -> Optional[str]:
        """
        Build the database URL.

        Structured credentials take precedence over DATABASE_URL. Returns
        None (after logging why) when no usable configuration exists.
        """
        if self.DATABASE_CREDENTIALS is not None:
            try:
                creds = json.loads(self.DATABASE_CREDENTIALS.get_secret_value())
                return (
                    f"{creds.get('driver', 'postgresql+asyncpg')}://"
                    f"{creds['user']}:{creds['password']}"
                    f"@{creds['host']}:{creds.get('port', 5432)}/{creds['database']}"
                )
            except (ValueError, KeyError, TypeError) as e:
                logger.error("Failed to parse DATABASE_CREDENTIALS: %s", e)
                return None

        if not self.DATABASE_URL:
            logger.error("Missing database credentials. Set DATABASE_CREDENTIALS or DATABASE_URL.")
            return None

        return self.DATABASE_URL


settings = Settings()
