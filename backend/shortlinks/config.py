from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./shortlinks.db"

    # Security
    SECRET_KEY: str = "shortlinks-super-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # Anonymous sessions (signed cookie)
    SESSION_SECRET_KEY: str = "shortlinks-session-secret-change-in-production"
    SESSION_HTTPS_ONLY: bool = False
    SESSION_MAX_AGE: int = 7 * 24 * 60 * 60  # 1 week

    # Short codes
    SHORT_CODE_LENGTH: int = 6
    SHORT_CODE_MAX_ATTEMPTS: int = 10

    # Anonymous quota
    ANONYMOUS_URL_LIMIT: int = 10

    # Domain used when building short URLs
    SHORT_DOMAIN: str = "localhost:8000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_SHORTEN: str = "100/15minutes"
    RATE_LIMIT_REDIRECT: str = "1000/minute"

    # Geolocation
    GEO_ENABLED: bool = True
    GEO_TIMEOUT: float = 2.0
    GEO_FINDIP_TOKEN: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
