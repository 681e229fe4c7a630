"""Storefront Backend — Configuration via pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Storefront"
    APP_DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Session tokens
    SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60

    # Timezone
    TIMEZONE: str = "Asia/Kolkata"

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_TOKENINFO_URL: str = "https://oauth2.googleapis.com/tokeninfo"
    GOOGLE_REVOKE_URL: str = "https://oauth2.googleapis.com/revoke"

    # SMS gateway
    SMS_API_URL: str = ""
    SMS_API_KEY: str = ""

    # Verification codes live this long before the sweep deactivates them
    VERIFICATION_TTL_SECONDS: int = 120

    # Pagination
    DEFAULT_PAGE_SIZE: int = 25

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
