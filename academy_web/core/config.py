"""Application configuration."""
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    DEBUG: bool = True
    CORS_ORIGINS: List[str] = ["*"]

    # Academy backend
    BACKEND_API_URL: str = Field(
        default="http://localhost:8080",
        validation_alias=AliasChoices("BACKEND_API_URL", "NEXT_PUBLIC_API_URL"),
    )
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    MAX_RETRIES: int = 3

    # Public site
    SITE_URL: str = "https://teamhippa.com"
    ACADEMY_TIMEZONE: str = "America/Phoenix"

    # Payments
    STRIPE_PUBLISHABLE_KEY: str = ""

    # Booking confirmation polling, one policy per flow.
    # Attempt counts include the first read.
    COURSE_CONFIRMATION_MAX_ATTEMPTS: int = 4
    COURSE_CONFIRMATION_DELAY_SECONDS: float = 3.0
    PACKAGE_CONFIRMATION_MAX_ATTEMPTS: int = 11
    PACKAGE_CONFIRMATION_DELAY_SECONDS: float = 5.0
    CHECKOUT_CONFIRMATION_MAX_ATTEMPTS: int = 4
    CHECKOUT_CONFIRMATION_DELAY_SECONDS: float = 1.5

    # Maintenance
    LOOKUP_RETENTION_MINUTES: int = 15
    SESSION_COOKIE_NAME: str = "academy_session"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
