# salon/config.py
"""
Application settings and configuration
"""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    APP_NAME: str = Field(default="Salon Scheduling")
    DEBUG: bool = Field(default=False)

    # Database settings
    DATABASE_URL: str = Field(default="sqlite:///./salon.db")
    STORE_TIMEOUT_SECONDS: float = Field(default=5.0)

    # JWT Authentication settings
    SECRET_KEY: str = Field(default="change-me-later")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30)

    # Shop settings
    TIMEZONE: str = Field(default="America/New_York")
    SLOT_MINUTES: int = Field(default=15)
    ENFORCE_WORKING_HOURS: bool = Field(default=True)

    # Double-booking: globally, or only for these user roles
    ALLOW_DOUBLE_BOOKING: bool = Field(default=False)
    DOUBLE_BOOKING_ROLES: List[str] = Field(default_factory=lambda: ["manager"])

    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
