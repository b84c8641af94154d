"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage - single-file SQLite image, rewritten on every mutation
    database_path: str = "data/otpgate.db"

    # OTP and password policy
    otp_ttl_seconds: int = Field(default=600, gt=0)  # 10 minute code lifetime
    min_password_length: int = Field(default=6, ge=1)
    bcrypt_cost: int = Field(default=12, ge=4, le=31)

    # Admin read-only endpoints; empty key disables them
    admin_key: str = ""

    # Outbound email
    email_backend: Literal["console", "smtp"] = "console"
    mail_host: str = "smtp.gmail.com"
    mail_port: int = 587
    mail_user: str = ""
    mail_password: str = ""
    mail_from: str = ""
    mail_use_tls: bool = True
    mail_timeout_seconds: float = 10.0

    # HTTP layer
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]
    rate_limit_enabled: bool = True
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
