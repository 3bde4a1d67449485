"""
Configuration and settings for the catalog backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Document store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Media library
    upload_root: str = Field(default="uploads")
    upload_url_base: str = Field(default="uploads")
    media_folders: list[str] = Field(
        default=["products", "posts", "banners", "categories"]
    )
    media_page_size: int = Field(default=40, ge=1)
    sidecar_filename: str = Field(default="media.meta.json")

    # Catalog rules
    max_active_banners: int = Field(default=2, ge=1)

    # Shared admin credential
    admin_token_secret: str = Field(default="change-me", min_length=8)
    admin_token_algorithm: str = Field(default="HS256")
    admin_token_expire_minutes: int = Field(default=60 * 24)
    admin_seed_username: str = Field(default="admin")
    admin_seed_email: str = Field(default="admin@example.com")
    admin_seed_password: str = Field(default="123456")

    # Contact mailer
    email_backend: Literal["console", "smtp"] = Field(default="console")
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=465)
    smtp_username: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    contact_from_address: str = Field(default="info@fhgeneralequipment.com")
    contact_from_name: str = Field(default="FH General Equipment")
    contact_recipient: str = Field(default="info@fhgeneralequipment.com")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
