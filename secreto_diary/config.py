"""
Configuration for the Secreto Diary service.

Settings are read from the environment (prefix SECRETO_) and an optional
.env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SECRETO_", env_file=".env", env_file_encoding="utf-8"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Auth
    jwt_secret: str = "dev-secreto-jwt"
    jwt_expire_days: int = 7

    # Uploads; the memory image store is used when Cloudinary is not configured
    max_upload_bytes: int = 5 * 1024 * 1024
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    translate_target: str = "ml"

    keepalive_interval: float | None = Field(
        None, description="Seconds between keep-alive pings, unset to disable"
    )

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
