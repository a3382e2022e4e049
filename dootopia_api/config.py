"""
Configuration and settings for the DooTopia API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # The mobile client calls /users, /tasks, ... at the server root.
    api_prefix: str = Field(default="")

    # Document store. mongodb:// URLs use pymongo, anything else SQLAlchemy.
    database_url: Optional[str] = Field(default=None)
    database_name: str = Field(default="dootopia")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Cloudinary (image deletion proxy)
    cloudinary_cloud_name: Optional[str] = Field(default=None)
    cloudinary_api_key: Optional[str] = Field(default=None)
    cloudinary_api_secret: Optional[str] = Field(default=None)

    # Firebase Admin (token verification)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_client_email: Optional[str] = Field(default=None)
    firebase_private_key: Optional[str] = Field(default=None)
    auth_required: bool = Field(default=False)

    cors_origins: str = Field(default="*")
    log_level: str = Field(default="INFO")
    port: int = Field(default=3000)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    @property
    def firebase_credentials(self) -> Optional[dict]:
        """Service account dict, or None to fall back to ADC."""
        if not (
            self.firebase_project_id
            and self.firebase_client_email
            and self.firebase_private_key
        ):
            return None
        return {
            "type": "service_account",
            "project_id": self.firebase_project_id,
            "client_email": self.firebase_client_email,
            # Keys pasted into env files usually carry literal \n sequences.
            "private_key": self.firebase_private_key.replace("\\n", "\n"),
            "token_uri": "https://oauth2.googleapis.com/token",
        }

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
