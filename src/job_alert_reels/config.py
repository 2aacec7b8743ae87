"""Application settings loaded from the environment and .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BACKGROUND_IMAGE_FILENAME,
    BACKGROUND_MUSIC_FILENAME,
    CONTAINER_MAX_WAIT_SECONDS,
    CONTAINER_POLL_INTERVAL_SECONDS,
    FONTS_DIR_NAME,
    get_assets_dir,
)
from .extraction.models import VIDEO_FIELDS

# Load .env file
load_dotenv()


class AppSettings(BaseSettings):
    """Credentials and tunables for every collaborator.

    Field names map to upper-case environment variables, e.g.
    ``insta_app_id`` reads ``INSTA_APP_ID``.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Supabase
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_table: str = "jobs"
    supabase_columns: list[str] = Field(default_factory=lambda: list(VIDEO_FIELDS))

    # Instagram
    insta_app_id: str = ""
    insta_access_token: str = ""
    instagram_api_base: str = "https://graph.instagram.com"
    reel_max_wait_seconds: float = Field(default=CONTAINER_MAX_WAIT_SECONDS, gt=0)
    reel_poll_interval_seconds: float = Field(default=CONTAINER_POLL_INTERVAL_SECONDS, gt=0)

    # Upload host
    upload_provider: Literal["tmpfiles", "cloudinary"] = "tmpfiles"
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    # Rendering
    assets_dir: Path = Field(default_factory=get_assets_dir)
    font_path: Path | None = None
    regular_font_path: Path | None = None
    temp_dir: Path | None = None
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    layout_path: Path | None = None

    # Server
    port: int = 3000

    @property
    def background_image_path(self) -> Path:
        """Background image every reel fades in."""
        return self.assets_dir / BACKGROUND_IMAGE_FILENAME

    @property
    def music_path(self) -> Path:
        """Default background music track (optional)."""
        return self.assets_dir / BACKGROUND_MUSIC_FILENAME

    @property
    def fonts_dir(self) -> Path:
        """Folder searched for layout fonts."""
        return self.assets_dir / FONTS_DIR_NAME

    def has_instagram_credentials(self) -> bool:
        """Check if reel publishing is configured."""
        return bool(self.insta_app_id and self.insta_access_token)

    def missing_credentials(self) -> list[str]:
        """List the extraction/datastore variables that are not set."""
        missing = []
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_service_key:
            missing.append("SUPABASE_SERVICE_KEY")
        return missing

    def public_config(self) -> dict[str, str]:
        """Configuration payload served by GET /api/config."""
        return {
            "GEMINI_API_KEY": self.gemini_api_key,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_SERVICE_KEY": self.supabase_service_key,
        }


def load_settings(**overrides) -> AppSettings:
    """Build settings from the environment, applying keyword overrides."""
    return AppSettings(**overrides)
