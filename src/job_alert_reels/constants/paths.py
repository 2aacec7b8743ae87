"""Path-related constants for Job Alert Reels.

Project layout relative to the root:
  assets/bg.png            background image of every reel
  assets/reelmusic.mp3     optional background music
  assets/fonts/            font files for the text layers
  config/layout.yaml       optional layout overrides
  logs/                    API and AI call logs
  temp/                    per-job frame directories and rendered videos
"""

from pathlib import Path
from typing import Final


def get_project_root() -> Path:
    """Get the project root directory.

    Walks up from this file to find the directory containing 'assets' or
    'pyproject.toml'. Falls back to the current working directory.

    Returns:
        Path to project root directory.
    """
    current = Path(__file__).resolve().parent

    for _ in range(10):
        if (current / "assets").exists() or (current / "pyproject.toml").exists():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent

    return Path.cwd()


PROJECT_ROOT: Path = get_project_root()
"""Project root directory. Auto-detected from file location."""

ASSETS_DIR_NAME: Final[str] = "assets"
FONTS_DIR_NAME: Final[str] = "fonts"
CONFIG_DIR_NAME: Final[str] = "config"
LOGS_DIR_NAME: Final[str] = "logs"
TEMP_DIR_NAME: Final[str] = "temp"

BACKGROUND_IMAGE_FILENAME: Final[str] = "bg.png"
BACKGROUND_MUSIC_FILENAME: Final[str] = "reelmusic.mp3"
LAYOUT_CONFIG_FILENAME: Final[str] = "layout.yaml"

VIDEO_FILENAME_PREFIX: Final[str] = "job-alert-video"
"""Rendered videos are named <prefix>-<epoch millis>.mp4."""

FRAMES_DIR_PREFIX: Final[str] = "frames_"
"""Prefix of the per-job temporary frame directory."""


def get_assets_dir() -> Path:
    """Get the default assets directory."""
    return PROJECT_ROOT / ASSETS_DIR_NAME


def get_config_dir() -> Path:
    """Get the configuration directory."""
    return PROJECT_ROOT / CONFIG_DIR_NAME


def get_temp_dir() -> Path:
    """Get the project temp directory, creating it if needed.

    Returns:
        Path to temp directory.
    """
    temp_dir = PROJECT_ROOT / TEMP_DIR_NAME
    temp_dir.mkdir(exist_ok=True)
    return temp_dir


def get_logs_dir() -> Path:
    """Get the logs directory, creating it if needed.

    Returns:
        Path to logs directory.
    """
    logs_dir = PROJECT_ROOT / LOGS_DIR_NAME
    logs_dir.mkdir(exist_ok=True)
    return logs_dir
