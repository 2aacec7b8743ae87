"""Data models for Instagram reel publishing."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from job_alert_reels.constants import (
    CONTAINER_MAX_WAIT_SECONDS,
    CONTAINER_POLL_INTERVAL_SECONDS,
    ContainerState,
    PublishFailure,
)


@dataclass
class InstagramConfig:
    """Instagram API credentials and endpoint."""
    app_id: str
    access_token: str

    # API settings
    api_base: str = "https://graph.instagram.com"

    @classmethod
    def from_env(cls) -> "InstagramConfig":
        """Load configuration from environment variables."""
        app_id = os.getenv("INSTA_APP_ID")
        access_token = os.getenv("INSTA_ACCESS_TOKEN")

        missing = []
        if not app_id:
            missing.append("INSTA_APP_ID")
        if not access_token:
            missing.append("INSTA_ACCESS_TOKEN")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please add them to your .env file. See README for setup instructions."
            )

        return cls(
            app_id=app_id,
            access_token=access_token,
            api_base=os.getenv("INSTAGRAM_API_BASE", cls.api_base),
        )

    @classmethod
    def from_settings(cls, settings) -> "InstagramConfig":
        """Build from AppSettings. Raises ValueError if credentials are missing."""
        if not settings.has_instagram_credentials():
            raise ValueError("INSTA_APP_ID and INSTA_ACCESS_TOKEN must both be set")
        return cls(
            app_id=settings.insta_app_id,
            access_token=settings.insta_access_token,
            api_base=settings.instagram_api_base,
        )


@dataclass
class ContainerJob:
    """One reel container moving through the publish workflow."""
    video_url: str
    caption: str
    max_wait: float = CONTAINER_MAX_WAIT_SECONDS
    poll_interval: float = CONTAINER_POLL_INTERVAL_SECONDS
    container_id: Optional[str] = None
    state: ContainerState = ContainerState.CREATED
    elapsed: float = 0.0
    polls: int = 0
    last_status: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.max_wait <= 0:
            raise ValueError("max_wait must be > 0")

    def transition(self, state: ContainerState) -> None:
        """Move to a new state. Terminal states are final."""
        if self.state.is_terminal:
            raise RuntimeError(f"Container already in terminal state {self.state.value}")
        self.state = state


@dataclass
class PublishOutcome:
    """Result of publishing a reel."""
    success: bool
    container_id: Optional[str] = None
    publication_id: Optional[str] = None
    permalink: Optional[str] = None
    state: Optional[ContainerState] = None
    reason: Optional[PublishFailure] = None
    error_message: Optional[str] = None
    response: Optional[dict[str, Any]] = None
    diagnostics: dict[str, Any] = field(default_factory=dict)
    published_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "containerId": self.container_id,
            "publicationId": self.publication_id,
            "permalink": self.permalink,
            "state": self.state.value if self.state else None,
            "reason": self.reason.value if self.reason else None,
            "error": self.error_message,
            "publicationResult": self.response,
            "diagnostics": self.diagnostics or None,
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }
