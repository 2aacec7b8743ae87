"""Limit constants for Job Alert Reels.

- Instagram Graph API requirements for Reels
- Polling and timeout settings for the publish workflow
- HTTP timeouts for the collaborators
"""

from typing import Final

# =============================================================================
# INSTAGRAM LIMITS
# =============================================================================

INSTAGRAM_CAPTION_MAX_LENGTH: Final[int] = 2200
"""Maximum caption length in characters."""

INSTAGRAM_REEL_MIN_DURATION: Final[float] = 3.0
"""Minimum reel duration in seconds."""

INSTAGRAM_REEL_MAX_DURATION: Final[float] = 90.0
"""Maximum reel duration in seconds (standard accounts)."""

INSTAGRAM_REEL_MAX_SIZE_MB: Final[float] = 300.0
"""Maximum reel file size in megabytes."""

INSTAGRAM_REEL_MIN_DIMENSION: Final[int] = 540
"""Minimum width and height in pixels."""

INSTAGRAM_REEL_MIN_ASPECT: Final[float] = 9 / 16
INSTAGRAM_REEL_MAX_ASPECT: Final[float] = 16 / 9

INSTAGRAM_REEL_MIN_FPS: Final[float] = 23.0
INSTAGRAM_REEL_MAX_FPS: Final[float] = 60.0


# =============================================================================
# PUBLISH POLLING
# =============================================================================

CONTAINER_MAX_WAIT_SECONDS: Final[float] = 300.0
"""Default time to wait for a reel container to finish processing."""

CONTAINER_POLL_INTERVAL_SECONDS: Final[float] = 5.0
"""Default delay between two container status checks."""


# =============================================================================
# TIMEOUTS
# =============================================================================

GRAPH_API_TIMEOUT_SECONDS: Final[float] = 60.0
"""Timeout for a single Graph API request."""

GEMINI_TIMEOUT_SECONDS: Final[float] = 60.0
"""Timeout for a Gemini generateContent request."""

SUPABASE_TIMEOUT_SECONDS: Final[float] = 30.0
"""Timeout for a Supabase REST request."""

UPLOAD_TIMEOUT_SECONDS: Final[float] = 300.0
"""Timeout for uploading a rendered video."""

FFPROBE_TIMEOUT_SECONDS: Final[float] = 30.0
"""Timeout for an ffprobe call."""

CLOUDINARY_CHUNKED_THRESHOLD_BYTES: Final[int] = 20_000_000
"""Files larger than this are uploaded to Cloudinary in chunks."""
