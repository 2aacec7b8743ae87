"""Video-related constants for Job Alert Reels.

This module contains the constants of the reel renderer:
- Canvas resolution and frame rate
- Codec and format settings
- Animation timings for the job alert layout
- Text styling defaults

The target is an Instagram Reel: 1080x1920 (9:16), 30 fps, 30 seconds.
Every rendered frame is a pure function of its index, so changing these
values changes the whole timeline deterministically.
"""

from typing import Final

# =============================================================================
# VIDEO RESOLUTION
# =============================================================================

VIDEO_WIDTH: Final[int] = 1080
"""Output video width in pixels."""

VIDEO_HEIGHT: Final[int] = 1920
"""Output video height in pixels. 9:16 aspect ratio with 1080 width."""


# =============================================================================
# FRAME RATE AND TIMING
# =============================================================================

VIDEO_FPS: Final[int] = 30
"""Frames per second."""

VIDEO_DURATION_SECONDS: Final[int] = 30
"""Length of a job alert reel in seconds."""

FRAME_FILENAME_PATTERN: Final[str] = "frame_%06d.png"
"""printf-style pattern the encoder uses to address the frame sequence."""

FRAME_INDEX_WIDTH: Final[int] = 6
"""Zero-padded width of the frame index in frame filenames."""


# =============================================================================
# VIDEO CODEC AND FORMAT
# =============================================================================

VIDEO_CODEC: Final[str] = "libx264"
"""Video codec for encoding. H.264 is what Instagram expects."""

AUDIO_CODEC: Final[str] = "aac"
"""Audio codec for encoding."""

PIXEL_FORMAT: Final[str] = "yuv420p"
"""Pixel format without alpha, playable everywhere."""

VIDEO_FORMAT: Final[str] = "mp4"
"""Output container format."""


# =============================================================================
# BACKGROUND
# =============================================================================

BACKGROUND_COLOR: Final[str] = "#FFFFFF"
"""Canvas clear color drawn before every frame."""

BACKGROUND_FADE_START: Final[float] = 0.2
"""Second at which the background image starts fading in."""

BACKGROUND_FADE_END: Final[float] = 1.0
"""Second at which the background image is fully opaque."""


# =============================================================================
# TEXT ANIMATION
# =============================================================================

TEXT_ANIMATION_DURATION: Final[float] = 0.6
"""Seconds a text layer takes to slide and fade in."""

SLIDE_OFFSET_VERTICAL: Final[float] = 30.0
"""Starting vertical offset in pixels for the "up" slide."""

SLIDE_OFFSET_HORIZONTAL: Final[float] = 50.0
"""Starting horizontal offset in pixels for "left"/"right" slides."""

TEXT_MARGIN_X: Final[int] = 100
"""Left anchor of every text line."""

DATE_START: Final[float] = 0.3
JOB_ALERT_START: Final[float] = 0.7
COMPANY_START: Final[float] = 1.1
DESIGNATION_START: Final[float] = 1.5
DETAILS_START: Final[float] = 2.0
DETAILS_STAGGER: Final[float] = 0.3
"""Delay between consecutive detail lines (location, batch, apply link)."""


# =============================================================================
# PULSE HIGHLIGHT
# =============================================================================

PULSE_WINDOW_START: Final[float] = 10.0
"""Start of the pulse window (exclusive)."""

PULSE_WINDOW_END: Final[float] = 25.0
"""End of the pulse window (exclusive)."""

PULSE_BASE_OPACITY: Final[float] = 0.1
PULSE_AMPLITUDE: Final[float] = 0.1
PULSE_SPEED_HZ: Final[float] = 1.0


# =============================================================================
# TEXT STYLING
# =============================================================================

COLOR_DATE: Final[str] = "#7C7C7C"
COLOR_ALERT: Final[str] = "#D40B0B"
COLOR_BODY: Final[str] = "#2C2C2C"
COLOR_DESIGNATION: Final[str] = "#0736FE"

FONT_SIZE_DATE: Final[int] = 24
FONT_SIZE_ALERT: Final[int] = 56
FONT_SIZE_HEADLINE: Final[int] = 48
FONT_SIZE_DETAIL: Final[int] = 40

DEFAULT_FONT_NAME: Final[str] = "Montserrat-Bold.ttf"
"""Font looked up in the assets/fonts folder when no font path is configured."""

DEFAULT_REGULAR_FONT_NAME: Final[str] = "Montserrat-Regular.ttf"
"""Non-bold counterpart of DEFAULT_FONT_NAME."""
