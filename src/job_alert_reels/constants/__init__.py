"""Global constants package for Job Alert Reels.

PACKAGE STRUCTURE:
-----------------
- video.py    : Resolution, FPS, codecs, animation timings, text styling
- paths.py    : Directory paths and file naming
- limits.py   : Instagram limits, polling defaults, timeouts
- status.py   : Container lifecycle and publish status enums

USAGE:
------
    from job_alert_reels.constants import VIDEO_WIDTH, VIDEO_FPS
    from job_alert_reels.constants import ContainerState, get_temp_dir
"""

from .video import (
    VIDEO_WIDTH,
    VIDEO_HEIGHT,
    VIDEO_FPS,
    VIDEO_DURATION_SECONDS,
    FRAME_FILENAME_PATTERN,
    FRAME_INDEX_WIDTH,
    VIDEO_CODEC,
    AUDIO_CODEC,
    PIXEL_FORMAT,
    VIDEO_FORMAT,
    BACKGROUND_COLOR,
    BACKGROUND_FADE_START,
    BACKGROUND_FADE_END,
    TEXT_ANIMATION_DURATION,
    SLIDE_OFFSET_VERTICAL,
    SLIDE_OFFSET_HORIZONTAL,
    TEXT_MARGIN_X,
    DATE_START,
    JOB_ALERT_START,
    COMPANY_START,
    DESIGNATION_START,
    DETAILS_START,
    DETAILS_STAGGER,
    PULSE_WINDOW_START,
    PULSE_WINDOW_END,
    PULSE_BASE_OPACITY,
    PULSE_AMPLITUDE,
    PULSE_SPEED_HZ,
    COLOR_DATE,
    COLOR_ALERT,
    COLOR_BODY,
    COLOR_DESIGNATION,
    FONT_SIZE_DATE,
    FONT_SIZE_ALERT,
    FONT_SIZE_HEADLINE,
    FONT_SIZE_DETAIL,
    DEFAULT_FONT_NAME,
    DEFAULT_REGULAR_FONT_NAME,
)
from .limits import (
    INSTAGRAM_CAPTION_MAX_LENGTH,
    INSTAGRAM_REEL_MIN_DURATION,
    INSTAGRAM_REEL_MAX_DURATION,
    INSTAGRAM_REEL_MAX_SIZE_MB,
    INSTAGRAM_REEL_MIN_DIMENSION,
    INSTAGRAM_REEL_MIN_ASPECT,
    INSTAGRAM_REEL_MAX_ASPECT,
    INSTAGRAM_REEL_MIN_FPS,
    INSTAGRAM_REEL_MAX_FPS,
    CONTAINER_MAX_WAIT_SECONDS,
    CONTAINER_POLL_INTERVAL_SECONDS,
    GRAPH_API_TIMEOUT_SECONDS,
    GEMINI_TIMEOUT_SECONDS,
    SUPABASE_TIMEOUT_SECONDS,
    UPLOAD_TIMEOUT_SECONDS,
    FFPROBE_TIMEOUT_SECONDS,
    CLOUDINARY_CHUNKED_THRESHOLD_BYTES,
)
from .paths import (
    PROJECT_ROOT,
    ASSETS_DIR_NAME,
    FONTS_DIR_NAME,
    BACKGROUND_IMAGE_FILENAME,
    BACKGROUND_MUSIC_FILENAME,
    LAYOUT_CONFIG_FILENAME,
    VIDEO_FILENAME_PREFIX,
    FRAMES_DIR_PREFIX,
    get_project_root,
    get_assets_dir,
    get_config_dir,
    get_temp_dir,
    get_logs_dir,
)
from .status import (
    ContainerState,
    RemoteStatus,
    PublishFailure,
    PublishStatus,
)

NOT_SPECIFIED = "Not specified"
"""Sentinel the extractor uses for job fields missing from the message."""
