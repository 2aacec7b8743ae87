"""Job alert reel rendering.

Timeline rendering with Pillow, encoding with FFmpeg and upload of the
finished MP4.
"""

from .encoder import (
    EncoderSettings,
    FrameEncoder,
    build_ffmpeg_command,
    expected_output_duration,
)
from .generator import GeneratedVideo, JobAlertVideoGenerator
from .layout import LayoutConfig, build_render_job, load_layout_config
from .models import (
    BackgroundFade,
    FrameState,
    ImageLayer,
    LayerState,
    PulseLayer,
    RenderJob,
    SlideDirection,
    TextLayer,
    TextStyle,
    ease_out_cubic,
)
from .probe import (
    CompatibilityReport,
    analyze_reel_compatibility,
    build_fix_command,
    check_video,
    parse_frame_rate,
    probe_duration,
    probe_video,
)
from .timeline import TimelineRenderer

__all__ = [
    "BackgroundFade",
    "CompatibilityReport",
    "EncoderSettings",
    "FrameEncoder",
    "FrameState",
    "GeneratedVideo",
    "ImageLayer",
    "JobAlertVideoGenerator",
    "LayerState",
    "LayoutConfig",
    "PulseLayer",
    "RenderJob",
    "SlideDirection",
    "TextLayer",
    "TextStyle",
    "TimelineRenderer",
    "analyze_reel_compatibility",
    "build_ffmpeg_command",
    "build_fix_command",
    "build_render_job",
    "check_video",
    "ease_out_cubic",
    "expected_output_duration",
    "load_layout_config",
    "parse_frame_rate",
    "probe_duration",
    "probe_video",
]
