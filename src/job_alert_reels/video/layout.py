"""Job alert reel layout.

The layout describes where each line of the reel sits, when it enters and
how it looks. It lives in ``config/layout.yaml``; text values are format
templates filled from the job fields, e.g. ``"{company_name} is Hiring"``.
If the file is missing the built-in layout below is used.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, TypeAdapter

from job_alert_reels.constants import (
    BACKGROUND_COLOR,
    BACKGROUND_FADE_END,
    BACKGROUND_FADE_START,
    COLOR_ALERT,
    COLOR_BODY,
    COLOR_DATE,
    COLOR_DESIGNATION,
    COMPANY_START,
    DATE_START,
    DESIGNATION_START,
    DETAILS_STAGGER,
    DETAILS_START,
    FONT_SIZE_ALERT,
    FONT_SIZE_DATE,
    FONT_SIZE_DETAIL,
    FONT_SIZE_HEADLINE,
    JOB_ALERT_START,
    LAYOUT_CONFIG_FILENAME,
    PULSE_WINDOW_END,
    PULSE_WINDOW_START,
    TEXT_MARGIN_X,
    VIDEO_DURATION_SECONDS,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
    get_config_dir,
)
from job_alert_reels.extraction.models import JobFields

from .models import BackgroundFade, Layer, RenderJob

_layers_adapter = TypeAdapter(list[Layer])


def _text(text: str, y: float, start: float, slide: str, size: int, color: str) -> dict[str, Any]:
    return {
        "kind": "text",
        "text": text,
        "x": TEXT_MARGIN_X,
        "y": y,
        "start": start,
        "slide": slide,
        "style": {"font_size": size, "color": color},
    }


DEFAULT_LAYERS: list[dict[str, Any]] = [
    _text("{date}", 240, DATE_START, "left", FONT_SIZE_DATE, COLOR_DATE),
    _text("Job Alert!", 300, JOB_ALERT_START, "up", FONT_SIZE_ALERT, COLOR_ALERT),
    _text("{company_name} is Hiring", 400, COMPANY_START, "right", FONT_SIZE_HEADLINE, COLOR_BODY),
    _text("{designation}", 455, DESIGNATION_START, "left", FONT_SIZE_HEADLINE, COLOR_DESIGNATION),
    _text("Location: {location}", 580, DETAILS_START, "up", FONT_SIZE_DETAIL, COLOR_BODY),
    _text("Batch: {batch}", 630, DETAILS_START + DETAILS_STAGGER, "up", FONT_SIZE_DETAIL, COLOR_BODY),
    _text("Apply: {apply_link}", 680, DETAILS_START + 2 * DETAILS_STAGGER, "up", FONT_SIZE_DETAIL, COLOR_BODY),
    {
        "kind": "pulse",
        "text": "Job Alert!",
        "x": TEXT_MARGIN_X,
        "y": 300,
        "window_start": PULSE_WINDOW_START,
        "window_end": PULSE_WINDOW_END,
        "style": {"font_size": FONT_SIZE_ALERT, "color": COLOR_ALERT},
    },
]


class BackgroundSettings(BaseModel):
    """Background color and fade window."""

    color: str = BACKGROUND_COLOR
    fade_start: float = BACKGROUND_FADE_START
    fade_end: float = BACKGROUND_FADE_END


class LayoutConfig(BaseModel):
    """Reel layout loaded from YAML."""

    width: int = VIDEO_WIDTH
    height: int = VIDEO_HEIGHT
    fps: int = VIDEO_FPS
    duration: float = VIDEO_DURATION_SECONDS
    background: BackgroundSettings = Field(default_factory=BackgroundSettings)
    layers: list[dict[str, Any]] = Field(default_factory=lambda: [dict(layer) for layer in DEFAULT_LAYERS])


def load_layout_config(config_path: Path | None = None) -> LayoutConfig:
    """Load the reel layout from YAML."""
    if config_path is None:
        config_path = get_config_dir() / LAYOUT_CONFIG_FILENAME

    if not config_path.exists():
        # Return default layout if file doesn't exist
        return LayoutConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return LayoutConfig(**data)


def format_date(today: date) -> str:
    """Date line shown on the reel, e.g. "18 Oct 2026"."""
    return f"{today.day} {today:%b} {today.year}"


def _fill_templates(layer: dict[str, Any], values: dict[str, str]) -> dict[str, Any]:
    filled = dict(layer)
    if isinstance(filled.get("text"), str):
        filled["text"] = filled["text"].format(**values)
    return filled


def build_render_job(
    fields: JobFields,
    background_image: Path,
    layout: LayoutConfig | None = None,
    font_path: Optional[Path] = None,
    audio_path: Optional[Path] = None,
    today: date | None = None,
    regular_font_path: Optional[Path] = None,
) -> RenderJob:
    """Build the RenderJob for one job posting.

    Args:
        fields: Extracted job fields.
        background_image: Image faded in behind the text.
        layout: Layout to use. Defaults to the built-in layout.
        font_path: TrueType font for bold text. None uses Pillow's default font.
        audio_path: Music track muxed into the video, if any.
        today: Date shown on the reel. Defaults to today.
        regular_font_path: TrueType font for non-bold text. Defaults to font_path.

    Returns:
        A validated RenderJob.
    """
    layout = layout or LayoutConfig()
    values = fields.video_values()
    values["date"] = format_date(today or date.today())

    layers = _layers_adapter.validate_python(
        [_fill_templates(layer, values) for layer in layout.layers]
    )

    return RenderJob(
        width=layout.width,
        height=layout.height,
        fps=layout.fps,
        duration=layout.duration,
        background_color=layout.background.color,
        background=BackgroundFade(
            image_path=background_image,
            fade_start=layout.background.fade_start,
            fade_end=layout.background.fade_end,
        ),
        layers=layers,
        font_path=font_path,
        regular_font_path=regular_font_path,
        audio_path=audio_path,
    )
