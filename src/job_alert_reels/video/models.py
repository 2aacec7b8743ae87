"""Data models for the reel timeline.

A RenderJob is an immutable description of one reel: canvas, frame rate,
duration, a background that fades in, and an ordered list of timed layers.
Every layer answers a single question, ``evaluate(t)``: is it drawn at
time ``t``, with which opacity, and how far from its anchor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from job_alert_reels.constants import (
    BACKGROUND_COLOR,
    BACKGROUND_FADE_END,
    BACKGROUND_FADE_START,
    COLOR_BODY,
    FONT_SIZE_HEADLINE,
    PULSE_AMPLITUDE,
    PULSE_BASE_OPACITY,
    PULSE_SPEED_HZ,
    PULSE_WINDOW_END,
    PULSE_WINDOW_START,
    SLIDE_OFFSET_HORIZONTAL,
    SLIDE_OFFSET_VERTICAL,
    TEXT_ANIMATION_DURATION,
    VIDEO_DURATION_SECONDS,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)


def ease_out_cubic(p: float) -> float:
    """Ease-out cubic curve: fast start, zero velocity at p=1."""
    return 1 - (1 - p) ** 3


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class SlideDirection(str, Enum):
    """Direction a layer slides in from."""
    UP = "up"
    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


@dataclass(frozen=True)
class LayerState:
    """Evaluated state of a layer at one instant."""
    visible: bool
    opacity: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def hidden(cls) -> "LayerState":
        return cls(visible=False)


HIDDEN = LayerState.hidden()


class TextStyle(BaseModel):
    """Font and color of a text layer."""

    model_config = ConfigDict(frozen=True)

    font_size: int = Field(default=FONT_SIZE_HEADLINE, gt=0)
    color: str = COLOR_BODY
    bold: bool = True
    font_path: Optional[Path] = None  # None = the job's font for this weight


class TimedLayer(BaseModel):
    """Base for layers that slide and fade in from ``start``."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    start: float = Field(default=0.0, ge=0)
    duration: float = Field(default=TEXT_ANIMATION_DURATION, ge=0)
    slide: SlideDirection = SlideDirection.UP

    is_overlay: bool = False

    @model_validator(mode="after")
    def _check_duration(self) -> "TimedLayer":
        if self.slide != SlideDirection.NONE and self.duration <= 0:
            raise ValueError("animation duration must be > 0 for sliding layers")
        return self

    def progress(self, t: float) -> float:
        """Local animation progress in [0, 1]."""
        if self.duration <= 0:
            return 1.0
        return clamp((t - self.start) / self.duration)

    def evaluate(self, t: float) -> LayerState:
        # Layers that have not started are not drawn at all
        if t < self.start:
            return HIDDEN

        eased = ease_out_cubic(self.progress(t))
        remaining = 1 - eased

        offset_x = 0.0
        offset_y = 0.0
        if self.slide == SlideDirection.UP:
            offset_y = remaining * SLIDE_OFFSET_VERTICAL
        elif self.slide == SlideDirection.LEFT:
            offset_x = remaining * SLIDE_OFFSET_HORIZONTAL
        elif self.slide == SlideDirection.RIGHT:
            offset_x = -remaining * SLIDE_OFFSET_HORIZONTAL

        return LayerState(visible=True, opacity=eased, offset_x=offset_x, offset_y=offset_y)


class TextLayer(TimedLayer):
    """A line of text anchored at its left edge, vertically centered on y."""

    kind: Literal["text"] = "text"
    text: str
    style: TextStyle = Field(default_factory=TextStyle)


class ImageLayer(TimedLayer):
    """An image anchored at its top-left corner."""

    kind: Literal["image"] = "image"
    image_path: Path
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class PulseLayer(TimedLayer):
    """Text redrawn with a sinusoidal opacity inside a time window.

    Drawn after every other layer, independent of the animation state of
    the layer it highlights.
    """

    kind: Literal["pulse"] = "pulse"
    text: str
    style: TextStyle = Field(default_factory=TextStyle)
    slide: SlideDirection = SlideDirection.NONE
    duration: float = 0.0
    window_start: float = Field(default=PULSE_WINDOW_START, ge=0)
    window_end: float = PULSE_WINDOW_END
    base_opacity: float = PULSE_BASE_OPACITY
    amplitude: float = PULSE_AMPLITUDE
    speed: float = PULSE_SPEED_HZ
    is_overlay: bool = True

    @model_validator(mode="after")
    def _check_window(self) -> "PulseLayer":
        if self.window_end <= self.window_start:
            raise ValueError("pulse window_end must be after window_start")
        return self

    def evaluate(self, t: float) -> LayerState:
        if not (self.window_start < t < self.window_end):
            return HIDDEN
        phase = 2 * math.pi * self.speed * (t - self.window_start)
        opacity = clamp(self.base_opacity + self.amplitude * math.sin(phase))
        return LayerState(visible=True, opacity=opacity)


Layer = Annotated[Union[TextLayer, ImageLayer, PulseLayer], Field(discriminator="kind")]


class BackgroundFade(BaseModel):
    """Background image with a linear fade-in."""

    model_config = ConfigDict(frozen=True)

    image_path: Path
    fade_start: float = Field(default=BACKGROUND_FADE_START, ge=0)
    fade_end: float = BACKGROUND_FADE_END

    @model_validator(mode="after")
    def _check_window(self) -> "BackgroundFade":
        if self.fade_end <= self.fade_start:
            raise ValueError("fade_end must be after fade_start")
        return self

    def evaluate(self, t: float) -> LayerState:
        if t < self.fade_start:
            return HIDDEN
        opacity = clamp((t - self.fade_start) / (self.fade_end - self.fade_start))
        return LayerState(visible=True, opacity=opacity)


class RenderJob(BaseModel):
    """Everything needed to render one reel."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=VIDEO_WIDTH, gt=0)
    height: int = Field(default=VIDEO_HEIGHT, gt=0)
    fps: int = Field(default=VIDEO_FPS, gt=0)
    duration: float = Field(default=VIDEO_DURATION_SECONDS, gt=0)
    background_color: str = BACKGROUND_COLOR
    background: BackgroundFade
    layers: list[Layer] = Field(default_factory=list)
    font_path: Optional[Path] = None  # bold text
    regular_font_path: Optional[Path] = None  # non-bold text, falls back to font_path
    audio_path: Optional[Path] = None

    @model_validator(mode="after")
    def _check_frame_count(self) -> "RenderJob":
        frames = self.fps * self.duration
        if abs(frames - round(frames)) > 1e-9:
            raise ValueError(
                f"fps * duration must be a whole number of frames, got {frames}"
            )
        return self

    @property
    def total_frames(self) -> int:
        return int(round(self.fps * self.duration))

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def time_at(self, frame_index: int) -> float:
        """Timeline position of a frame in seconds."""
        return frame_index / self.fps


@dataclass(frozen=True)
class FrameState:
    """Evaluated state of every layer for one frame."""
    index: int
    time: float
    background: LayerState
    layers: tuple[LayerState, ...]
