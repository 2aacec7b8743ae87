"""Frame renderer for reel timelines.

Turns a RenderJob into PIL images, one per frame:
- Background color, then the background image faded in
- Timed layers in declaration order
- Overlay layers (pulse highlights) last

Rendering is a pure function of the frame index. All assets are loaded
when the renderer is built, so a missing font or image fails before the
first frame is produced.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterator, Optional, Union

from PIL import Image, ImageColor, ImageDraw, ImageFont, UnidentifiedImageError

from job_alert_reels.exceptions import ResourceLoadError

from .models import (
    FrameState,
    ImageLayer,
    LayerState,
    PulseLayer,
    RenderJob,
    TextLayer,
    TextStyle,
)

logger = logging.getLogger(__name__)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class TimelineRenderer:
    """Renders the frames of a RenderJob.

    Usage:
        renderer = TimelineRenderer(job)
        for frame in renderer.frames():
            frame.save(...)
    """

    def __init__(self, job: RenderJob):
        self.job = job
        self._fonts: dict[tuple[Optional[Path], int], FontType] = {}
        self._images: dict[int, Image.Image] = {}

        self._background = self._load_background()
        self._base = Image.new("RGBA", job.size, self._rgba(job.background_color, 1.0))

        for position, layer in enumerate(job.layers):
            if isinstance(layer, (TextLayer, PulseLayer)):
                self._font_for(layer)
            elif isinstance(layer, ImageLayer):
                self._images[position] = self._load_layer_image(layer)

        if job.audio_path is not None and not job.audio_path.is_file():
            raise ResourceLoadError(f"Audio file not found: {job.audio_path}", path=job.audio_path)

        logger.debug(
            f"Renderer ready: {job.width}x{job.height} @ {job.fps}fps, "
            f"{job.total_frames} frames, {len(job.layers)} layers"
        )

    def __len__(self) -> int:
        return self.job.total_frames

    def __iter__(self) -> Iterator[Image.Image]:
        return self.frames()

    # =========================================================================
    # Resource loading
    # =========================================================================

    def _open_image(self, path: Path) -> Image.Image:
        try:
            with Image.open(path) as image:
                return image.convert("RGBA")
        except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
            raise ResourceLoadError(f"Could not load image {path}: {e}", path=path) from e

    def _load_background(self) -> Image.Image:
        image = self._open_image(self.job.background.image_path)
        if image.size != self.job.size:
            image = image.resize(self.job.size, Image.Resampling.LANCZOS)
        return image

    def _load_layer_image(self, layer: ImageLayer) -> Image.Image:
        image = self._open_image(layer.image_path)
        if layer.width or layer.height:
            width = layer.width or round(image.width * layer.height / image.height)
            height = layer.height or round(image.height * layer.width / image.width)
            image = image.resize((width, height), Image.Resampling.LANCZOS)
        return image

    def _font_path(self, style: TextStyle) -> Optional[Path]:
        if style.font_path is not None:
            return style.font_path
        if not style.bold and self.job.regular_font_path is not None:
            return self.job.regular_font_path
        return self.job.font_path

    def _stroke_width(self, style: TextStyle) -> int:
        # Pillow's built-in font has a single weight, so bold gets a stroke
        if style.bold and self._font_path(style) is None:
            return max(1, round(style.font_size / 24))
        return 0

    def _font_for(self, layer: Union[TextLayer, PulseLayer]) -> FontType:
        path = self._font_path(layer.style)
        size = layer.style.font_size
        key = (path, size)
        if key not in self._fonts:
            self._fonts[key] = self._load_font(path, size)
        return self._fonts[key]

    @staticmethod
    def _load_font(path: Optional[Path], size: int) -> FontType:
        if path is None:
            return ImageFont.load_default(size=size)
        try:
            return ImageFont.truetype(str(path), size)
        except OSError as e:
            raise ResourceLoadError(f"Could not load font {path}: {e}", path=path) from e

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(self, index: int) -> FrameState:
        """Evaluate every layer for a frame without drawing anything."""
        self._check_index(index)
        t = self.job.time_at(index)
        return FrameState(
            index=index,
            time=t,
            background=self.job.background.evaluate(t),
            layers=tuple(layer.evaluate(t) for layer in self.job.layers),
        )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.job.total_frames:
            raise IndexError(
                f"Frame {index} out of range (0..{self.job.total_frames - 1})"
            )

    # =========================================================================
    # Drawing
    # =========================================================================

    def render_frame(self, index: int) -> Image.Image:
        """Render one frame as an RGB image."""
        state = self.evaluate(index)
        canvas = self._base.copy()

        if state.background.visible:
            canvas.alpha_composite(self._with_opacity(self._background, state.background.opacity))

        # Two passes: regular layers, then overlays on top of everything
        for overlay_pass in (False, True):
            for position, (layer, layer_state) in enumerate(zip(self.job.layers, state.layers)):
                if layer.is_overlay != overlay_pass or not layer_state.visible:
                    continue
                self._draw_layer(canvas, position, layer, layer_state)

        return canvas.convert("RGB")

    def frames(self) -> Iterator[Image.Image]:
        """Yield frames in order. Each call starts a fresh pass."""
        for index in range(self.job.total_frames):
            yield self.render_frame(index)

    def _draw_layer(self, canvas: Image.Image, position: int, layer, state: LayerState) -> None:
        if state.opacity <= 0:
            return
        if isinstance(layer, ImageLayer):
            image = self._with_opacity(self._images[position], state.opacity)
            self._paste(canvas, image, layer.x + state.offset_x, layer.y + state.offset_y)
        else:
            self._draw_text(canvas, layer, state)

    def _draw_text(self, canvas: Image.Image, layer: Union[TextLayer, PulseLayer], state: LayerState) -> None:
        if not layer.text:
            return
        font = self._font_for(layer)
        stroke = self._stroke_width(layer.style)
        x = layer.x + state.offset_x
        y = layer.y + state.offset_y

        # Left edge at x, vertical middle at y
        left, top, right, bottom = font.getbbox(layer.text, stroke_width=stroke)
        origin_y = y - (top + bottom) / 2

        x0 = math.floor(x + left)
        y0 = math.floor(origin_y + top)
        width = math.ceil(x + right) - x0
        height = math.ceil(origin_y + bottom) - y0
        if width <= 0 or height <= 0:
            return

        fill = self._rgba(layer.style.color, state.opacity)
        patch = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(patch).text(
            (x - x0, origin_y - y0),
            layer.text,
            font=font,
            fill=fill,
            stroke_width=stroke,
            stroke_fill=fill,
        )
        self._paste(canvas, patch, x0, y0)

    @staticmethod
    def _paste(canvas: Image.Image, patch: Image.Image, x: float, y: float) -> None:
        """Alpha-composite a patch at (x, y), clipped to the canvas."""
        x0, y0 = math.floor(x), math.floor(y)
        left = max(x0, 0)
        top = max(y0, 0)
        right = min(x0 + patch.width, canvas.width)
        bottom = min(y0 + patch.height, canvas.height)
        if right <= left or bottom <= top:
            return
        region = patch.crop((left - x0, top - y0, right - x0, bottom - y0))
        canvas.alpha_composite(region, dest=(left, top))

    @staticmethod
    def _with_opacity(image: Image.Image, opacity: float) -> Image.Image:
        if opacity >= 1:
            return image
        faded = image.copy()
        alpha = faded.getchannel("A").point(lambda a: round(a * opacity))
        faded.putalpha(alpha)
        return faded

    @staticmethod
    def _rgba(color: str, opacity: float) -> tuple[int, int, int, int]:
        r, g, b = ImageColor.getrgb(color)[:3]
        return (r, g, b, round(255 * max(0.0, min(1.0, opacity))))
