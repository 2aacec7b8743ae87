"""Job alert video generation.

Render -> encode -> upload for one job posting. The local MP4 only lives
between encoding and the end of the upload attempt.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from job_alert_reels.config import AppSettings
from job_alert_reels.constants import (
    DEFAULT_FONT_NAME,
    DEFAULT_REGULAR_FONT_NAME,
    VIDEO_FILENAME_PREFIX,
    get_temp_dir,
)
from job_alert_reels.exceptions import UploadError
from job_alert_reels.extraction.models import JobFields

from .encoder import EncoderSettings, FrameEncoder, ProgressCallback
from .layout import LayoutConfig, build_render_job, load_layout_config
from .models import RenderJob
from .timeline import TimelineRenderer

logger = logging.getLogger(__name__)


@dataclass
class GeneratedVideo:
    """Outcome of one generation run.

    ``download_url`` is None when the video was encoded but the upload
    failed; ``error`` then says why.
    """

    filename: str
    download_url: Optional[str]
    error: Optional[str] = None

    @property
    def uploaded(self) -> bool:
        return self.download_url is not None


class JobAlertVideoGenerator:
    """Builds, encodes and uploads job alert reels."""

    def __init__(
        self,
        settings: AppSettings,
        uploader,
        encoder: FrameEncoder | None = None,
        layout: LayoutConfig | None = None,
    ):
        """Initialize generator.

        Args:
            settings: Application settings (assets, fonts, ffmpeg).
            uploader: Upload host turning the MP4 into a public URL.
            encoder: Frame encoder. Built from settings if omitted.
            layout: Reel layout. Loaded from config/layout.yaml if omitted.
        """
        self.settings = settings
        self.uploader = uploader
        self.encoder = encoder or FrameEncoder(
            EncoderSettings(
                ffmpeg_path=settings.ffmpeg_path,
                ffprobe_path=settings.ffprobe_path,
                temp_dir=settings.temp_dir,
            )
        )
        self.layout = layout or load_layout_config(settings.layout_path)

    @property
    def work_dir(self) -> Path:
        if self.settings.temp_dir is not None:
            self.settings.temp_dir.mkdir(parents=True, exist_ok=True)
            return self.settings.temp_dir
        return get_temp_dir()

    def _default_audio(self) -> Optional[Path]:
        music = self.settings.music_path
        if music.is_file():
            return music
        logger.warning(f"Background music not found at {music}, creating video without audio")
        return None

    def _default_font(self) -> Optional[Path]:
        if self.settings.font_path is not None:
            return self.settings.font_path
        font = self.settings.fonts_dir / DEFAULT_FONT_NAME
        return font if font.is_file() else None

    def _regular_font(self) -> Optional[Path]:
        if self.settings.regular_font_path is not None:
            return self.settings.regular_font_path
        font = self.settings.fonts_dir / DEFAULT_REGULAR_FONT_NAME
        return font if font.is_file() else None

    def build_job(
        self,
        fields: JobFields,
        today: date | None = None,
        audio_path: Path | None = None,
    ) -> RenderJob:
        """Build the RenderJob for a posting.

        An explicit audio_path must exist (checked by the renderer); without
        one the default music asset is used when present.
        """
        return build_render_job(
            fields,
            background_image=self.settings.background_image_path,
            layout=self.layout,
            font_path=self._default_font(),
            regular_font_path=self._regular_font(),
            audio_path=audio_path if audio_path is not None else self._default_audio(),
            today=today,
        )

    def render_video(
        self,
        job: RenderJob,
        output_path: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """Render and encode a job into output_path."""
        renderer = TimelineRenderer(job)
        logger.info(f"Rendering {len(renderer)} frames")
        return self.encoder.encode(
            renderer.frames(),
            fps=job.fps,
            duration=job.duration,
            output_path=output_path,
            audio_path=job.audio_path,
            progress_callback=progress_callback,
        )

    def new_filename(self) -> str:
        return f"{VIDEO_FILENAME_PREFIX}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.mp4"

    def generate(
        self,
        fields: JobFields,
        progress_callback: ProgressCallback | None = None,
        today: date | None = None,
    ) -> GeneratedVideo:
        """Render, encode and upload a reel for a posting.

        Render and encode failures propagate. An upload failure is reported
        in the result instead. The local video is removed either way.
        """
        job = self.build_job(fields, today=today)
        filename = self.new_filename()
        output_path = self.work_dir / filename

        self.render_video(job, output_path, progress_callback)

        try:
            download_url = self.uploader.upload(output_path)
        except UploadError as e:
            logger.error(f"Upload failed for {filename}: {e}")
            return GeneratedVideo(filename=filename, download_url=None, error=str(e))
        finally:
            if output_path.exists():
                output_path.unlink()
                logger.info(f"Deleted local video {filename}")

        logger.info(f"Video available at {download_url}")
        return GeneratedVideo(filename=filename, download_url=download_url)
