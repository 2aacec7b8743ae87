"""Reel generation and publishing service.

One request = one unit of work: render, encode, upload, then (when
credentials and a caption are available) publish. Render, encode and
upload failures abort the request; publish failures don't, the caller
still gets the video URL with a separate publish status.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .config import AppSettings
from .constants import PublishStatus
from .exceptions import InstagramAPIError, UploadError
from .extraction.models import JobFields
from .instagram import (
    InstagramClient,
    InstagramConfig,
    PublishOutcome,
    ReelPublisher,
    create_uploader,
)
from .video import GeneratedVideo, JobAlertVideoGenerator

logger = logging.getLogger("job_alert_reels.service")


@dataclass(frozen=True)
class ReelGenerationResult:
    """Video URL plus the outcome of the publish step."""

    video_url: str
    filename: str
    publish_status: PublishStatus
    publish_outcome: Optional[PublishOutcome] = None
    reel_error: Optional[str] = None

    @property
    def message(self) -> str:
        if self.publish_status == PublishStatus.PUBLISHED:
            return "Video generated and reel uploaded successfully"
        if self.publish_status == PublishStatus.FAILED:
            return "Video generated but reel upload failed"
        return "Video generated successfully (reel upload skipped - missing credentials or caption)"

    def to_response(self) -> dict:
        """Body of a successful POST /api/generate-video."""
        body = {
            "success": True,
            "videoUrl": self.video_url,
            "publishStatus": self.publish_status.value,
            "message": self.message,
        }
        if self.publish_status == PublishStatus.PUBLISHED:
            body["reelResult"] = self.publish_outcome.to_dict()
        elif self.publish_status == PublishStatus.FAILED:
            body["reelError"] = self.reel_error
            if self.publish_outcome is not None:
                body["reelResult"] = self.publish_outcome.to_dict()
        return body


class ReelService:
    """Stateless orchestration of generate -> upload -> publish.

    All configuration comes from the settings passed in; nothing is kept
    between requests.
    """

    def __init__(
        self,
        settings: AppSettings,
        generator: JobAlertVideoGenerator | None = None,
        publisher_factory: Callable[[InstagramConfig], ReelPublisher] | None = None,
    ):
        self.settings = settings
        self.generator = generator or JobAlertVideoGenerator(
            settings=settings,
            uploader=create_uploader(settings),
        )
        self._publisher_factory = publisher_factory or (
            lambda config: ReelPublisher(InstagramClient(config))
        )

    async def generate_video(self, fields: JobFields) -> GeneratedVideo:
        """Render, encode and upload in a worker thread."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.generator.generate, fields)

    async def publish(self, video_url: str, caption: str) -> PublishOutcome:
        config = InstagramConfig.from_settings(self.settings)
        publisher = self._publisher_factory(config)
        return await publisher.publish(
            video_url,
            caption,
            max_wait=self.settings.reel_max_wait_seconds,
            poll_interval=self.settings.reel_poll_interval_seconds,
        )

    async def cleanup_uploads(self) -> int:
        """Remove hosted copies once Instagram has fetched the video."""
        loop = asyncio.get_running_loop()
        deleted = await loop.run_in_executor(None, self.generator.uploader.cleanup)
        if deleted:
            logger.info(f"Cleaned up {deleted} uploaded video(s)")
        return deleted

    async def generate_and_publish(
        self,
        fields: JobFields,
        caption: Optional[str] = None,
    ) -> ReelGenerationResult:
        """Generate a reel and publish it when possible.

        Args:
            fields: Job fields drawn on the video.
            caption: Reel caption. Defaults to the extracted caption.

        Raises:
            VideoGenerationError: If rendering or encoding failed, or the
                upload produced no download URL.
        """
        video = await self.generate_video(fields)
        if not video.download_url:
            reason = f": {video.error}" if video.error else ""
            raise UploadError(f"Video generation failed - no download URL available{reason}")

        caption = caption if caption is not None else fields.caption
        if not self.settings.has_instagram_credentials() or not caption:
            logger.info("Instagram credentials or caption not available, skipping reel upload")
            return ReelGenerationResult(
                video_url=video.download_url,
                filename=video.filename,
                publish_status=PublishStatus.SKIPPED,
            )

        logger.info(f"Uploading reel to Instagram from {video.download_url}")
        try:
            outcome = await self.publish(video.download_url, caption)
        except (InstagramAPIError, ValueError) as e:
            logger.error(f"Reel upload error: {e}")
            return ReelGenerationResult(
                video_url=video.download_url,
                filename=video.filename,
                publish_status=PublishStatus.FAILED,
                reel_error=str(e),
            )

        if outcome.success:
            logger.info(f"Reel published: {outcome.publication_id}")
            await self.cleanup_uploads()
            return ReelGenerationResult(
                video_url=video.download_url,
                filename=video.filename,
                publish_status=PublishStatus.PUBLISHED,
                publish_outcome=outcome,
            )

        logger.error(f"Reel upload failed: {outcome.reason.value if outcome.reason else ''} {outcome.error_message}")
        return ReelGenerationResult(
            video_url=video.download_url,
            filename=video.filename,
            publish_status=PublishStatus.FAILED,
            publish_outcome=outcome,
            reel_error=outcome.error_message,
        )
