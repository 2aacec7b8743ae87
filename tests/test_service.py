"""Tests for ReelService orchestration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from job_alert_reels.constants import ContainerState, PublishFailure, PublishStatus
from job_alert_reels.exceptions import EncodeError, InstagramAPIError, UploadError
from job_alert_reels.instagram import PublishOutcome
from job_alert_reels.service import ReelService
from job_alert_reels.video import GeneratedVideo

VIDEO_URL = "https://tmpfiles.org/dl/1/job-alert-video-1.mp4"


def _generator(video: GeneratedVideo | None = None, error: Exception | None = None) -> MagicMock:
    generator = MagicMock()
    generator.uploader.cleanup.return_value = 1
    if error:
        generator.generate.side_effect = error
    else:
        generator.generate.return_value = video or GeneratedVideo(
            filename="job-alert-video-1.mp4", download_url=VIDEO_URL
        )
    return generator


def _publisher_factory(outcome: PublishOutcome | None = None, error: Exception | None = None):
    publisher = MagicMock()
    publisher.publish = AsyncMock(return_value=outcome, side_effect=error)
    factory = MagicMock(return_value=publisher)
    return factory, publisher


@pytest.fixture
def instagram_settings(app_settings):
    return app_settings.model_copy(update={"insta_app_id": "1784000", "insta_access_token": "token"})


class TestGenerateAndPublish:
    @pytest.mark.asyncio
    async def test_skipped_without_credentials(self, app_settings, job_fields):
        factory, _ = _publisher_factory()
        service = ReelService(app_settings, generator=_generator(), publisher_factory=factory)

        result = await service.generate_and_publish(job_fields)

        assert result.publish_status == PublishStatus.SKIPPED
        assert result.video_url == VIDEO_URL
        factory.assert_not_called()
        body = result.to_response()
        assert body == {
            "success": True,
            "videoUrl": VIDEO_URL,
            "publishStatus": "skipped",
            "message": "Video generated successfully (reel upload skipped - missing credentials or caption)",
        }
        service.generator.uploader.cleanup.assert_not_called()

    @pytest.mark.asyncio
    async def test_skipped_without_caption(self, instagram_settings):
        from job_alert_reels.extraction import JobFields

        factory, _ = _publisher_factory()
        service = ReelService(instagram_settings, generator=_generator(), publisher_factory=factory)

        result = await service.generate_and_publish(JobFields(company_name="Acme"))

        assert result.publish_status == PublishStatus.SKIPPED
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_published(self, instagram_settings, job_fields):
        outcome = PublishOutcome(
            success=True,
            container_id="17890001",
            publication_id="18000042",
            state=ContainerState.PUBLISHED,
        )
        factory, publisher = _publisher_factory(outcome)
        service = ReelService(instagram_settings, generator=_generator(), publisher_factory=factory)

        result = await service.generate_and_publish(job_fields)

        assert result.publish_status == PublishStatus.PUBLISHED
        publisher.publish.assert_awaited_once()
        args, kwargs = publisher.publish.call_args
        assert args == (VIDEO_URL, "Acme is hiring! Apply now.")
        assert kwargs["max_wait"] == instagram_settings.reel_max_wait_seconds
        assert kwargs["poll_interval"] == instagram_settings.reel_poll_interval_seconds
        config = factory.call_args.args[0]
        assert config.app_id == "1784000"

        body = result.to_response()
        assert body["message"] == "Video generated and reel uploaded successfully"
        assert body["reelResult"]["publicationId"] == "18000042"
        service.generator.uploader.cleanup.assert_called_once()

    @pytest.mark.asyncio
    async def test_explicit_caption_wins(self, instagram_settings, job_fields):
        outcome = PublishOutcome(success=True, publication_id="1")
        factory, publisher = _publisher_factory(outcome)
        service = ReelService(instagram_settings, generator=_generator(), publisher_factory=factory)

        await service.generate_and_publish(job_fields, caption="Custom caption")

        assert publisher.publish.call_args.args[1] == "Custom caption"

    @pytest.mark.asyncio
    async def test_publish_failure_keeps_video(self, instagram_settings, job_fields):
        outcome = PublishOutcome(
            success=False,
            container_id="17890001",
            state=ContainerState.TIMED_OUT,
            reason=PublishFailure.TIMED_OUT,
            error_message="Container not ready after 300 seconds",
        )
        factory, _ = _publisher_factory(outcome)
        service = ReelService(instagram_settings, generator=_generator(), publisher_factory=factory)

        result = await service.generate_and_publish(job_fields)

        assert result.publish_status == PublishStatus.FAILED
        body = result.to_response()
        assert body["success"] is True
        assert body["videoUrl"] == VIDEO_URL
        assert body["reelError"] == "Container not ready after 300 seconds"
        assert body["reelResult"]["reason"] == "TIMED_OUT"
        assert body["message"] == "Video generated but reel upload failed"
        service.generator.uploader.cleanup.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_exception_keeps_video(self, instagram_settings, job_fields):
        factory, _ = _publisher_factory(error=InstagramAPIError("connection reset"))
        service = ReelService(instagram_settings, generator=_generator(), publisher_factory=factory)

        result = await service.generate_and_publish(job_fields)

        assert result.publish_status == PublishStatus.FAILED
        assert result.reel_error == "connection reset"
        assert "reelResult" not in result.to_response()
        service.generator.uploader.cleanup.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_failure_raises(self, instagram_settings, job_fields):
        video = GeneratedVideo(filename="v.mp4", download_url=None, error="HTTP 503")
        factory, _ = _publisher_factory()
        service = ReelService(instagram_settings, generator=_generator(video), publisher_factory=factory)

        with pytest.raises(UploadError, match="no download URL available: HTTP 503"):
            await service.generate_and_publish(job_fields)
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_encode_failure_propagates(self, app_settings, job_fields):
        service = ReelService(app_settings, generator=_generator(error=EncodeError("ffmpeg exited with code 1")))
        with pytest.raises(EncodeError):
            await service.generate_and_publish(job_fields)
