"""Tests for video upload hosts."""

from unittest.mock import patch

import httpx
import pytest

from job_alert_reels.exceptions import UploadError
from job_alert_reels.instagram import CloudinaryUploader, TmpFilesUploader, create_uploader


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "job-alert-video-1.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


class TestTmpFilesUploader:
    def test_direct_url(self):
        assert (
            TmpFilesUploader.to_direct_url("https://tmpfiles.org/12345/video.mp4")
            == "https://tmpfiles.org/dl/12345/video.mp4"
        )
        assert (
            TmpFilesUploader.to_direct_url("https://tmpfiles.org/dl/12345/video.mp4")
            == "https://tmpfiles.org/dl/12345/video.mp4"
        )

    def test_upload(self, video_file):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={"status": "success", "data": {"url": "http://tmpfiles.org/777/job-alert-video-1.mp4"}},
            )

        uploader = TmpFilesUploader(transport=httpx.MockTransport(handler))
        url = uploader.upload(video_file)

        assert url == "http://tmpfiles.org/dl/777/job-alert-video-1.mp4"
        request = seen[0]
        assert request.method == "POST"
        assert request.url == "https://tmpfiles.org/api/v1/upload"
        assert b'filename="job-alert-video-1.mp4"' in request.content

    def test_http_error(self, video_file):
        uploader = TmpFilesUploader(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        with pytest.raises(UploadError, match="503"):
            uploader.upload(video_file)

    def test_unexpected_body(self, video_file):
        uploader = TmpFilesUploader(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"status": "error"}))
        )
        with pytest.raises(UploadError):
            uploader.upload(video_file)

    def test_error_body_with_text_data(self, video_file):
        uploader = TmpFilesUploader(
            transport=httpx.MockTransport(
                lambda r: httpx.Response(200, json={"status": "error", "data": "quota exceeded"})
            )
        )
        with pytest.raises(UploadError, match="quota exceeded"):
            uploader.upload(video_file)

    def test_non_object_body(self, video_file):
        uploader = TmpFilesUploader(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=["ok"])))
        with pytest.raises(UploadError):
            uploader.upload(video_file)

    def test_cleanup_is_noop(self):
        assert TmpFilesUploader().cleanup() == 0

    def test_missing_file(self, tmp_path):
        uploader = TmpFilesUploader(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with pytest.raises(UploadError):
            uploader.upload(tmp_path / "missing.mp4")


class TestCloudinaryUploader:
    def test_upload_small_file(self, video_file):
        uploader = CloudinaryUploader("cloud", "key", "secret")
        result = {"secure_url": "https://res.cloudinary.com/v.mp4", "public_id": "job-alert-reels/v"}

        with patch("cloudinary.uploader.upload", return_value=result) as upload, \
                patch("cloudinary.uploader.upload_large") as upload_large:
            url = uploader.upload(video_file)

        assert url == "https://res.cloudinary.com/v.mp4"
        upload_large.assert_not_called()
        assert upload.call_args.kwargs["resource_type"] == "video"

    def test_cleanup(self, video_file):
        uploader = CloudinaryUploader("cloud", "key", "secret")
        result = {"secure_url": "https://res.cloudinary.com/v.mp4", "public_id": "job-alert-reels/v"}

        with patch("cloudinary.uploader.upload", return_value=result), \
                patch("cloudinary.uploader.destroy") as destroy:
            uploader.upload(video_file)
            assert uploader.cleanup() == 1

        destroy.assert_called_once_with("job-alert-reels/v", resource_type="video")

    @pytest.mark.asyncio
    async def test_cleanup_async(self, video_file):
        uploader = CloudinaryUploader("cloud", "key", "secret")
        result = {"secure_url": "https://res.cloudinary.com/v.mp4", "public_id": "job-alert-reels/v"}

        with patch("cloudinary.uploader.upload", return_value=result), \
                patch("cloudinary.uploader.destroy") as destroy:
            uploader.upload(video_file)
            assert await uploader.cleanup_async() == 1
            assert await uploader.cleanup_async() == 0

        destroy.assert_called_once()

    def test_missing_url(self, video_file):
        uploader = CloudinaryUploader("cloud", "key", "secret")
        with patch("cloudinary.uploader.upload", return_value={"error": "nope"}):
            with pytest.raises(UploadError):
                uploader.upload(video_file)


class TestCreateUploader:
    def test_default_is_tmpfiles(self, app_settings):
        assert isinstance(create_uploader(app_settings), TmpFilesUploader)

    def test_cloudinary_requires_credentials(self, app_settings):
        settings = app_settings.model_copy(update={"upload_provider": "cloudinary"})
        with pytest.raises(ValueError, match="CLOUDINARY_CLOUD_NAME"):
            create_uploader(settings)

    def test_cloudinary(self, app_settings):
        settings = app_settings.model_copy(
            update={
                "upload_provider": "cloudinary",
                "cloudinary_cloud_name": "cloud",
                "cloudinary_api_key": "key",
                "cloudinary_api_secret": "secret",
            }
        )
        assert isinstance(create_uploader(settings), CloudinaryUploader)
