"""Video hosting for Instagram reel publishing.

The Graph API only accepts videos at publicly accessible URLs, so a
rendered reel is pushed to a host first:
- tmpfiles.org (default, no account needed)
- Cloudinary (free tier, needs credentials)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import httpx

from job_alert_reels.config import AppSettings
from job_alert_reels.constants import (
    CLOUDINARY_CHUNKED_THRESHOLD_BYTES,
    UPLOAD_TIMEOUT_SECONDS,
)
from job_alert_reels.exceptions import UploadError

logger = logging.getLogger("job_alert_reels.upload")

TMPFILES_UPLOAD_URL = "https://tmpfiles.org/api/v1/upload"


class VideoUploader(Protocol):
    """Anything that turns a local file into a public URL."""

    def upload(self, video_path: Path) -> str:
        ...

    def cleanup(self) -> int:
        ...


class TmpFilesUploader:
    """Upload videos to tmpfiles.org.

    tmpfiles.org answers with a page URL (https://tmpfiles.org/12345/x.mp4);
    the direct download link lives under /dl/.
    """

    def __init__(
        self,
        upload_url: str = TMPFILES_UPLOAD_URL,
        timeout: float = UPLOAD_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.upload_url = upload_url
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def to_direct_url(url: str) -> str:
        """Rewrite a tmpfiles.org page URL to its direct download link."""
        if "tmpfiles.org/dl/" in url:
            return url
        return url.replace("tmpfiles.org/", "tmpfiles.org/dl/", 1)

    def upload(self, video_path: Path) -> str:
        """Upload a file and return its direct download URL.

        Raises:
            UploadError: On HTTP errors or an unexpected response.
        """
        logger.info(f"Uploading {video_path.name} to tmpfiles.org")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                with open(video_path, "rb") as f:
                    response = client.post(
                        self.upload_url,
                        files={"file": (video_path.name, f, "video/mp4")},
                    )
        except (httpx.HTTPError, OSError) as e:
            raise UploadError(f"Upload to tmpfiles.org failed: {e}") from e

        if response.status_code >= 400:
            raise UploadError(f"Upload to tmpfiles.org failed: HTTP {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise UploadError("Upload to tmpfiles.org failed: invalid JSON response") from e

        data = result.get("data") if isinstance(result, dict) else None
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url or result.get("status") != "success":
            raise UploadError(f"Upload to tmpfiles.org failed: {result}")

        direct_url = self.to_direct_url(url)
        logger.info(f"Uploaded {video_path.name}: {direct_url}")
        return direct_url

    def cleanup(self) -> int:
        """Nothing to delete; tmpfiles.org expires uploads on its own."""
        return 0


class CloudinaryUploader:
    """Upload videos to Cloudinary to get public URLs for the Instagram API.

    Cloudinary provides a generous free tier (25GB storage, 25k transformations/month).
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "job-alert-reels",
    ):
        self.folder = folder
        self._uploaded_public_ids: list[str] = []

        # Configure Cloudinary
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, video_path: Path) -> str:
        """Upload a video, chunked above 20MB. Returns its secure URL."""
        public_id = f"{self.folder}/{video_path.stem}"
        options = dict(
            folder=self.folder,
            resource_type="video",
            overwrite=True,
            public_id=public_id,
        )

        logger.info(f"Uploading {video_path.name} to Cloudinary")
        try:
            if video_path.stat().st_size > CLOUDINARY_CHUNKED_THRESHOLD_BYTES:
                result = cloudinary.uploader.upload_large(
                    str(video_path),
                    chunk_size=6_000_000,  # 6MB chunks
                    **options,
                )
            else:
                result = cloudinary.uploader.upload(str(video_path), **options)
        except (cloudinary.exceptions.Error, OSError) as e:
            raise UploadError(f"Upload to Cloudinary failed: {e}") from e

        url = result.get("secure_url")
        if not url:
            raise UploadError(f"Upload to Cloudinary failed: {result}")

        self._uploaded_public_ids.append(result["public_id"])
        return url

    def cleanup(self) -> int:
        """Delete uploaded videos from Cloudinary. Returns how many were removed.

        Call this after Instagram has fetched the video to free up storage.
        """
        deleted = 0
        for public_id in self._uploaded_public_ids:
            try:
                cloudinary.uploader.destroy(public_id, resource_type="video")
                deleted += 1
            except cloudinary.exceptions.Error as e:
                logger.warning(f"Could not delete {public_id} from Cloudinary: {e}")

        self._uploaded_public_ids.clear()
        return deleted

    async def cleanup_async(self) -> int:
        """Async wrapper for cleanup."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self.cleanup)


def create_uploader(settings: AppSettings) -> VideoUploader:
    """Pick the upload host configured by UPLOAD_PROVIDER."""
    if settings.upload_provider == "cloudinary":
        missing = [
            name
            for name, value in (
                ("CLOUDINARY_CLOUD_NAME", settings.cloudinary_cloud_name),
                ("CLOUDINARY_API_KEY", settings.cloudinary_api_key),
                ("CLOUDINARY_API_SECRET", settings.cloudinary_api_secret),
            )
            if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please add them to your .env file."
            )
        return CloudinaryUploader(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )
    return TmpFilesUploader()
