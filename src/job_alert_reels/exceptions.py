"""Exception hierarchy for Job Alert Reels.

JobAlertError
 +-- VideoGenerationError
 |    +-- ResourceLoadError     asset missing, raised before any frame
 |    +-- EncodeError           ffmpeg failed, carries its stderr
 |    +-- UploadError           upload host rejected the video
 |    +-- ProbeError            ffprobe failed or returned garbage
 +-- InstagramAPIError          Graph API call failed
 |    +-- ContainerCreateError
 |    +-- ContainerFailedError  remote ERROR or EXPIRED
 |    +-- ContainerTimeoutError
 |    +-- PublishError
 +-- ExtractionError            Gemini call or response parsing failed
 +-- DatastoreError             Supabase insert failed
"""

from __future__ import annotations

from typing import Any


class JobAlertError(Exception):
    """Base exception for all Job Alert Reels errors."""

    pass


# =============================================================================
# Video generation
# =============================================================================


class VideoGenerationError(JobAlertError):
    """Base exception for render, encode and upload errors."""

    pass


class ResourceLoadError(VideoGenerationError):
    """Background image, font or audio asset could not be loaded."""

    def __init__(self, message: str, path: Any = None):
        super().__init__(message)
        self.path = path


class EncodeError(VideoGenerationError):
    """ffmpeg exited non-zero or its progress stream was unreadable."""

    def __init__(self, message: str, stderr: str = "", returncode: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base


class UploadError(VideoGenerationError):
    """Uploading the rendered video to a public host failed."""

    pass


class ProbeError(VideoGenerationError):
    """ffprobe could not inspect a video file."""

    pass


# =============================================================================
# Instagram
# =============================================================================


class InstagramAPIError(JobAlertError):
    """Base exception for Instagram API errors."""

    def __init__(
        self,
        message: str,
        error_code: int | None = None,
        error_subcode: int | None = None,
        status_code: int | None = None,
        body: Any = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.error_subcode = error_subcode
        self.status_code = status_code
        self.body = body
        self.user_message = user_message


class ContainerCreateError(InstagramAPIError):
    """The reel container could not be created."""

    pass


class ContainerFailedError(InstagramAPIError):
    """Instagram reported the container as failed or expired."""

    def __init__(self, message: str, state: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.state = state


class ContainerTimeoutError(InstagramAPIError):
    """The container did not become ready within the allowed wait."""

    pass


class PublishError(InstagramAPIError):
    """Publishing a ready container failed."""

    pass


# =============================================================================
# Collaborators
# =============================================================================


class ExtractionError(JobAlertError):
    """The job message could not be turned into structured fields."""

    pass


class DatastoreError(JobAlertError):
    """The job record could not be stored."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
