"""Instagram reel publishing via the Graph API."""

from .client import InstagramClient, get_error_info, normalize_caption
from .models import ContainerJob, InstagramConfig, PublishOutcome
from .publisher import ReelPublisher
from .status import normalize_status
from .uploader import CloudinaryUploader, TmpFilesUploader, VideoUploader, create_uploader

__all__ = [
    "CloudinaryUploader",
    "ContainerJob",
    "InstagramClient",
    "InstagramConfig",
    "PublishOutcome",
    "ReelPublisher",
    "TmpFilesUploader",
    "VideoUploader",
    "create_uploader",
    "get_error_info",
    "normalize_caption",
    "normalize_status",
]
