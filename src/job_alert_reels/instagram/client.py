"""Instagram Graph API client for publishing reels."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Optional

import httpx

from job_alert_reels.constants import GRAPH_API_TIMEOUT_SECONDS, INSTAGRAM_CAPTION_MAX_LENGTH
from job_alert_reels.exceptions import InstagramAPIError

from .models import InstagramConfig

# File logging is configured by setup_logging(); console output stays quiet
_api_logger = logging.getLogger("instagram_api")


def normalize_caption(caption: str) -> str:
    """Clean a caption for the Graph API.

    Normalizes Unicode to NFC, drops zero-width and control characters
    (newlines and tabs are kept), collapses runs of blank lines and trims
    to Instagram's 2200 character limit.
    """
    if not caption:
        return ""

    caption = unicodedata.normalize("NFC", caption)
    caption = caption.replace("\u00a0", " ").replace("\u2028", "\n").replace("\u2029", "\n")

    cleaned = []
    for char in caption:
        if char in "\n\t":
            cleaned.append(char)
        elif char == "\r":
            continue
        elif unicodedata.category(char) == "Cc":
            continue
        elif char in "\u200b\u200c\ufeff\u00ad":
            continue
        else:
            cleaned.append(char)
    caption = "".join(cleaned)

    caption = re.sub(r"\n{3,}", "\n\n", caption)
    return caption.strip()[:INSTAGRAM_CAPTION_MAX_LENGTH]


# Known Instagram API error codes relevant to reel publishing
INSTAGRAM_ERROR_CODES = {
    2207026: {
        "name": "MEDIA_NOT_READY",
        "description": "Media container is not ready yet",
        "user_message": "Instagram is still processing the video.",
    },
    2207052: {
        "name": "MEDIA_FETCH_FAILED",
        "description": "Media could not be fetched from the URI",
        "user_message": (
            "Instagram could not download the video. Check that the URL is public "
            "and run `job-alert-reels check-video` on the file."
        ),
    },
    2207082: {
        "name": "MEDIA_PROCESSING_FAILED",
        "description": "Video processing failed",
        "user_message": "Instagram could not process the video. Re-encode it with H.264/AAC.",
    },
    # Rate limiting
    4: {
        "name": "RATE_LIMIT",
        "description": "Rate limit reached",
        "user_message": "Instagram rate limit reached. Wait before publishing again.",
    },
    9: {
        "name": "APP_RATE_LIMIT",
        "description": "Application request limit reached",
        "user_message": "App rate limit reached. Wait a few minutes.",
    },
    17: {
        "name": "USER_RATE_LIMIT",
        "description": "User request limit reached",
        "user_message": "You've made too many requests. Please wait a few minutes.",
    },
    # Auth errors
    190: {
        "name": "ACCESS_TOKEN_EXPIRED",
        "description": "Access token expired",
        "user_message": "Your Instagram access token has expired. Generate a new INSTA_ACCESS_TOKEN.",
    },
    10: {
        "name": "PERMISSION_DENIED",
        "description": "Permission denied",
        "user_message": "Your app doesn't have permission to publish. Check your Instagram API setup.",
    },
}

# Error SUBCODES take precedence over the main error code when present
INSTAGRAM_ERROR_SUBCODES = {
    2207069: {
        "name": "DAILY_POSTING_LIMIT",
        "description": "Content Publishing API daily limit exceeded",
        "user_message": (
            "You've reached Instagram's DAILY POSTING LIMIT.\n"
            "The Content Publishing API allows ~25 posts per day per account.\n"
            "This limit resets at midnight UTC."
        ),
    },
}


def get_error_info(error_code: int | None, error_subcode: int | None = None) -> dict:
    """Get detailed error information for an Instagram error code.

    Args:
        error_code: Main error code from API response.
        error_subcode: Sub-error code (takes precedence if known).

    Returns:
        Dict with name, description and user_message.
    """
    if error_subcode is not None and error_subcode in INSTAGRAM_ERROR_SUBCODES:
        return INSTAGRAM_ERROR_SUBCODES[error_subcode]

    if error_code is None:
        return {
            "name": "UNKNOWN",
            "description": "Unknown error",
            "user_message": "An unknown error occurred with Instagram.",
        }
    return INSTAGRAM_ERROR_CODES.get(error_code, {
        "name": f"ERROR_{error_code}",
        "description": f"Unknown error code: {error_code}",
        "user_message": f"Instagram returned error code {error_code}.",
    })


class InstagramClient:
    """Instagram Graph API client for publishing reels.

    Implements the container-based publishing workflow:
    1. Create a REELS media container from a public video URL
    2. Poll the container until Instagram has processed the video
    3. Publish the container

    API Reference:
    https://developers.facebook.com/docs/instagram-platform/content-publishing
    """

    def __init__(
        self,
        config: InstagramConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = GRAPH_API_TIMEOUT_SECONDS,
    ):
        """Initialize Instagram client.

        Args:
            config: Instagram API configuration
            transport: Optional httpx transport (tests use httpx.MockTransport)
            timeout: Per-request timeout in seconds
        """
        self.config = config
        self.base_url = config.api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        # API call counter for logging
        self._api_call_count = 0

    @property
    def api_call_count(self) -> int:
        return self._api_call_count

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        data: dict | None = None,
    ) -> dict:
        """Make a request to the Instagram Graph API.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint (without base URL)
            params: Query parameters
            data: Form body for POST

        Returns:
            JSON response as dict

        Raises:
            InstagramAPIError: On transport errors, non-2xx responses, error
                payloads or bodies that are not a JSON object
        """
        self._api_call_count += 1
        call = self._api_call_count
        url = f"{self.base_url}/{endpoint}"

        params = dict(params or {})
        params["access_token"] = self.config.access_token

        # Log the API call (without token)
        log_params = {k: v for k, v in params.items() if k != "access_token"}
        log_data = {k: (v if k != "caption" else f"<{len(v)} chars>") for k, v in (data or {}).items()}
        _api_logger.info(f"API CALL #{call} | {method} {endpoint} | params: {log_params} | data: {log_data}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                if method.upper() == "GET":
                    response = await client.get(url, params=params)
                elif method.upper() == "POST":
                    response = await client.post(url, params=params, data=data)
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")
        except httpx.HTTPError as e:
            _api_logger.error(f"API CALL #{call} | TRANSPORT ERROR: {e}")
            raise InstagramAPIError(f"Request to {endpoint} failed: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = None

        if isinstance(result, dict) and "error" in result:
            error = result["error"] if isinstance(result["error"], dict) else {"message": str(result["error"])}
            error_code = error.get("code")
            error_subcode = error.get("error_subcode")
            error_info = get_error_info(error_code, error_subcode)
            _api_logger.error(f"API CALL #{call} | HTTP {response.status_code} | ERROR: {error}")
            raise InstagramAPIError(
                message=error.get("message", "Unknown API error"),
                error_code=error_code,
                error_subcode=error_subcode,
                status_code=response.status_code,
                body=result,
                user_message=error_info.get("user_message"),
            )

        if not response.is_success:
            _api_logger.error(f"API CALL #{call} | HTTP {response.status_code} | {response.text[:500]}")
            raise InstagramAPIError(
                f"HTTP {response.status_code} from {endpoint}",
                status_code=response.status_code,
                body=result if result is not None else response.text,
            )

        if not isinstance(result, dict):
            _api_logger.error(f"API CALL #{call} | MALFORMED BODY: {response.text[:500]}")
            raise InstagramAPIError(
                f"Malformed response from {endpoint}",
                status_code=response.status_code,
                body=response.text,
            )

        _api_logger.info(f"API CALL #{call} | SUCCESS: {list(result.keys())}")
        return result

    async def create_reel_container(
        self,
        video_url: str,
        caption: str = "",
        share_to_feed: bool = True,
    ) -> str:
        """Create a Reel container for publishing.

        Args:
            video_url: Public URL of the video (must be MP4, max 90s for API)
            caption: Post caption (max 2200 chars)
            share_to_feed: Whether to also share to main feed (default True)

        Returns:
            Container ID (creation_id)
        """
        endpoint = f"{self.config.app_id}/media"
        data = {
            "media_type": "REELS",
            "video_url": video_url,
            "share_to_feed": "true" if share_to_feed else "false",
        }
        caption = normalize_caption(caption)
        if caption:
            data["caption"] = caption

        result = await self._make_request("POST", endpoint, data=data)
        return self._require_id(result, endpoint)

    async def check_container_status(self, container_id: str) -> dict:
        """Check if a container is ready for publishing.

        Returns:
            Dict with status_code and status fields
        """
        params = {"fields": "status_code,status"}
        return await self._make_request("GET", container_id, params=params)

    async def publish_container(self, creation_id: str) -> dict:
        """Publish a container to Instagram.

        Returns:
            Response body, including the media ID under "id"
        """
        endpoint = f"{self.config.app_id}/media_publish"
        result = await self._make_request("POST", endpoint, data={"creation_id": creation_id})
        self._require_id(result, endpoint)
        return result

    async def get_media_permalink(self, media_id: str) -> str | None:
        """Get the permalink for a published media, or None if not available."""
        try:
            result = await self._make_request("GET", media_id, params={"fields": "permalink"})
            return result.get("permalink")
        except InstagramAPIError as e:
            _api_logger.warning(f"Permalink lookup failed for {media_id}: {e}")
            return None

    @staticmethod
    def _require_id(result: dict, endpoint: str) -> str:
        media_id = result.get("id")
        if not media_id:
            raise InstagramAPIError(f"Malformed response from {endpoint}: missing id", body=result)
        return str(media_id)
