"""Reel publish state machine.

    CREATED -> PROCESSING -> READY -> PUBLISHED
                          -> FAILED | EXPIRED | TIMED_OUT

Each step runs once. A failed or expired container is never recreated and
a failed publish is never retried; the caller gets a PublishOutcome with
the reason and the remote diagnostics instead.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from job_alert_reels.constants import (
    CONTAINER_MAX_WAIT_SECONDS,
    CONTAINER_POLL_INTERVAL_SECONDS,
    ContainerState,
    PublishFailure,
    RemoteStatus,
)
from job_alert_reels.exceptions import (
    ContainerCreateError,
    ContainerFailedError,
    ContainerTimeoutError,
    InstagramAPIError,
    PublishError,
)

from .client import InstagramClient
from .models import ContainerJob, PublishOutcome
from .status import normalize_status

_api_logger = logging.getLogger("instagram_api")

PublishProgressCallback = Callable[[ContainerState, str], Union[Awaitable[None], None]]

_FAILURE_REASONS = {
    ContainerCreateError: PublishFailure.CREATE_FAILED,
    ContainerTimeoutError: PublishFailure.TIMED_OUT,
    PublishError: PublishFailure.PUBLISH_FAILED,
}


def _diagnostics(error: InstagramAPIError) -> dict[str, Any]:
    return {
        key: value
        for key, value in (
            ("error_code", error.error_code),
            ("error_subcode", error.error_subcode),
            ("status_code", error.status_code),
            ("body", error.body),
            ("user_message", error.user_message),
        )
        if value is not None
    }


class ReelPublisher:
    """Drives one reel through create -> poll -> publish.

    Usage:
        publisher = ReelPublisher(InstagramClient(config))
        outcome = await publisher.publish(video_url, caption)
    """

    def __init__(
        self,
        client: InstagramClient,
        progress_callback: Optional[PublishProgressCallback] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize publisher.

        Args:
            client: Graph API client.
            progress_callback: Called with (state, message) on each step.
                May be sync or async; errors it raises are logged and ignored.
            sleep: Awaitable sleep between polls.
            clock: Monotonic clock used to measure the wait.
        """
        self.client = client
        self.progress_callback = progress_callback
        self._sleep = sleep
        self._clock = clock

    async def _report(self, state: ContainerState, message: str) -> None:
        _api_logger.info(f"[{state.value}] {message}")
        if self.progress_callback is None:
            return
        try:
            result = self.progress_callback(state, message)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            _api_logger.warning(f"Progress callback failed: {e}")

    # =========================================================================
    # Steps
    # =========================================================================

    async def create_container(self, job: ContainerJob, share_to_feed: bool = True) -> str:
        """CREATED: create the REELS container."""
        await self._report(job.state, "Creating Reel container on Instagram...")
        try:
            job.container_id = await self.client.create_reel_container(
                video_url=job.video_url,
                caption=job.caption,
                share_to_feed=share_to_feed,
            )
        except InstagramAPIError as e:
            raise ContainerCreateError(
                f"Container creation failed: {e}",
                error_code=e.error_code,
                error_subcode=e.error_subcode,
                status_code=e.status_code,
                body=e.body,
                user_message=e.user_message,
            ) from e

        await self._report(job.state, f"Container created: {job.container_id}")
        return job.container_id

    async def wait_until_ready(self, job: ContainerJob) -> None:
        """PROCESSING: poll until READY, FAILED, EXPIRED or the wait runs out."""
        started = self._clock()
        job.transition(ContainerState.PROCESSING)
        await self._report(
            job.state,
            f"Waiting for Instagram to process video (up to {job.max_wait:g}s)...",
        )

        while True:
            try:
                payload = await self.client.check_container_status(job.container_id)
            except InstagramAPIError as e:
                job.transition(ContainerState.FAILED)
                raise ContainerFailedError(
                    f"Status check failed: {e}",
                    state=job.state,
                    error_code=e.error_code,
                    error_subcode=e.error_subcode,
                    status_code=e.status_code,
                    body=e.body,
                ) from e

            job.polls += 1
            job.last_status = payload
            status = normalize_status(payload)
            _api_logger.info(
                f"Container {job.container_id} poll #{job.polls}: "
                f"status_code={payload.get('status_code')!r} status={payload.get('status')!r} -> {status.value}"
            )

            if status == RemoteStatus.READY:
                job.transition(ContainerState.READY)
                await self._report(job.state, "Video processing complete!")
                return

            if status in (RemoteStatus.FAILED, RemoteStatus.EXPIRED):
                job.transition(
                    ContainerState.FAILED if status == RemoteStatus.FAILED else ContainerState.EXPIRED
                )
                raise ContainerFailedError(
                    f"Container failed with status: {payload.get('status_code')} - {payload.get('status')}",
                    state=job.state,
                    body=payload,
                )

            await self._sleep(job.poll_interval)
            # Whichever is larger: the nominal schedule or the measured time
            job.elapsed = max(job.elapsed + job.poll_interval, self._clock() - started)
            if job.elapsed >= job.max_wait:
                job.transition(ContainerState.TIMED_OUT)
                raise ContainerTimeoutError(
                    f"Container not ready after {job.max_wait:g} seconds",
                    body=payload,
                )

            await self._report(
                job.state,
                f"Still processing ({job.elapsed:.0f}s / {job.max_wait:g}s)...",
            )

    async def publish_container(self, job: ContainerJob) -> dict:
        """READY: publish the container."""
        if job.state != ContainerState.READY:
            raise PublishError(f"Cannot publish a container in state {job.state.value}")

        await self._report(job.state, "Publishing Reel to feed...")
        try:
            response = await self.client.publish_container(job.container_id)
        except InstagramAPIError as e:
            raise PublishError(
                f"Publication failed: {e}",
                error_code=e.error_code,
                error_subcode=e.error_subcode,
                status_code=e.status_code,
                body=e.body,
                user_message=e.user_message,
            ) from e

        job.transition(ContainerState.PUBLISHED)
        await self._report(job.state, "Reel published successfully!")
        return response

    # =========================================================================
    # Workflow
    # =========================================================================

    async def publish(
        self,
        video_url: str,
        caption: str = "",
        max_wait: float = CONTAINER_MAX_WAIT_SECONDS,
        poll_interval: float = CONTAINER_POLL_INTERVAL_SECONDS,
        share_to_feed: bool = True,
        fetch_permalink: bool = True,
    ) -> PublishOutcome:
        """Publish a reel from a public video URL.

        Args:
            video_url: Public URL of the MP4.
            caption: Reel caption.
            max_wait: Seconds to wait for processing before giving up.
            poll_interval: Seconds between status checks. Must be > 0.
            share_to_feed: Whether to also share to the main feed.
            fetch_permalink: Look up the permalink after publishing.

        Returns:
            PublishOutcome. Never raises for remote failures.

        Raises:
            ValueError: If max_wait or poll_interval is not positive.
        """
        job = ContainerJob(
            video_url=video_url,
            caption=caption,
            max_wait=max_wait,
            poll_interval=poll_interval,
        )
        _api_logger.info(f"=== NEW SESSION === Instagram App ID: {self.client.config.app_id}")

        try:
            await self.create_container(job, share_to_feed=share_to_feed)
            await self.wait_until_ready(job)
            response = await self.publish_container(job)
        except InstagramAPIError as e:
            return self._failure(job, e)

        publication_id = str(response["id"])
        permalink = await self.client.get_media_permalink(publication_id) if fetch_permalink else None

        _api_logger.info(
            f"=== SESSION COMPLETE === Media ID: {publication_id} | "
            f"Total API calls: {self.client.api_call_count}"
        )
        return PublishOutcome(
            success=True,
            container_id=job.container_id,
            publication_id=publication_id,
            permalink=permalink,
            state=job.state,
            response=response,
            published_at=datetime.now(),
        )

    def _failure(self, job: ContainerJob, error: InstagramAPIError) -> PublishOutcome:
        if isinstance(error, ContainerFailedError):
            reason = PublishFailure.EXPIRED if error.state == ContainerState.EXPIRED else PublishFailure.FAILED
        else:
            reason = next(
                (value for cls, value in _FAILURE_REASONS.items() if isinstance(error, cls)),
                PublishFailure.FAILED,
            )

        _api_logger.error(f"=== SESSION FAILED === {reason.value}: {error}")
        return PublishOutcome(
            success=False,
            container_id=job.container_id,
            state=job.state,
            reason=reason,
            error_message=str(error),
            diagnostics=_diagnostics(error),
        )
