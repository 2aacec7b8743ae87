"""Tests for the reel publish state machine."""

from unittest.mock import AsyncMock

import pytest

from job_alert_reels.constants import ContainerState, PublishFailure
from job_alert_reels.instagram import ContainerJob, InstagramClient, ReelPublisher

IN_PROGRESS = {"status_code": "IN_PROGRESS", "status": "IN_PROGRESS"}
FINISHED = {"status_code": "FINISHED", "status": "FINISHED"}


class TestPublishSuccess:
    @pytest.mark.asyncio
    async def test_ready_on_first_poll(self, publisher, graph, fake_sleep):
        outcome = await publisher.publish("https://cdn.test/v.mp4", "We're hiring", poll_interval=5, max_wait=60)

        assert outcome.success
        assert outcome.state == ContainerState.PUBLISHED
        assert outcome.container_id == "17890001"
        assert outcome.publication_id == "18000042"
        assert outcome.permalink == "https://www.instagram.com/reel/abc/"
        assert outcome.reason is None
        fake_sleep.assert_not_awaited()

        create = graph.calls("/1784000/media")[0]
        form = graph.form(create)
        assert form["media_type"] == "REELS"
        assert form["video_url"] == "https://cdn.test/v.mp4"
        assert form["caption"] == "We're hiring"
        assert form["share_to_feed"] == "true"
        assert create.url.params["access_token"] == "secret-token"

        publish = graph.calls("/media_publish")[0]
        assert graph.form(publish) == {"creation_id": "17890001"}

    @pytest.mark.asyncio
    async def test_polls_until_ready(self, publisher, graph, fake_sleep):
        graph.statuses = [IN_PROGRESS, IN_PROGRESS, {"status_code": 1}]

        outcome = await publisher.publish("https://cdn.test/v.mp4", poll_interval=5, max_wait=60)

        assert outcome.success
        assert graph.status_polls == 3
        assert fake_sleep.await_count == 2
        fake_sleep.assert_awaited_with(5)

    @pytest.mark.asyncio
    async def test_publish_happens_once(self, publisher, graph):
        graph.statuses = [IN_PROGRESS, FINISHED]
        await publisher.publish("https://cdn.test/v.mp4")
        assert len(graph.calls("/media_publish")) == 1
        assert len(graph.calls("/media")) == 1

    @pytest.mark.asyncio
    async def test_permalink_failure_tolerated(self, publisher, graph):
        graph.permalink_response = (500, {"error": {"message": "boom", "code": 1}})
        outcome = await publisher.publish("https://cdn.test/v.mp4")
        assert outcome.success
        assert outcome.permalink is None

    @pytest.mark.asyncio
    async def test_without_permalink_lookup(self, publisher, graph):
        outcome = await publisher.publish("https://cdn.test/v.mp4", fetch_permalink=False)
        assert outcome.success
        assert not graph.calls("18000042")

    @pytest.mark.asyncio
    async def test_share_to_feed_off(self, publisher, graph):
        await publisher.publish("https://cdn.test/v.mp4", share_to_feed=False)
        assert graph.form(graph.calls("/media")[0])["share_to_feed"] == "false"


class TestPublishFailures:
    @pytest.mark.asyncio
    async def test_timeout(self, publisher, graph, fake_sleep):
        graph.statuses = [IN_PROGRESS]

        outcome = await publisher.publish("https://cdn.test/v.mp4", max_wait=10, poll_interval=5)

        assert not outcome.success
        assert outcome.reason == PublishFailure.TIMED_OUT
        assert outcome.state == ContainerState.TIMED_OUT
        assert outcome.container_id == "17890001"
        assert graph.status_polls == 2
        assert fake_sleep.await_count == 2
        assert not graph.calls("/media_publish")

    @pytest.mark.asyncio
    async def test_timeout_uses_measured_time(self, client, graph):
        """A slow clock ends the wait even if few polls happened."""
        graph.statuses = [IN_PROGRESS]
        ticks = iter([0.0, 100.0, 200.0, 300.0])
        publisher = ReelPublisher(client, sleep=AsyncMock(), clock=lambda: next(ticks))

        outcome = await publisher.publish("https://cdn.test/v.mp4", max_wait=60, poll_interval=5)

        assert outcome.reason == PublishFailure.TIMED_OUT
        assert graph.status_polls == 1

    @pytest.mark.asyncio
    async def test_remote_error(self, publisher, graph):
        graph.statuses = [IN_PROGRESS, {"status_code": "ERROR", "status": "ERROR: Media upload has failed"}]

        outcome = await publisher.publish("https://cdn.test/v.mp4")

        assert not outcome.success
        assert outcome.reason == PublishFailure.FAILED
        assert outcome.state == ContainerState.FAILED
        assert "ERROR" in outcome.error_message
        assert outcome.diagnostics["body"]["status"] == "ERROR: Media upload has failed"
        assert not graph.calls("/media_publish")

    @pytest.mark.asyncio
    async def test_expired(self, publisher, graph):
        graph.statuses = [{"status_code": "EXPIRED"}]

        outcome = await publisher.publish("https://cdn.test/v.mp4")

        assert outcome.reason == PublishFailure.EXPIRED
        assert outcome.state == ContainerState.EXPIRED
        assert len(graph.calls("/media")) == 1

    @pytest.mark.asyncio
    async def test_status_check_error_is_failure(self, publisher, graph):
        graph.statuses = [(400, {"error": {"message": "Invalid container", "code": 100}})]

        outcome = await publisher.publish("https://cdn.test/v.mp4")

        assert outcome.reason == PublishFailure.FAILED
        assert outcome.diagnostics["error_code"] == 100

    @pytest.mark.asyncio
    async def test_create_failure(self, publisher, graph):
        graph.create_response = (
            400,
            {"error": {"message": "Invalid parameter", "code": 9004, "error_subcode": 2207052}},
        )

        outcome = await publisher.publish("https://cdn.test/v.mp4")

        assert not outcome.success
        assert outcome.reason == PublishFailure.CREATE_FAILED
        assert outcome.container_id is None
        assert outcome.state == ContainerState.CREATED
        assert outcome.diagnostics["error_code"] == 9004
        assert outcome.diagnostics["error_subcode"] == 2207052
        assert outcome.diagnostics["status_code"] == 400
        assert graph.status_polls == 0

    @pytest.mark.asyncio
    async def test_create_without_id(self, publisher, graph):
        graph.create_response = (200, {"unexpected": True})
        outcome = await publisher.publish("https://cdn.test/v.mp4")
        assert outcome.reason == PublishFailure.CREATE_FAILED

    @pytest.mark.asyncio
    async def test_publish_failure_not_retried(self, publisher, graph):
        graph.publish_response = (400, {"error": {"message": "Media ID is not available", "code": 9007}})

        outcome = await publisher.publish("https://cdn.test/v.mp4")

        assert outcome.reason == PublishFailure.PUBLISH_FAILED
        assert outcome.container_id == "17890001"
        assert len(graph.calls("/media_publish")) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs", [{"poll_interval": 0}, {"poll_interval": -1}, {"max_wait": 0}])
    async def test_invalid_timing(self, publisher, graph, kwargs):
        with pytest.raises(ValueError):
            await publisher.publish("https://cdn.test/v.mp4", **kwargs)
        assert graph.requests == []


class TestProgressCallback:
    @pytest.mark.asyncio
    async def test_reports_states(self, client, graph):
        graph.statuses = [IN_PROGRESS, FINISHED]
        seen = []
        publisher = ReelPublisher(
            client,
            progress_callback=lambda state, message: seen.append(state),
            sleep=AsyncMock(),
            clock=lambda: 0.0,
        )

        await publisher.publish("https://cdn.test/v.mp4")

        assert seen[0] == ContainerState.CREATED
        assert ContainerState.PROCESSING in seen
        assert ContainerState.READY in seen
        assert seen[-1] == ContainerState.PUBLISHED

    @pytest.mark.asyncio
    async def test_async_callback(self, client, graph):
        callback = AsyncMock()
        publisher = ReelPublisher(client, progress_callback=callback, sleep=AsyncMock(), clock=lambda: 0.0)
        await publisher.publish("https://cdn.test/v.mp4")
        assert callback.await_count >= 4

    @pytest.mark.asyncio
    async def test_failing_callback_ignored(self, client, graph):
        def _callback(state, message):
            raise RuntimeError("ui gone")

        publisher = ReelPublisher(client, progress_callback=_callback, sleep=AsyncMock(), clock=lambda: 0.0)
        outcome = await publisher.publish("https://cdn.test/v.mp4")
        assert outcome.success


class TestContainerJob:
    def test_terminal_states_are_final(self):
        job = ContainerJob(video_url="u", caption="")
        job.transition(ContainerState.PROCESSING)
        job.transition(ContainerState.EXPIRED)
        with pytest.raises(RuntimeError):
            job.transition(ContainerState.READY)

    def test_validation(self):
        with pytest.raises(ValueError):
            ContainerJob(video_url="u", caption="", poll_interval=0)
        with pytest.raises(ValueError):
            ContainerJob(video_url="u", caption="", max_wait=-5)

    def test_outcome_serialization(self):
        from job_alert_reels.instagram import PublishOutcome

        data = PublishOutcome(
            success=False,
            container_id="1",
            state=ContainerState.TIMED_OUT,
            reason=PublishFailure.TIMED_OUT,
            error_message="Container not ready after 300 seconds",
        ).to_dict()
        assert data["reason"] == "TIMED_OUT"
        assert data["state"] == "timed_out"
        assert data["containerId"] == "1"
        assert data["diagnostics"] is None


def test_client_counts_calls(instagram_config, graph):
    client = InstagramClient(instagram_config, transport=graph.transport)
    assert client.api_call_count == 0
