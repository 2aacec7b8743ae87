"""Fixtures for Instagram publishing tests.

FakeGraph is a tiny in-memory Graph API served through httpx.MockTransport:
container creation, a scripted sequence of status responses, publishing
and permalink lookup.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import httpx
import pytest

from job_alert_reels.instagram import InstagramClient, InstagramConfig, ReelPublisher


class FakeGraph:
    def __init__(self, statuses: list[Any] | None = None):
        self.statuses = list(statuses or [{"status_code": "FINISHED", "status": "FINISHED"}])
        self.requests: list[httpx.Request] = []
        self.create_response: tuple[int, Any] = (200, {"id": "17890001"})
        self.publish_response: tuple[int, Any] = (200, {"id": "18000042"})
        self.permalink_response: tuple[int, Any] = (200, {"permalink": "https://www.instagram.com/reel/abc/"})
        self.status_polls = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def form(self, request: httpx.Request) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}

    def calls(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path.endswith("/media"):
            return self._respond(self.create_response)
        if request.method == "POST" and path.endswith("/media_publish"):
            return self._respond(self.publish_response)
        if request.method == "GET" and request.url.params.get("fields") == "status_code,status":
            index = min(self.status_polls, len(self.statuses) - 1)
            self.status_polls += 1
            status = self.statuses[index]
            if isinstance(status, tuple):
                return self._respond(status)
            return httpx.Response(200, json=status)
        if request.method == "GET" and request.url.params.get("fields") == "permalink":
            return self._respond(self.permalink_response)
        return httpx.Response(404, json={"error": {"message": "Unknown path", "code": 100}})

    @staticmethod
    def _respond(entry: tuple[int, Any]) -> httpx.Response:
        status_code, body = entry
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, json=body)
        return httpx.Response(status_code, content=str(body).encode())


@pytest.fixture
def instagram_config() -> InstagramConfig:
    return InstagramConfig(app_id="1784000", access_token="secret-token", api_base="https://graph.test")


@pytest.fixture
def graph() -> FakeGraph:
    return FakeGraph()


@pytest.fixture
def client(instagram_config, graph) -> InstagramClient:
    return InstagramClient(instagram_config, transport=graph.transport)


@pytest.fixture
def fake_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def publisher(client, fake_sleep) -> ReelPublisher:
    """Publisher whose sleeps return immediately and whose clock never moves."""
    return ReelPublisher(client, sleep=fake_sleep, clock=lambda: 0.0)
