"""Shared test fixtures and configuration.

Provides settings isolated from the developer's .env, small PNG assets and
sample job fields. HTTP collaborators are tested with httpx.MockTransport,
subprocess calls with unittest.mock.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

from job_alert_reels.config import AppSettings
from job_alert_reels.extraction import JobFields


@pytest.fixture
def make_png(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a solid-color PNG.

    Usage:
        def test_something(make_png):
            path = make_png("bg.png", (40, 60), "red")
    """
    def _make(name: str, size: tuple[int, int] = (16, 16), color="red") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGBA", size, color).save(path, format="PNG")
        return path

    return _make


@pytest.fixture
def job_fields() -> JobFields:
    """A fully specified job posting."""
    return JobFields(
        company_name="Acme",
        designation="Software Engineer I",
        location="Pune",
        batch="2024/2025",
        apply_link="https://acme.example/careers/123",
        instagram_caption="Acme is hiring! Apply now.",
        whatsapp_message="Acme is hiring SDE I in Pune",
    )


@pytest.fixture
def app_settings(tmp_path: Path) -> AppSettings:
    """Settings with every credential blank and assets under tmp_path."""
    assets = tmp_path / "assets"
    assets.mkdir()
    return AppSettings(
        _env_file=None,
        gemini_api_key="",
        supabase_url="",
        supabase_service_key="",
        insta_app_id="",
        insta_access_token="",
        upload_provider="tmpfiles",
        assets_dir=assets,
        temp_dir=tmp_path / "temp",
        font_path=None,
        layout_path=tmp_path / "missing-layout.yaml",
    )
