"""Pytest fixtures for video module tests."""

from pathlib import Path

import pytest

from job_alert_reels.video import BackgroundFade, RenderJob


@pytest.fixture
def background_png(make_png) -> Path:
    """A red background the size of the small test canvas."""
    return make_png("bg.png", (40, 60), "red")


@pytest.fixture
def small_job(background_png) -> RenderJob:
    """2 seconds at 30 fps on a 40x60 white canvas, no layers."""
    return RenderJob(
        width=40,
        height=60,
        fps=30,
        duration=2,
        background_color="#FFFFFF",
        background=BackgroundFade(image_path=background_png, fade_start=0.2, fade_end=1.0),
    )
