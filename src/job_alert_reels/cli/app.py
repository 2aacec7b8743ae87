"""Typer app configuration and logging setup."""

from __future__ import annotations

import typer

from job_alert_reels.logging_config import setup_logging

app = typer.Typer(
    name="job-alert-reels",
    help="Turn job postings into Instagram reels",
    add_completion=False,
)


def register_commands() -> None:
    """Register all commands."""
    from .commands import (
        check_video_cmd,
        extract,
        generate,
        publish,
        render,
        save_job,
        serve,
        upload,
    )

    app.command(name="extract")(extract)
    app.command(name="save-job")(save_job)
    app.command(name="render")(render)
    app.command(name="upload")(upload)
    app.command(name="publish")(publish)
    app.command(name="generate")(generate)
    app.command(name="check-video")(check_video_cmd)
    app.command(name="serve")(serve)


@app.callback()
def main_callback() -> None:
    """Configure file logging before any command runs."""
    setup_logging()


register_commands()


def main() -> None:
    app()
