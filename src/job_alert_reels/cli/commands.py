"""CLI commands - thin wrappers over the extraction, video, instagram and server packages."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.progress import BarColumn, Progress, TextColumn

from job_alert_reels.config import load_settings
from job_alert_reels.constants import ContainerState
from job_alert_reels.exceptions import JobAlertError
from job_alert_reels.extraction import GeminiJobExtractor, JobFields
from job_alert_reels.instagram import (
    InstagramClient,
    InstagramConfig,
    ReelPublisher,
    create_uploader,
)
from job_alert_reels.service import ReelService
from job_alert_reels.storage import SupabaseJobStore
from job_alert_reels.video import JobAlertVideoGenerator, build_fix_command, check_video

from .console import console, print_error, print_success, print_warning
from .display import (
    show_compatibility_report,
    show_job_fields,
    show_publish_outcome,
    show_render_config,
)


def _load_fields(
    job_file: Optional[Path],
    company: Optional[str],
    designation: Optional[str],
    location: Optional[str],
    batch: Optional[str],
    apply_link: Optional[str],
    caption: Optional[str],
) -> JobFields:
    """Build JobFields from a JSON file, overridden by explicit options."""
    data: dict = {}
    if job_file is not None:
        try:
            data = json.loads(job_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            print_error(f"Could not read job file {job_file}: {e}")
            raise typer.Exit(1)

    overrides = {
        "company_name": company,
        "designation": designation,
        "location": location,
        "batch": batch,
        "apply_link": apply_link,
        "instagram_caption": caption,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return JobFields(**data)
    except ValidationError as e:
        print_error(f"Invalid job data: {e}")
        raise typer.Exit(1)


def _render_progress() -> Progress:
    return Progress(
        TextColumn("[cyan]Encoding"),
        BarColumn(),
        TextColumn("{task.percentage:>5.1f}%"),
        console=console,
    )


def extract(
    message: str = typer.Argument(..., help="Job posting text"),
    save: bool = typer.Option(False, "--save", help="Also store the job in Supabase"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Extract job details from a posting with Gemini."""
    settings = load_settings()
    try:
        extractor = GeminiJobExtractor(api_key=settings.gemini_api_key, model=settings.gemini_model)
        fields = asyncio.run(extractor.extract(message))
    except (ValueError, JobAlertError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=fields.to_record())
    else:
        show_job_fields(console, fields)

    if save:
        _insert(settings, fields)


def _insert(settings, fields: JobFields) -> None:
    try:
        store = SupabaseJobStore(
            url=settings.supabase_url,
            service_key=settings.supabase_service_key,
            table=settings.supabase_table,
            columns=settings.supabase_columns,
        )
        row_id = asyncio.run(store.insert(fields))
    except (ValueError, JobAlertError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Saved job with id {row_id}")


def save_job(
    job_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with job fields"),
) -> None:
    """Store a job (JSON file of extracted fields) in Supabase."""
    settings = load_settings()
    fields = _load_fields(job_file, None, None, None, None, None, None)
    _insert(settings, fields)


def render(
    job_file: Optional[Path] = typer.Option(None, "--job", "-j", exists=True, dir_okay=False, help="JSON file with job fields"),
    company: Optional[str] = typer.Option(None, "--company", help="Company name"),
    designation: Optional[str] = typer.Option(None, "--designation", help="Role title"),
    location: Optional[str] = typer.Option(None, "--location", help="Job location"),
    batch: Optional[str] = typer.Option(None, "--batch", help="Eligible batch"),
    apply_link: Optional[str] = typer.Option(None, "--apply", help="Application link"),
    output: Path = typer.Option(Path("job-alert.mp4"), "--output", "-o", help="Output MP4"),
    audio: Optional[Path] = typer.Option(None, "--audio", help="Audio track (default: assets/reelmusic.mp3)"),
) -> None:
    """Render a job alert reel to a local MP4 without uploading."""
    settings = load_settings()
    fields = _load_fields(job_file, company, designation, location, batch, apply_link, None)
    generator = JobAlertVideoGenerator(settings=settings, uploader=None)

    try:
        job = generator.build_job(fields, audio_path=audio)
    except (ValueError, JobAlertError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    show_render_config(console, fields, str(output), str(job.audio_path) if job.audio_path else None)

    with _render_progress() as progress:
        task = progress.add_task("encode", total=100)
        try:
            generator.render_video(
                job,
                output,
                progress_callback=lambda percent: progress.update(task, completed=percent),
            )
        except JobAlertError as e:
            print_error(str(e))
            raise typer.Exit(1)

    print_success(f"Video written to {output}")


def publish(
    video_url: str = typer.Argument(..., help="Public URL of the MP4"),
    caption: str = typer.Option("", "--caption", "-c", help="Reel caption"),
    max_wait: Optional[float] = typer.Option(None, "--max-wait", help="Seconds to wait for processing"),
    poll_interval: Optional[float] = typer.Option(None, "--poll-interval", help="Seconds between status checks"),
    no_feed: bool = typer.Option(False, "--no-feed", help="Do not share to the main feed"),
) -> None:
    """Publish an already hosted video as a reel."""
    settings = load_settings()
    try:
        config = InstagramConfig.from_settings(settings)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    def on_progress(state: ContainerState, message: str) -> None:
        console.print(f"  [dim][{state.value}][/dim] {message}")

    publisher = ReelPublisher(InstagramClient(config), progress_callback=on_progress)
    try:
        outcome = asyncio.run(publisher.publish(
            video_url,
            caption,
            max_wait=max_wait or settings.reel_max_wait_seconds,
            poll_interval=poll_interval or settings.reel_poll_interval_seconds,
            share_to_feed=not no_feed,
        ))
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    show_publish_outcome(console, outcome)
    if not outcome.success:
        raise typer.Exit(1)


def generate(
    job_file: Optional[Path] = typer.Option(None, "--job", "-j", exists=True, dir_okay=False, help="JSON file with job fields"),
    company: Optional[str] = typer.Option(None, "--company", help="Company name"),
    designation: Optional[str] = typer.Option(None, "--designation", help="Role title"),
    location: Optional[str] = typer.Option(None, "--location", help="Job location"),
    batch: Optional[str] = typer.Option(None, "--batch", help="Eligible batch"),
    apply_link: Optional[str] = typer.Option(None, "--apply", help="Application link"),
    caption: Optional[str] = typer.Option(None, "--caption", "-c", help="Reel caption"),
) -> None:
    """Render, upload and (when configured) publish a job alert reel."""
    settings = load_settings()
    fields = _load_fields(job_file, company, designation, location, batch, apply_link, caption)

    try:
        service = ReelService(settings)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    with console.status("[cyan]Generating reel..."):
        try:
            result = asyncio.run(service.generate_and_publish(fields, caption=caption))
        except (ValueError, JobAlertError) as e:
            print_error(str(e))
            raise typer.Exit(1)

    print_success(result.message)
    console.print(f"Video URL: [cyan]{result.video_url}[/cyan]")
    if result.publish_outcome is not None:
        show_publish_outcome(console, result.publish_outcome)
    elif result.reel_error:
        print_warning(result.reel_error)


def check_video_cmd(
    video: Path = typer.Argument(..., help="Video file to check"),
) -> None:
    """Check a video against Instagram Reels requirements."""
    settings = load_settings()
    try:
        report = check_video(video, settings.ffprobe_path)
    except JobAlertError as e:
        print_error(str(e))
        raise typer.Exit(1)

    show_compatibility_report(console, report)
    if not report.is_compatible:
        fixed = video.with_name(f"{video.stem}_fixed.mp4")
        console.print("\n[bold]To fix, run:[/bold]")
        console.print(" ".join(build_fix_command(video, fixed, settings.ffmpeg_path)), markup=False)
        raise typer.Exit(1)


def upload(
    video: Path = typer.Argument(..., exists=True, dir_okay=False, help="MP4 to upload"),
) -> None:
    """Upload a local video to the configured host and print its URL."""
    settings = load_settings()
    try:
        uploader = create_uploader(settings)
        url = uploader.upload(video)
    except (ValueError, JobAlertError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(url)


def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: PORT or 3000)"),
) -> None:
    """Run the HTTP API."""
    from job_alert_reels.server import run_server

    run_server(load_settings(), host=host, port=port)
