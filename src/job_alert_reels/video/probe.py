"""Instagram reel compatibility check.

Inspects a video with ffprobe and lists everything that would make the
Graph API reject it as a reel (error 2207052 and friends), plus an ffmpeg
command that re-encodes it with safe settings.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from fractions import Fraction
from pathlib import Path
from typing import Any

from job_alert_reels.constants import (
    FFPROBE_TIMEOUT_SECONDS,
    INSTAGRAM_REEL_MAX_ASPECT,
    INSTAGRAM_REEL_MAX_DURATION,
    INSTAGRAM_REEL_MAX_FPS,
    INSTAGRAM_REEL_MAX_SIZE_MB,
    INSTAGRAM_REEL_MIN_ASPECT,
    INSTAGRAM_REEL_MIN_DIMENSION,
    INSTAGRAM_REEL_MIN_DURATION,
    INSTAGRAM_REEL_MIN_FPS,
)
from job_alert_reels.exceptions import ProbeError

logger = logging.getLogger(__name__)


@dataclass
class CompatibilityReport:
    """Result of a compatibility check."""

    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_compatible(self) -> bool:
        return not self.issues


def probe_video(path: Path, ffprobe_path: str = "ffprobe") -> dict[str, Any]:
    """Run ffprobe and return its JSON output (format and streams)."""
    cmd = [
        ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(path),
    ]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=FFPROBE_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProbeError(f"Failed to run ffprobe: {e}") from e

    if result.returncode != 0:
        raise ProbeError(f"ffprobe failed: {result.stderr.strip()}")

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Failed to parse ffprobe output: {e}") from e


def parse_frame_rate(value: str | int | float) -> float:
    """Parse an ffprobe rate such as "30/1" or "30000/1001"."""
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(Fraction(value.strip()))
    except (ValueError, ZeroDivisionError) as e:
        raise ValueError(f"Invalid frame rate: {value!r}") from e


def _parse_number(value: Any) -> float | None:
    """ffprobe reports unknown values as "N/A" or leaves them out."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_stream(info: dict[str, Any], codec_type: str) -> dict[str, Any] | None:
    for stream in info.get("streams", []):
        if stream.get("codec_type") == codec_type:
            return stream
    return None


def probe_duration(path: Path, ffprobe_path: str = "ffprobe") -> float:
    """Container duration of a media file in seconds.

    Raises:
        ProbeError: If ffprobe fails or reports no duration.
    """
    duration = _parse_number(probe_video(path, ffprobe_path).get("format", {}).get("duration"))
    if duration is None:
        raise ProbeError(f"No duration reported for {Path(path).name}")
    return duration


def analyze_reel_compatibility(info: dict[str, Any]) -> CompatibilityReport:
    """Check ffprobe output against Instagram's reel requirements."""
    report = CompatibilityReport()
    issues = report.issues
    recommendations = report.recommendations
    fmt = info.get("format", {})

    format_name = fmt.get("format_name", "")
    report.details["container"] = format_name
    if "mp4" not in format_name:
        issues.append("Container must be MP4")
        recommendations.append("Convert to MP4 container")

    duration = _parse_number(fmt.get("duration"))
    report.details["duration"] = duration
    if duration is None:
        issues.append("Duration unknown (ffprobe reported none)")
    elif duration < INSTAGRAM_REEL_MIN_DURATION or duration > INSTAGRAM_REEL_MAX_DURATION:
        issues.append(
            f"Duration {duration:.2f}s (must be "
            f"{INSTAGRAM_REEL_MIN_DURATION}-{INSTAGRAM_REEL_MAX_DURATION} seconds)"
        )
        if duration > INSTAGRAM_REEL_MAX_DURATION:
            recommendations.append(f"Trim video to under {INSTAGRAM_REEL_MAX_DURATION} seconds")

    size_mb = (_parse_number(fmt.get("size")) or 0) / (1024 * 1024)
    report.details["size_mb"] = size_mb
    if size_mb > INSTAGRAM_REEL_MAX_SIZE_MB:
        issues.append(f"File size {size_mb:.2f}MB (must be under {INSTAGRAM_REEL_MAX_SIZE_MB}MB)")
        recommendations.append("Reduce video quality or resolution")

    video = _first_stream(info, "video")
    if video:
        codec = video.get("codec_name")
        width = int(video.get("width", 0))
        height = int(video.get("height", 0))
        report.details.update(video_codec=codec, width=width, height=height)

        if codec != "h264":
            issues.append(f"Video codec {codec} (must be H.264)")
            recommendations.append("Re-encode with H.264 codec")

        if width < INSTAGRAM_REEL_MIN_DIMENSION or height < INSTAGRAM_REEL_MIN_DIMENSION:
            issues.append(f"Resolution too low: {width}x{height} (minimum 540x960)")
            recommendations.append("Increase resolution to at least 540x960")

        if height:
            aspect = width / height
            report.details["aspect_ratio"] = aspect
            if aspect < INSTAGRAM_REEL_MIN_ASPECT or aspect > INSTAGRAM_REEL_MAX_ASPECT:
                issues.append(f"Aspect ratio {aspect:.2f}:1 (must be between 9:16 and 16:9)")
                recommendations.append("Crop or resize video to proper aspect ratio")

        try:
            fps = parse_frame_rate(video.get("r_frame_rate", "0/1"))
        except ValueError:
            fps = 0.0
        report.details["fps"] = fps
        if fps < INSTAGRAM_REEL_MIN_FPS or fps > INSTAGRAM_REEL_MAX_FPS:
            issues.append(
                f"Frame rate {fps:.2f}fps (must be "
                f"{INSTAGRAM_REEL_MIN_FPS}-{INSTAGRAM_REEL_MAX_FPS} fps)"
            )
            recommendations.append("Convert frame rate to 30fps or 60fps")
    else:
        issues.append("No video stream found")

    audio = _first_stream(info, "audio")
    if audio:
        codec = audio.get("codec_name")
        report.details["audio_codec"] = codec
        if codec != "aac":
            issues.append(f"Audio codec {codec} (must be AAC)")
            recommendations.append("Re-encode audio with AAC codec")
    else:
        recommendations.append("Consider adding audio track (optional but recommended)")

    return report


def check_video(path: Path, ffprobe_path: str = "ffprobe") -> CompatibilityReport:
    """Probe a file and analyze it."""
    if not Path(path).exists():
        raise ProbeError(f"Video file not found: {path}")
    report = analyze_reel_compatibility(probe_video(path, ffprobe_path))
    logger.info(f"Checked {Path(path).name}: {len(report.issues)} issue(s)")
    return report


def build_fix_command(input_path: Path | str, output_path: Path | str, ffmpeg_path: str = "ffmpeg") -> list[str]:
    """ffmpeg argv that re-encodes a video with reel-safe settings."""
    return [
        ffmpeg_path,
        "-i", str(input_path),
        "-c:v", "libx264",
        "-preset", "medium",
        "-crf", "23",
        "-pix_fmt", "yuv420p",
        "-c:a", "aac",
        "-b:a", "128k",
        "-r", "30",
        "-f", "mp4",
        "-movflags", "+faststart",
        str(output_path),
    ]
