"""Frame sequence to MP4 encoding with FFmpeg.

Frames are written as numbered PNGs into a private temporary directory,
then encoded with libx264 (and AAC when an audio track is given). The
frame directory is always removed, and a partial output file is removed
when encoding fails.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from PIL import Image

from job_alert_reels.constants import (
    AUDIO_CODEC,
    FRAME_FILENAME_PATTERN,
    FRAME_INDEX_WIDTH,
    FRAMES_DIR_PREFIX,
    PIXEL_FORMAT,
    VIDEO_CODEC,
    VIDEO_FORMAT,
)
from job_alert_reels.exceptions import EncodeError, ProbeError

from .probe import probe_duration

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

STDERR_LOG_FILENAME = "ffmpeg_stderr.log"


@dataclass
class EncoderSettings:
    """FFmpeg binary and output format."""

    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    video_codec: str = VIDEO_CODEC
    audio_codec: str = AUDIO_CODEC
    pixel_format: str = PIXEL_FORMAT
    container: str = VIDEO_FORMAT
    temp_dir: Optional[Path] = None


def expected_output_duration(video_duration: float, audio_duration: float | None = None) -> float:
    """Duration of the encoded file.

    With an audio track the output stops at the shorter of the two streams.
    """
    if audio_duration is None:
        return video_duration
    return min(video_duration, audio_duration)


def build_ffmpeg_command(
    frames_pattern: Path | str,
    fps: int,
    duration: float,
    output_path: Path | str,
    audio_path: Path | str | None = None,
    settings: EncoderSettings | None = None,
) -> list[str]:
    """Build the ffmpeg argument list for encoding a frame sequence."""
    settings = settings or EncoderSettings()

    cmd = [
        settings.ffmpeg_path,
        "-y",
        "-framerate", str(fps),
        "-i", str(frames_pattern),
    ]
    if audio_path is not None:
        cmd.extend(["-i", str(audio_path)])

    cmd.extend(["-c:v", settings.video_codec])
    if audio_path is not None:
        cmd.extend(["-c:a", settings.audio_codec])

    cmd.extend([
        "-pix_fmt", settings.pixel_format,
        "-r", str(fps),
        "-t", f"{duration:g}",
    ])
    if audio_path is not None:
        cmd.append("-shortest")

    cmd.extend([
        "-f", settings.container,
        "-progress", "pipe:1",
        "-nostats",
        str(output_path),
    ])
    return cmd


def parse_progress_line(line: str, duration: float) -> float | None:
    """Parse one line of ``-progress`` output into a percentage.

    Returns None for lines that carry no position information.

    Raises:
        EncodeError: If the line is not a key=value pair.
    """
    line = line.strip()
    if not line:
        return None
    if "=" not in line:
        raise EncodeError(f"Unparseable ffmpeg progress line: {line!r}")

    key, _, value = line.partition("=")
    key = key.strip()
    value = value.strip()

    if key == "progress" and value == "end":
        return 100.0
    if key != "out_time_us" or value == "N/A":
        return None

    try:
        seconds = int(value) / 1_000_000
    except ValueError as e:
        raise EncodeError(f"Unparseable ffmpeg progress value: {line!r}") from e

    if duration <= 0:
        return None
    return max(0.0, min(100.0, seconds / duration * 100))


class FrameEncoder:
    """Encodes PIL frames into an MP4 file."""

    def __init__(self, settings: EncoderSettings | None = None):
        self.settings = settings or EncoderSettings()

    def write_frames(self, frames: Iterable[Image.Image], frames_dir: Path) -> int:
        """Save frames as numbered PNGs. Returns the number written."""
        count = 0
        for index, frame in enumerate(frames):
            frame.save(frames_dir / f"frame_{index:0{FRAME_INDEX_WIDTH}d}.png", format="PNG")
            count += 1
            if count % 90 == 0:
                logger.debug(f"Wrote {count} frames")
        return count

    def output_duration(self, duration: float, audio_path: Path | None = None) -> float:
        """Length of the file ffmpeg will write, used as the progress total."""
        if audio_path is None:
            return duration
        try:
            audio_duration = probe_duration(audio_path, self.settings.ffprobe_path)
        except ProbeError as e:
            logger.warning(f"Could not read audio duration, assuming {duration:g}s: {e}")
            return duration
        return expected_output_duration(duration, audio_duration)

    def encode(
        self,
        frames: Iterable[Image.Image],
        fps: int,
        duration: float,
        output_path: Path,
        audio_path: Path | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """Write frames and encode them into output_path.

        Args:
            frames: Frame images in order.
            fps: Input and output frame rate.
            duration: Target duration in seconds.
            output_path: Where the MP4 is written.
            audio_path: Optional audio track. Output is cut to the shorter stream.
            progress_callback: Called with a 0-100 percentage. Errors it raises
                are logged and ignored.

        Returns:
            output_path.

        Raises:
            EncodeError: If ffmpeg fails or cannot be started.
        """
        output_path = Path(output_path)
        if self.settings.temp_dir is not None:
            self.settings.temp_dir.mkdir(parents=True, exist_ok=True)
        frames_dir = Path(tempfile.mkdtemp(prefix=FRAMES_DIR_PREFIX, dir=self.settings.temp_dir))

        try:
            count = self.write_frames(frames, frames_dir)
            if count == 0:
                raise EncodeError("No frames to encode")
            logger.info(f"Encoding {count} frames to {output_path.name}")

            cmd = build_ffmpeg_command(
                frames_dir / FRAME_FILENAME_PATTERN,
                fps,
                duration,
                output_path,
                audio_path=audio_path,
                settings=self.settings,
            )
            logger.debug(f"FFmpeg command: {' '.join(cmd)}")
            output_duration = self.output_duration(duration, audio_path)
            self._run(cmd, output_duration, progress_callback, frames_dir / STDERR_LOG_FILENAME)

        except Exception:
            if output_path.exists():
                output_path.unlink()
                logger.info(f"Removed partial output {output_path.name}")
            raise

        finally:
            shutil.rmtree(frames_dir, ignore_errors=True)
            logger.debug(f"Cleaned up frames directory {frames_dir}")

        logger.info(f"Encoded {output_path.name}")
        return output_path

    def _run(
        self,
        cmd: list[str],
        duration: float,
        progress_callback: ProgressCallback | None,
        stderr_path: Path,
    ) -> None:
        with open(stderr_path, "w+", encoding="utf-8", errors="replace") as stderr_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    text=True,
                )
            except OSError as e:
                raise EncodeError(f"Could not start ffmpeg: {e}") from e

            try:
                for line in process.stdout:
                    percent = parse_progress_line(line, duration)
                    if percent is not None:
                        self._report(progress_callback, percent)
            except EncodeError as e:
                process.kill()
                process.wait()
                raise EncodeError(str(e), stderr=self._read(stderr_file)) from e

            returncode = process.wait()
            stderr = self._read(stderr_file)

        if returncode != 0:
            logger.error(f"FFmpeg exited with code {returncode}")
            raise EncodeError(
                f"ffmpeg exited with code {returncode}",
                stderr=stderr,
                returncode=returncode,
            )

    @staticmethod
    def _read(stderr_file) -> str:
        stderr_file.flush()
        stderr_file.seek(0)
        return stderr_file.read()

    @staticmethod
    def _report(progress_callback: ProgressCallback | None, percent: float) -> None:
        if progress_callback is None:
            return
        try:
            progress_callback(percent)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")
