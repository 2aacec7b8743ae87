"""Tests for the reel compatibility check."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from job_alert_reels.exceptions import ProbeError
from job_alert_reels.video import (
    analyze_reel_compatibility,
    build_fix_command,
    check_video,
    parse_frame_rate,
    probe_duration,
    probe_video,
)

RUN = "job_alert_reels.video.probe.subprocess.run"


def _info(**overrides):
    """ffprobe output of a compliant 30 second 1080x1920 reel."""
    video = {
        "codec_type": "video",
        "codec_name": "h264",
        "width": 1080,
        "height": 1920,
        "r_frame_rate": "30/1",
    }
    audio = {"codec_type": "audio", "codec_name": "aac"}
    fmt = {"format_name": "mov,mp4,m4a,3gp,3g2,mj2", "duration": "30.000000", "size": "5242880"}

    video.update(overrides.pop("video", {}))
    audio.update(overrides.pop("audio", {}))
    fmt.update(overrides.pop("format", {}))
    streams = [video, audio]
    if overrides.pop("no_audio", False):
        streams = [video]
    if overrides.pop("no_video", False):
        streams = [audio]
    return {"format": fmt, "streams": streams}


class TestParseFrameRate:
    @pytest.mark.parametrize(
        "value,expected",
        [("30/1", 30.0), ("30000/1001", 29.97), ("25", 25.0), (60, 60.0)],
    )
    def test_valid(self, value, expected):
        assert parse_frame_rate(value) == pytest.approx(expected, abs=0.01)

    @pytest.mark.parametrize("value", ["abc", "30/0", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_frame_rate(value)


class TestAnalyzeReelCompatibility:
    def test_compliant_video(self):
        report = analyze_reel_compatibility(_info())
        assert report.is_compatible
        assert report.issues == []
        assert report.details["fps"] == 30.0
        assert report.details["size_mb"] == pytest.approx(5.0)

    def test_wrong_container(self):
        report = analyze_reel_compatibility(_info(format={"format_name": "matroska,webm"}))
        assert "Container must be MP4" in report.issues

    @pytest.mark.parametrize("duration", ["2.5", "95"])
    def test_duration_out_of_range(self, duration):
        report = analyze_reel_compatibility(_info(format={"duration": duration}))
        assert any(issue.startswith("Duration") for issue in report.issues)

    def test_long_video_recommends_trim(self):
        report = analyze_reel_compatibility(_info(format={"duration": "120"}))
        assert any("Trim" in rec for rec in report.recommendations)

    def test_file_too_large(self):
        report = analyze_reel_compatibility(_info(format={"size": str(400 * 1024 * 1024)}))
        assert any(issue.startswith("File size") for issue in report.issues)

    def test_wrong_codec(self):
        report = analyze_reel_compatibility(_info(video={"codec_name": "hevc"}))
        assert "Video codec hevc (must be H.264)" in report.issues

    def test_low_resolution(self):
        report = analyze_reel_compatibility(_info(video={"width": 480, "height": 854}))
        assert any("Resolution too low" in issue for issue in report.issues)

    def test_extreme_aspect_ratio(self):
        report = analyze_reel_compatibility(_info(video={"width": 600, "height": 2000}))
        assert any("Aspect ratio" in issue for issue in report.issues)

    @pytest.mark.parametrize("rate", ["15/1", "120/1"])
    def test_frame_rate_out_of_range(self, rate):
        report = analyze_reel_compatibility(_info(video={"r_frame_rate": rate}))
        assert any(issue.startswith("Frame rate") for issue in report.issues)

    def test_ntsc_frame_rate_ok(self):
        report = analyze_reel_compatibility(_info(video={"r_frame_rate": "30000/1001"}))
        assert report.is_compatible

    def test_wrong_audio_codec(self):
        report = analyze_reel_compatibility(_info(audio={"codec_name": "mp3"}))
        assert "Audio codec mp3 (must be AAC)" in report.issues

    def test_missing_audio_is_only_a_recommendation(self):
        report = analyze_reel_compatibility(_info(no_audio=True))
        assert report.is_compatible
        assert any("audio" in rec for rec in report.recommendations)

    def test_missing_video_stream(self):
        report = analyze_reel_compatibility(_info(no_video=True))
        assert "No video stream found" in report.issues

    @pytest.mark.parametrize("fmt", [{"duration": "N/A", "size": "N/A"}, {"duration": None, "size": None}])
    def test_unknown_duration_and_size(self, fmt):
        report = analyze_reel_compatibility(_info(format=fmt))
        assert report.details["duration"] is None
        assert report.details["size_mb"] == 0
        assert "Duration unknown (ffprobe reported none)" in report.issues
        assert not any(issue.startswith("File size") for issue in report.issues)


class TestProbeVideo:
    def test_parses_json(self, tmp_path):
        result = MagicMock(returncode=0, stdout=json.dumps(_info()), stderr="")
        with patch(RUN, return_value=result) as run:
            info = probe_video(tmp_path / "video.mp4", ffprobe_path="/usr/bin/ffprobe")
        assert info["format"]["duration"] == "30.000000"
        cmd = run.call_args.args[0]
        assert cmd[0] == "/usr/bin/ffprobe"
        assert "-show_streams" in cmd

    def test_non_zero_exit(self, tmp_path):
        result = MagicMock(returncode=1, stdout="", stderr="No such file")
        with patch(RUN, return_value=result):
            with pytest.raises(ProbeError, match="No such file"):
                probe_video(tmp_path / "video.mp4")

    def test_invalid_json(self, tmp_path):
        result = MagicMock(returncode=0, stdout="not json", stderr="")
        with patch(RUN, return_value=result):
            with pytest.raises(ProbeError):
                probe_video(tmp_path / "video.mp4")

    def test_timeout(self, tmp_path):
        with patch(RUN, side_effect=subprocess.TimeoutExpired("ffprobe", 30)):
            with pytest.raises(ProbeError):
                probe_video(tmp_path / "video.mp4")

    def test_duration(self, tmp_path):
        result = MagicMock(returncode=0, stdout=json.dumps(_info(format={"duration": "12.480000"})), stderr="")
        with patch(RUN, return_value=result):
            assert probe_duration(tmp_path / "music.mp3") == pytest.approx(12.48)

    def test_duration_not_reported(self, tmp_path):
        result = MagicMock(returncode=0, stdout=json.dumps(_info(format={"duration": "N/A"})), stderr="")
        with patch(RUN, return_value=result):
            with pytest.raises(ProbeError, match="No duration"):
                probe_duration(tmp_path / "music.mp3")

    def test_check_video_missing_file(self, tmp_path):
        with pytest.raises(ProbeError, match="not found"):
            check_video(tmp_path / "missing.mp4")

    def test_check_video(self, tmp_path):
        video = tmp_path / "video.mp4"
        video.write_bytes(b"")
        result = MagicMock(returncode=0, stdout=json.dumps(_info(video={"codec_name": "vp9"})), stderr="")
        with patch(RUN, return_value=result):
            report = check_video(video)
        assert not report.is_compatible


def test_build_fix_command():
    cmd = build_fix_command("in.mov", "out.mp4")
    assert cmd[:3] == ["ffmpeg", "-i", "in.mov"]
    assert cmd[cmd.index("-c:v") + 1] == "libx264"
    assert cmd[cmd.index("-c:a") + 1] == "aac"
    assert "+faststart" in cmd
    assert cmd[-1] == "out.mp4"
