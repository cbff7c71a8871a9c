"""Tests for contact_sheet.io."""
from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from contact_sheet.io import FFmpegError, FrameExtractor, ensure_dir, ffprobe_json, missing_executables, run_command


# --- ensure_dir -----------------------------------------------------------

class TestEnsureDir:
    def test_creates_dir(self, tmp_path):
        d = tmp_path / "a" / "b" / "c"
        ensure_dir(d)
        assert d.is_dir()

    def test_existing_dir(self, tmp_path):
        ensure_dir(tmp_path)  # should not raise


# --- run_command ----------------------------------------------------------

class TestRunCommand:
    def test_success(self):
        with patch("contact_sheet.io.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=["echo", "hi"], returncode=0, stdout="hi\n", stderr=""
            )
            result = run_command(["echo", "hi"])
            assert result.returncode == 0

    def test_failure_raises(self):
        with patch("contact_sheet.io.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=["bad"], returncode=1, stdout="", stderr="error"
            )
            with pytest.raises(FFmpegError, match="Command failed"):
                run_command(["bad"])

    def test_check_false_no_raise(self):
        with patch("contact_sheet.io.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=["bad"], returncode=1, stdout="", stderr=""
            )
            result = run_command(["bad"], check=False)
            assert result.returncode == 1

    def test_missing_executable(self):
        with patch("contact_sheet.io.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(FFmpegError, match="not found"):
                run_command(["ffmpeg"])


# --- ffprobe_json ---------------------------------------------------------

class TestFfprobeJson:
    def test_parses_output(self):
        payload = {"streams": [], "format": {"duration": "1.0"}}
        with patch("contact_sheet.io.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                args=[], returncode=0, stdout=json.dumps(payload), stderr=""
            )
            assert ffprobe_json(Path("clip.mp4")) == payload
            cmd = mock_run.call_args[0][0]
            assert cmd[0] == "ffprobe"
            assert cmd[-2:] == ["--", "clip.mp4"]

    def test_empty_output(self):
        with patch("contact_sheet.io.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
            with pytest.raises(FFmpegError, match="no output"):
                ffprobe_json(Path("clip.mp4"))


# --- missing_executables --------------------------------------------------

class TestMissingExecutables:
    def test_reports_missing(self):
        with patch("contact_sheet.io.shutil.which", side_effect=lambda name: None if name == "ffprobe" else "/bin/x"):
            assert missing_executables() == ["ffprobe"]


# --- FrameExtractor -------------------------------------------------------

class TestFrameExtractor:
    def test_fast_seek_command(self):
        cmd = FrameExtractor(Path("v.mp4")).build_command(12.5, 320, 180, Path("out.png"))
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-ss") + 1] == "12.500"
        assert cmd.index("-ss") < cmd.index("-i")
        assert cmd[cmd.index("-s") + 1] == "320x180"
        assert cmd[cmd.index("-vframes") + 1] == "1"
        assert "-vf" not in cmd
        assert cmd[-2:] == ["-y", "out.png"]

    def test_accurate_seek_decodes_forward(self):
        cmd = FrameExtractor(Path("v.mp4"), accurate=True, accurate_delay_seconds=1.0).build_command(
            30.0, 320, 180, Path("o.png")
        )
        first = cmd.index("-ss")
        second = cmd.index("-ss", first + 1)
        assert cmd[first + 1] == "29.000"
        assert first < cmd.index("-i") < second
        assert cmd[second + 1] == "1.000"

    def test_accurate_near_start_seeks_after_input(self):
        cmd = FrameExtractor(Path("v.mp4"), accurate=True, accurate_delay_seconds=1.0).build_command(
            0.5, 320, 180, Path("o.png")
        )
        assert cmd.count("-ss") == 1
        assert cmd.index("-i") < cmd.index("-ss")
        assert cmd[cmd.index("-ss") + 1] == "0.500"

    def test_keyframe_filter(self):
        cmd = FrameExtractor(Path("v.mp4"), frame_type="key").build_command(1.0, 10, 10, Path("o.png"))
        assert cmd[cmd.index("-vf") + 1] == "select=key"

    def test_picture_type_filter(self):
        cmd = FrameExtractor(Path("v.mp4"), frame_type="I").build_command(1.0, 10, 10, Path("o.png"))
        assert cmd[cmd.index("-vf") + 1] == "select=eq(pict_type\\,I)"

    def test_invalid_frame_type(self):
        with pytest.raises(ValueError):
            FrameExtractor(Path("v.mp4"), frame_type="X")

    def test_capture_checks_output(self, tmp_path):
        out = tmp_path / "frame.png"
        with patch("contact_sheet.io.run_command") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
            with pytest.raises(FFmpegError, match="wrote no frame"):
                FrameExtractor(Path("v.mp4")).capture(3.0, 10, 10, out)

    def test_capture_returns_path(self, tmp_path):
        out = tmp_path / "frame.png"

        def _fake(cmd, check=True):
            out.write_bytes(b"png")
            return subprocess.CompletedProcess(args=cmd, returncode=0, stdout="", stderr="")

        with patch("contact_sheet.io.run_command", side_effect=_fake):
            assert FrameExtractor(Path("v.mp4")).capture(3.0, 10, 10, out) == out
