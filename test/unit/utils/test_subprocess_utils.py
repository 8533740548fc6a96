import logging
import subprocess
import sys

import pytest

import utils.subprocess_utils as su
from utils.subprocess_utils import (
    SubprocessError,
    hidden_window_kwargs,
    safe_subprocess_run,
)


class DummyCompleted:
    def __init__(self, stdout="", stderr="", returncode=0):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


def test_safe_subprocess_run_success(monkeypatch):
    seen = {}

    def fake_run(cmd, stdout, stderr, text, check, **kwargs):
        assert isinstance(cmd, (list, tuple))
        assert check is True
        seen.update(kwargs)
        return DummyCompleted(stdout="ok", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)

    res = safe_subprocess_run(["ffprobe", "-version"], "Version test")
    assert res.stdout == "ok"
    # stdin is never inherited
    assert seen["stdin"] is subprocess.DEVNULL


def test_safe_subprocess_run_calledprocesserror(monkeypatch):
    def fake_run(*args, **kwargs):
        raise subprocess.CalledProcessError(1, ["ffprobe"], output="out", stderr="err")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(SubprocessError) as ei:
        safe_subprocess_run(["ffprobe"], "Op")
    assert ei.value.returncode == 1
    msg = str(ei.value)
    assert "return code 1" in msg
    assert "Error output: err" in msg


def test_safe_subprocess_run_binary_not_found(monkeypatch):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("ffprobe")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(SubprocessError) as ei:
        safe_subprocess_run(["ffprobe"], "Op")
    assert "ffprobe not found" in str(ei.value)


def test_safe_subprocess_run_permission_error(monkeypatch):
    def fake_run(*args, **kwargs):
        raise PermissionError("no permission")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(SubprocessError) as ei:
        safe_subprocess_run(["ffmpeg"], "Op")
    assert "OS/Permission error" in str(ei.value)


def test_hidden_window_kwargs_on_windows(monkeypatch):
    monkeypatch.setattr(su.sys, "platform", "win32")
    kwargs = hidden_window_kwargs()
    assert kwargs["creationflags"] == su.CREATE_NO_WINDOW
    assert kwargs["stdin"] is subprocess.DEVNULL


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")
def test_hidden_window_kwargs_elsewhere():
    assert hidden_window_kwargs() == {"stdin": subprocess.DEVNULL}


def test_safe_subprocess_run_replaces_undecodable_output():
    cmd = [
        sys.executable,
        "-c",
        "import sys; sys.stdout.buffer.write(b'{\"title\": \"\\xff\\xfe\"}')",
    ]

    res = safe_subprocess_run(cmd, "Invalid UTF-8")

    assert res.stdout.startswith('{"title": "')
    assert "\ufffd" in res.stdout


def test_safe_subprocess_run_failure_level(monkeypatch, caplog):
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("ffmpeg")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with caplog.at_level(logging.DEBUG, logger="utils.subprocess_utils"):
        with pytest.raises(SubprocessError):
            safe_subprocess_run(["ffmpeg", "-version"], "Op", failure_level=logging.DEBUG)

    failures = [r for r in caplog.records if "not found" in r.getMessage()]
    assert failures
    assert all(r.levelno == logging.DEBUG for r in failures)
