"""
Test configuration and shared fixtures for the converter.
"""

import logging
import os
import stat
import sys
import textwrap
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from app.core.models import PlatformArtifact, PlatformOS, ToolPaths
from app.infrastructure.adapters.binary_resolver import platform_dir

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure logging for the whole test run."""
    log_dir = Path("test/test_output/logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "test_run.log"

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(filename=log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Drop existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Quiet noisy libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger("app").setLevel(logging.DEBUG)
    logging.getLogger("utils").setLevel(logging.DEBUG)

    return log_file


def pytest_configure(config):  # pylint: disable=unused-argument
    """Configure pytest for tests."""
    log_file = setup_logging()

    logger = logging.getLogger("pytest")
    logger.info("=" * 80)
    logger.info("STARTING TEST RUN")
    logger.info("=" * 80)
    logger.info("Python: %s", sys.version)
    logger.info("Working directory: %s", os.getcwd())
    logger.info("Log file: %s", log_file)
    logger.info("-" * 80)


@pytest.fixture(autouse=True)
def log_test_name(request):
    """Log test name when test starts and finishes."""
    logger = logging.getLogger(request.node.nodeid)
    logger.info("🚀 Starting test: %s", request.node.name)
    start_time = datetime.now()

    def log_test_end():
        duration = (datetime.now() - start_time).total_seconds()
        logger.info("✅ Test finished after %.2fs", duration)
        logger.info("-" * 80)

    request.addfinalizer(log_test_end)


# -------------------- Fake ffmpeg / ffprobe executables --------------------

FAKE_FFMPEG = """
import os
import sys
import time

args = sys.argv[1:]
if "-version" in args:
    print("ffmpeg version fake-b6.1.1")
    sys.exit(0)

args_file = os.environ.get("FAKE_FFMPEG_ARGS")
if args_file:
    with open(args_file, "w", encoding="utf-8") as f:
        f.write("\\n".join(args))

mode = os.environ.get("FAKE_FFMPEG_MODE", "ok")
output = args[-1]
with open(output, "wb") as f:
    f.write(b"\\x1aE\\xdf\\xa3 partial webm")

for elapsed in (500000, 1000000, 1500000, 2000000):
    print("frame=12", flush=True)
    print("out_time_ms=%d" % elapsed, flush=True)
    print("progress=continue", flush=True)
    if mode == "hang":
        time.sleep(0.05)

if mode == "hang":
    time.sleep(30)
if mode == "fail":
    sys.stderr.write("Error while encoding: invalid data\\n")
    sys.exit(1)
print("progress=end", flush=True)
"""

FAKE_FFPROBE = """
import json
import os
import sys

args = sys.argv[1:]
if "-version" in args:
    print("ffprobe version fake-b6.1.1")
    sys.exit(0)

mode = os.environ.get("FAKE_FFPROBE_MODE", "ok")
if mode == "fail":
    sys.exit(1)
if mode == "garbage":
    print("this is not json")
    sys.exit(0)

report = {
    "format": {
        "filename": args[-1],
        "duration": "2.000000",
        "size": "1048576",
        "bit_rate": "4194304",
    }
}
if "-show_streams" in args:
    report["streams"] = [
        {"codec_type": "audio", "codec_name": "aac"},
        {
            "codec_type": "video",
            "codec_name": "prores",
            "width": 1920,
            "height": 1080,
            "r_frame_rate": "30/1",
            "pix_fmt": "yuva444p10le",
        },
    ]
if mode == "badbytes":
    # A tag that is not valid UTF-8, as some muxers write them
    report["format"]["tags"] = {"title": "@@TITLE@@"}
    out = json.dumps(report).encode("utf-8").replace(b"@@TITLE@@", b"\\xff\\xfe")
    sys.stdout.buffer.write(out + b"\\n")
    sys.exit(0)
print(json.dumps(report))
"""


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f"#!{sys.executable}\n" + textwrap.dedent(body).lstrip(), encoding="utf-8"
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_tools(tmp_path):
    """Fake ffmpeg/ffprobe scripts placed in the bundled platform layout.

    Returns a namespace with ``base_dir`` (pass to BinaryResolver), and the
    ``ffmpeg``/``ffprobe`` script paths.
    """
    if sys.platform == "win32":
        pytest.skip("fake tools rely on POSIX shebang scripts")
    base_dir = tmp_path / "app_base"
    tool_dir = base_dir / "resources" / "ffmpeg" / platform_dir()
    ffmpeg = write_script(tool_dir / "ffmpeg", FAKE_FFMPEG)
    ffprobe = write_script(tool_dir / "ffprobe", FAKE_FFPROBE)
    return SimpleNamespace(base_dir=base_dir, ffmpeg=ffmpeg, ffprobe=ffprobe)


@pytest.fixture
def input_video(tmp_path) -> Path:
    src = tmp_path / "videos" / "clip.mov"
    src.parent.mkdir(parents=True, exist_ok=True)
    src.write_bytes(b"\x00\x00\x00\x14ftypqt  ")
    return src


# -------------------- In-memory adapters for use case tests --------------------


class FakeResolver:
    def __init__(self, paths: ToolPaths | None = None, refreshed: ToolPaths | None = None):
        self._paths = paths or ToolPaths("ffmpeg", "ffprobe")
        self._refreshed = refreshed or self._paths
        self.refresh_calls = 0

    @property
    def paths(self) -> ToolPaths:
        return self._paths

    def resolve(self) -> ToolPaths:
        return self._paths

    def refresh(self) -> ToolPaths:
        self.refresh_calls += 1
        self._paths = self._refreshed
        return self._paths

    def install_dir(self) -> str:
        return "/opt/app/resources/ffmpeg/test-platform"


class FakeInstaller:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    async def install(self, artifact, target_dir, on_progress=None):
        self.calls.append((artifact, target_dir))
        if on_progress is not None:
            on_progress("Downloading ffmpeg...", 10.0)
            on_progress("Downloading ffmpeg...", 50.0)
            on_progress("Downloading ffprobe...", 55.0)
            on_progress("Downloading ffprobe...", 95.0)
        if self.error is not None:
            raise self.error


class FakeTool:
    """Stands in for both the media probe and the transcoder."""

    def __init__(self, ready: bool = True):
        self.ready = ready
        self.self_test_calls = 0
        self.convert_calls = []
        self.convert_error: Exception | None = None
        self.samples = [25.0, 50.0, 100.0]
        self.running = False
        self.cancel_calls = 0

    async def self_test(self) -> bool:
        self.self_test_calls += 1
        return self.ready

    async def duration(self, input_path):
        return 2.0

    async def info(self, input_path):
        from app.core.models import MediaInfo

        return MediaInfo(filename=input_path, duration=2.0, pixel_format="yuva420p", has_alpha=True)

    @property
    def is_running(self) -> bool:
        return self.running

    async def convert(self, request, on_progress=None):
        self.convert_calls.append(request)
        if self.convert_error is not None:
            raise self.convert_error
        for sample in self.samples:
            if on_progress is not None:
                on_progress(sample)
        return request.output_path

    def cancel(self) -> bool:
        self.cancel_calls += 1
        return self.running


@pytest.fixture
def fake_adapters():
    """SimpleNamespace matching IConverterAdapters with in-memory fakes."""
    return SimpleNamespace(
        resolver=FakeResolver(),
        installer=FakeInstaller(),
        media_probe=FakeTool(),
        transcoder=FakeTool(),
        artifact_provider=lambda: PlatformArtifact(
            os=PlatformOS.macos_arm,
            platform_id="darwin-arm64",
            transcoder_url="https://cdn.example/ffmpeg-darwin-arm64.gz",
            prober_url="https://cdn.example/ffprobe-darwin-arm64.gz",
        ),
    )


@pytest.fixture
def fakes():
    """The fake adapter classes, for tests that need a differently configured one."""
    return SimpleNamespace(Resolver=FakeResolver, Installer=FakeInstaller, Tool=FakeTool)
