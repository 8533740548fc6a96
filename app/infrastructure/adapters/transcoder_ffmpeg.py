from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from app.application.interfaces.binary_resolver import IBinaryResolver
from app.application.interfaces.media_probe import IMediaProbe
from app.application.interfaces.transcoder import (
    ConversionProgressCallback,
    ITranscoder,
)
from app.core.exceptions import (
    CancellationError,
    ConversionError,
    ConversionInProgressError,
    ConverterError,
)
from app.core.models import ConversionRequest
from utils.subprocess_utils import (
    SubprocessError,
    hidden_window_kwargs,
    safe_subprocess_run,
)
from utils.video_utils import clamp_quality, remove_partial_output

logger = logging.getLogger(__name__)

# ffmpeg -progress reports out_time_ms in microseconds despite the name
PROGRESS_MARKER = re.compile(r"out_time_ms=(\d+)")
STDERR_TAIL_BYTES = 4000


def build_ffmpeg_args(input_path: str, output_path: str, quality: int) -> List[str]:
    """ffmpeg arguments for a VP9 WebM that keeps the alpha channel."""
    return [
        "-i",
        input_path,
        "-c:v",
        "libvpx-vp9",
        # Fixes grey/noisy fringes around transparent edges
        "-vf",
        "premultiply=inplace=1",
        "-pix_fmt",
        "yuva420p",
        # Full range, otherwise transparent backgrounds render dark grey
        "-color_range",
        "pc",
        "-crf",
        str(quality),
        "-b:v",
        "0",
        # libvpx cannot use alt-ref frames together with alpha
        "-auto-alt-ref",
        "0",
        # Some players only honour alpha when this tag is present
        "-metadata:s:v:0",
        "alpha_mode=1",
        "-an",
        "-progress",
        "pipe:1",
        "-y",
        output_path,
    ]


def progress_fraction(elapsed_us: int, duration: float) -> Optional[float]:
    """Percentage of ``duration`` covered by ``elapsed_us``, capped at 100."""
    if duration <= 0:
        return None
    return min((elapsed_us / 1_000_000) / duration * 100, 100.0)


@dataclass
class ConversionSession:
    output_path: str
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    process: Optional[asyncio.subprocess.Process] = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def kill(self) -> None:
        if self.process is not None and self.process.returncode is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass


class FFmpegTranscoder(ITranscoder):
    """Run ffmpeg for one conversion at a time and stream its progress.

    The session slot is single-occupancy: a second ``convert`` while one is
    running raises ConversionInProgressError.
    """

    def __init__(self, resolver: IBinaryResolver, media_probe: IMediaProbe) -> None:
        self.resolver = resolver
        self.media_probe = media_probe
        self._session: Optional[ConversionSession] = None

    @property
    def is_running(self) -> bool:
        return self._session is not None

    async def convert(
        self,
        request: ConversionRequest,
        on_progress: ConversionProgressCallback | None = None,
    ) -> str:
        if self._session is not None:
            raise ConversionInProgressError()
        session = ConversionSession(output_path=request.output_path)
        self._session = session
        try:
            return await self._convert(session, request, on_progress)
        finally:
            session.kill()
            self._session = None

    def cancel(self) -> bool:
        session = self._session
        if session is None:
            return False
        logger.info("Cancelling conversion to %s", session.output_path)
        session.cancel_event.set()
        session.kill()
        return True

    async def self_test(self) -> bool:
        cmd = [self.resolver.paths.transcoder_path, "-version"]
        try:
            await asyncio.to_thread(
                safe_subprocess_run, cmd, "ffmpeg -version", None, logging.DEBUG
            )
        except SubprocessError:
            logger.debug("ffmpeg self-test failed: %s", cmd[0])
            return False
        return True

    async def _convert(
        self,
        session: ConversionSession,
        request: ConversionRequest,
        on_progress: ConversionProgressCallback | None,
    ) -> str:
        quality = clamp_quality(request.quality)

        try:
            duration = await self.media_probe.duration(request.input_path)
        except ConverterError as e:
            logger.warning("No duration for %s, progress disabled: %s", request.input_path, e)
            duration = 0.0

        if session.cancelled:
            raise CancellationError()

        cmd = [
            self.resolver.paths.transcoder_path,
            *build_ffmpeg_args(request.input_path, request.output_path, quality),
        ]
        logger.debug("Running ffmpeg: %s", " ".join(cmd))
        try:
            session.process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                **hidden_window_kwargs(),
            )
        except OSError as e:
            raise ConversionError(f"Failed to start FFmpeg: {e}") from e

        process = session.process
        stderr_tail = bytearray()
        stderr_task = asyncio.create_task(_drain(process.stderr, stderr_tail))

        try:
            await _read_progress(session, process.stdout, duration, on_progress)
            if session.cancelled:
                session.kill()
            returncode = await process.wait()
            await stderr_task
        except asyncio.CancelledError:
            # The awaiting task was cancelled: reap ffmpeg before unwinding
            session.kill()
            stderr_task.cancel()
            await asyncio.shield(process.wait())
            remove_partial_output(request.output_path)
            logger.info("Conversion task cancelled: %s", request.input_path)
            raise

        if session.cancelled:
            remove_partial_output(request.output_path)
            logger.info("Conversion cancelled: %s", request.input_path)
            raise CancellationError()

        if returncode != 0:
            stderr = stderr_tail.decode("utf-8", errors="replace").strip()
            logger.error("ffmpeg exited with %s for %s", returncode, request.input_path)
            raise ConversionError(
                f"FFmpeg conversion failed: exit status {returncode}",
                returncode=returncode,
                stderr=stderr,
            )

        if on_progress is not None:
            on_progress(100.0)
        logger.info("Converted %s -> %s", request.input_path, request.output_path)
        return request.output_path


async def _read_progress(
    session: ConversionSession,
    stdout: asyncio.StreamReader,
    duration: float,
    on_progress: ConversionProgressCallback | None,
) -> None:
    """Emit a non-decreasing sample per out_time_ms line until EOF or cancel."""
    last = 0.0
    while True:
        line = await stdout.readline()
        if session.cancelled or not line:
            return
        match = PROGRESS_MARKER.search(line.decode("utf-8", errors="replace"))
        if not match or on_progress is None:
            continue
        fraction = progress_fraction(int(match.group(1)), duration)
        if fraction is None:
            continue
        last = max(last, fraction)
        on_progress(last)


async def _drain(stream: Optional[asyncio.StreamReader], tail: bytearray) -> None:
    """Read ``stream`` to EOF keeping only its last STDERR_TAIL_BYTES."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        tail.extend(chunk)
        del tail[:-STDERR_TAIL_BYTES]
