from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from app.application.interfaces.binary_resolver import IBinaryResolver
from app.application.interfaces.media_probe import IMediaProbe
from app.core.exceptions import ProbeError
from app.core.models import MediaInfo
from utils.subprocess_utils import SubprocessError, safe_subprocess_run

logger = logging.getLogger(__name__)

# Substrings of pix_fmt names that carry an alpha plane
ALPHA_PIX_FMT_MARKERS = ("a", "rgba", "yuva")


def has_alpha_channel(pix_fmt: Optional[str]) -> bool:
    fmt = str(pix_fmt or "")
    return any(marker in fmt for marker in ALPHA_PIX_FMT_MARKERS)


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_media_info(report: Dict[str, Any]) -> MediaInfo:
    """Build MediaInfo from an ``ffprobe -print_format json`` report."""
    fmt = report.get("format") or {}
    info: Dict[str, Any] = {
        "filename": fmt.get("filename"),
        "duration": _to_float(fmt.get("duration")),
        "size": _to_int(fmt.get("size")),
        "bitrate": _to_int(fmt.get("bit_rate")),
    }
    for stream in report.get("streams") or []:
        if stream.get("codec_type") == "video":
            pix_fmt = stream.get("pix_fmt")
            info.update(
                width=_to_int(stream.get("width")),
                height=_to_int(stream.get("height")),
                codec=stream.get("codec_name"),
                fps=stream.get("r_frame_rate"),
                pixel_format=pix_fmt,
                has_alpha=has_alpha_channel(pix_fmt),
            )
            break
    return MediaInfo(**info)


class FFmpegMediaProbe(IMediaProbe):
    def __init__(self, resolver: IBinaryResolver) -> None:
        self.resolver = resolver

    def _report(self, input_path: str, *, streams: bool) -> Dict[str, Any]:
        cmd = [
            self.resolver.paths.prober_path,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
        ]
        if streams:
            cmd.append("-show_streams")
        cmd.append(str(input_path))
        try:
            result = safe_subprocess_run(cmd, f"Probe {input_path}")
        except SubprocessError as e:
            raise ProbeError(
                f"Failed to probe {input_path}: {e.message}", file_path=input_path
            ) from e
        try:
            report = json.loads(result.stdout or "")
        except json.JSONDecodeError as e:
            raise ProbeError(
                f"Failed to parse ffprobe output for {input_path}: {e}",
                file_path=input_path,
            ) from e
        if not isinstance(report, dict):
            raise ProbeError(
                f"Unexpected ffprobe output for {input_path}", file_path=input_path
            )
        return report

    async def duration(self, input_path: str) -> float:
        def _probe() -> float:
            report = self._report(input_path, streams=False)
            duration = _to_float((report.get("format") or {}).get("duration"))
            if duration is None:
                raise ProbeError(
                    "Missing duration in ffprobe output", file_path=input_path
                )
            return duration

        return await asyncio.to_thread(_probe)

    async def info(self, input_path: str) -> MediaInfo:
        def _probe() -> MediaInfo:
            return parse_media_info(self._report(input_path, streams=True))

        return await asyncio.to_thread(_probe)

    async def self_test(self) -> bool:
        cmd = [self.resolver.paths.prober_path, "-version"]
        try:
            await asyncio.to_thread(
                safe_subprocess_run, cmd, "ffprobe -version", None, logging.DEBUG
            )
        except SubprocessError:
            logger.debug("ffprobe self-test failed: %s", cmd[0])
            return False
        return True
