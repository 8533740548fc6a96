from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Optional, Tuple

from app.application.interfaces.installer import InstallProgressCallback
from app.core.config import settings
from app.core.exceptions import ExecutePermissionError
from app.core.models import DownloadProgress, PlatformArtifact, PlatformOS
from app.infrastructure.adapters.binary_resolver import platform_dir
from utils.download_utils import download_gzip_file, ensure_directory

logger = logging.getLogger(__name__)

# platform dir -> (os, ffmpeg-static asset suffix, executable extension)
_ARTIFACTS: Dict[str, Tuple[PlatformOS, str, str]] = {
    "windows-amd64": (PlatformOS.windows, "win32-x64", ".exe"),
    "darwin-amd64": (PlatformOS.macos_intel, "darwin-x64", ""),
    "darwin-arm64": (PlatformOS.macos_arm, "darwin-arm64", ""),
}

# Sub-ranges of the overall 0-100 install progress
TRANSCODER_RANGE = (10.0, 50.0)
PROBER_RANGE = (55.0, 95.0)


def platform_artifact(
    system: Optional[str] = None,
    machine: Optional[str] = None,
    base_url: Optional[str] = None,
) -> PlatformArtifact:
    """Return the ffmpeg-static artifact for this platform.

    Unknown platforms get ``PlatformOS.unsupported`` with empty URLs.
    """
    platform_id = platform_dir(system, machine)
    entry = _ARTIFACTS.get(platform_id)
    if entry is None:
        return PlatformArtifact(os=PlatformOS.unsupported, platform_id=platform_id)
    os_kind, suffix, ext = entry
    base = (base_url or settings.ffmpeg_download_base_url).rstrip("/")
    return PlatformArtifact(
        os=os_kind,
        platform_id=platform_id,
        transcoder_url=f"{base}/{settings.ffmpeg_binary_name}-{suffix}.gz",
        prober_url=f"{base}/{settings.ffprobe_binary_name}-{suffix}.gz",
        file_extension=ext,
    )


def scale_progress(fraction: float, start: float, end: float) -> float:
    """Map a 0-100 fraction into the ``[start, end]`` sub-range."""
    return start + fraction * (end - start) / 100.0


class ArchiveInstaller:
    """Download gzip'd ffmpeg/ffprobe binaries into the install directory."""

    def __init__(
        self,
        *,
        download: Callable = download_gzip_file,
    ) -> None:
        self._download = download

    async def install(
        self,
        artifact: PlatformArtifact,
        target_dir: str,
        on_progress: InstallProgressCallback | None = None,
    ) -> None:
        ensure_directory(target_dir)

        jobs = [
            (
                settings.ffmpeg_binary_name,
                artifact.transcoder_url,
                TRANSCODER_RANGE,
            ),
            (
                settings.ffprobe_binary_name,
                artifact.prober_url,
                PROBER_RANGE,
            ),
        ]
        for name, url, (start, end) in jobs:
            label = f"Downloading {name}..."
            dest = os.path.join(target_dir, name + artifact.file_extension)
            logger.info("Downloading %s from %s to %s", name, url, dest)
            if on_progress is not None:
                on_progress(label, start)

            def report(p: DownloadProgress, label=label, start=start, end=end) -> None:
                if on_progress is not None:
                    on_progress(label, scale_progress(p.estimated_fraction, start, end))

            # A failure here leaves any earlier binary in place
            await self._download(url, dest, report)
            logger.info("%s download complete", name)

            if artifact.os is not PlatformOS.windows:
                self.make_executable(dest)

    def make_executable(self, path: str) -> None:
        try:
            set_executable(path)
        except ExecutePermissionError as e:
            logger.warning("%s", e.message)


def set_executable(path: str) -> None:
    try:
        os.chmod(path, 0o755)
    except OSError as e:
        raise ExecutePermissionError(
            f"Failed to set execute permission on {path}: {e}", file_path=path
        ) from e
