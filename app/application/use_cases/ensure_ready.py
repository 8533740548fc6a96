import logging
from typing import Optional

from app.application.interfaces.converter_adapters import IConverterAdapters
from app.application.interfaces.installer import InstallProgressCallback
from app.core.exceptions import UnsupportedPlatformError
from app.core.models import ToolPaths

logger = logging.getLogger(__name__)


class EnsureReadyUseCase:
    """Make ffmpeg and ffprobe available, downloading them when missing.

    Idempotent: when both tools already answer ``-version`` nothing touches
    the network. Meant to run once per process, typically in the background
    at startup; concurrent runs may race on the destination files.
    """

    def __init__(self, adapters: IConverterAdapters) -> None:
        self._adapters = adapters

    async def tools_ready(self) -> bool:
        return (
            await self._adapters.transcoder.self_test()
            and await self._adapters.media_probe.self_test()
        )

    async def execute(
        self, on_progress: Optional[InstallProgressCallback] = None
    ) -> ToolPaths:
        def report(label: str, percent: float) -> None:
            if on_progress is not None:
                on_progress(label, percent)

        resolver = self._adapters.resolver
        if await self.tools_ready():
            logger.info("FFmpeg already installed at %s", resolver.paths.transcoder_path)
            report("FFmpeg ready", 100.0)
            return resolver.paths

        logger.info("FFmpeg not installed, downloading")
        artifact = self._adapters.artifact_provider()
        if not artifact.supported:
            raise UnsupportedPlatformError(artifact.platform_id)

        # The installer reports into 10-50 (ffmpeg) and 55-95 (ffprobe)
        await self._adapters.installer.install(
            artifact, resolver.install_dir(), on_progress
        )

        paths = resolver.refresh()
        report("FFmpeg download complete", 100.0)
        return paths
