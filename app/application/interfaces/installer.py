from __future__ import annotations

from typing import Callable, Protocol

from app.core.models import PlatformArtifact

InstallProgressCallback = Callable[[str, float], None]


class IArchiveInstaller(Protocol):
    async def install(
        self,
        artifact: PlatformArtifact,
        target_dir: str,
        on_progress: InstallProgressCallback | None = None,
    ) -> None:
        """Download, decompress and mark executable both tool artifacts.

        Raises DownloadError, DecompressionError or InstallError on failure.
        """
        ...
