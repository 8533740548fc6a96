from __future__ import annotations

import logging
import os
import platform
import shutil
from pathlib import Path
from typing import Callable, List, Optional

from app.core.config import settings
from app.core.models import ToolPaths

logger = logging.getLogger(__name__)

# Go-style identifiers, shared with the bundled resources/<tool>/<os>-<arch> layout
_OS_NAMES = {"windows": "windows", "darwin": "darwin", "linux": "linux"}
_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def current_os(system: Optional[str] = None) -> str:
    system = (system or platform.system()).lower()
    return _OS_NAMES.get(system, system)


def current_arch(machine: Optional[str] = None) -> str:
    machine = (machine or platform.machine()).lower()
    return _ARCH_NAMES.get(machine, machine)


def platform_dir(system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Return the platform directory name, e.g. ``windows-amd64`` or ``darwin-arm64``."""
    return f"{current_os(system)}-{current_arch(machine)}"


def executable_name(name: str, system: Optional[str] = None) -> str:
    if current_os(system) == "windows":
        return name + ".exe"
    return name


class BinaryResolver:
    """Find ffmpeg/ffprobe on PATH or in the bundled layouts next to the app.

    Each tool is looked up on its own, first match wins:

    1. the command search path
    2. ``<base>/resources/<tool_dir>/<os>-<arch>/``
    3. ``<base>/resources/<tool_dir>/``
    4. ``<base>/``
    5. the bare name, left for the installer to provide
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        *,
        tool_dir: Optional[str] = None,
        system: Optional[str] = None,
        machine: Optional[str] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir else settings.base_dir
        self.tool_dir = tool_dir or settings.ffmpeg_tool_dir
        self.system = system
        self.machine = machine
        self._which = which
        self._paths = self.resolve()

    @property
    def paths(self) -> ToolPaths:
        return self._paths

    def refresh(self) -> ToolPaths:
        self._paths = self.resolve()
        logger.info(
            "Resolved ffmpeg=%s ffprobe=%s",
            self._paths.transcoder_path,
            self._paths.prober_path,
        )
        return self._paths

    def install_dir(self) -> str:
        return str(
            self.base_dir
            / "resources"
            / self.tool_dir
            / platform_dir(self.system, self.machine)
        )

    def search_dirs(self) -> List[Path]:
        resources = self.base_dir / "resources" / self.tool_dir
        return [
            resources / platform_dir(self.system, self.machine),
            resources,
            self.base_dir,
        ]

    def resolve(self) -> ToolPaths:
        return ToolPaths(
            transcoder_path=self._locate(settings.ffmpeg_binary_name),
            prober_path=self._locate(settings.ffprobe_binary_name),
        )

    def _locate(self, name: str) -> str:
        binary = executable_name(name, self.system)
        try:
            found = self._which(binary)
        except OSError:
            found = None
        if found:
            return found

        for directory in self.search_dirs():
            candidate = directory / binary
            if os.path.isfile(candidate):
                return str(candidate)

        return binary
