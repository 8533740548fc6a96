from __future__ import annotations

from typing import Protocol

from app.core.models import ToolPaths


class IBinaryResolver(Protocol):
    """Locates the ffmpeg and ffprobe executables."""

    @property
    def paths(self) -> ToolPaths:
        """Paths from the most recent resolution."""
        ...

    def resolve(self) -> ToolPaths:
        """Return freshly resolved tool paths. Must never raise; falls back to bare names."""
        ...

    def refresh(self) -> ToolPaths:
        """Re-run resolution and replace ``paths`` with the result."""
        ...

    def install_dir(self) -> str:
        """Directory that freshly downloaded binaries are written to."""
        ...
