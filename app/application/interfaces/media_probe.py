from __future__ import annotations

from typing import Protocol

from app.core.models import MediaInfo


class IMediaProbe(Protocol):
    async def duration(self, input_path: str) -> float:
        """Return media duration in seconds.
        Implementations may use ffprobe or other tools.
        """
        ...

    async def info(self, input_path: str) -> MediaInfo:
        """Return container and first video stream metadata."""
        ...

    async def self_test(self) -> bool:
        """Return True when the probing tool answers a version query."""
        ...
