from __future__ import annotations

from typing import Callable, Protocol

from app.core.models import ConversionRequest

ConversionProgressCallback = Callable[[float], None]


class ITranscoder(Protocol):
    """Runs one alpha WebM conversion at a time."""

    @property
    def is_running(self) -> bool: ...

    async def convert(
        self,
        request: ConversionRequest,
        on_progress: ConversionProgressCallback | None = None,
    ) -> str:
        """Convert and return the output path.

        Raises CancellationError, ConversionError or ConversionInProgressError.
        """
        ...

    def cancel(self) -> bool:
        """Cancel the running conversion. Returns False when nothing runs."""
        ...

    async def self_test(self) -> bool:
        """Return True when the transcoder answers a version query."""
        ...
