from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from app.application.interfaces.converter_adapters import IConverterAdapters
from app.application.use_cases.convert_video import (
    CancelConversionUseCase,
    ConvertVideoUseCase,
)
from app.application.use_cases.ensure_ready import EnsureReadyUseCase
from app.application.use_cases.media_info import MediaInfoUseCase
from app.application.use_cases.tool_status import ToolStatusUseCase
from app.core.exceptions import ConverterError
from app.infrastructure.adapters.bundles.converter import get_converter_adapter_bundle

logger = logging.getLogger(__name__)


@dataclass
class InstallState:
    state: str = "idle"  # idle | checking | downloading | ready | error
    label: str = ""
    progress: float = 0.0
    error: Optional[str] = None


class ConverterRuntime:
    """Process-wide adapters plus the state the front end polls.

    Holds the install progress of the background ensure-ready task and the
    latest progress sample of the running conversion.
    """

    def __init__(self, adapters: IConverterAdapters | None = None) -> None:
        self.adapters = adapters or get_converter_adapter_bundle()
        self.install = InstallState()
        self.conversion_progress: Optional[float] = None
        self._install_task: Optional[asyncio.Task] = None

    @property
    def installing(self) -> bool:
        return self._install_task is not None and not self._install_task.done()

    def start_ensure_ready(self) -> asyncio.Task:
        """Run ensure-ready in the background. Callers must check ``installing``."""
        self._install_task = asyncio.create_task(self.ensure_ready())
        return self._install_task

    async def ensure_ready(self) -> None:
        self.install = InstallState(state="checking", label="Checking FFmpeg...")

        def on_progress(label: str, percent: float) -> None:
            if percent < 100:
                self.install.state = "downloading"
            self.install.label = label
            self.install.progress = percent

        try:
            await EnsureReadyUseCase(self.adapters).execute(on_progress)
        except ConverterError as e:
            logger.error("FFmpeg setup failed: %s", e.message)
            self.install.state = "error"
            self.install.error = e.message
            return
        except Exception as e:
            logger.exception("Unexpected error during FFmpeg setup")
            self.install.state = "error"
            self.install.error = f"Unexpected error: {e}"
            return
        self.install.state = "ready"
        self.install.progress = 100.0

    async def shutdown(self) -> None:
        self.adapters.transcoder.cancel()
        if self.installing:
            self._install_task.cancel()
            try:
                await self._install_task
            except asyncio.CancelledError:
                pass

    def convert_use_case(self) -> ConvertVideoUseCase:
        return ConvertVideoUseCase(self.adapters)

    def cancel_use_case(self) -> CancelConversionUseCase:
        return CancelConversionUseCase(self.adapters)

    def media_info_use_case(self) -> MediaInfoUseCase:
        return MediaInfoUseCase(self.adapters)

    def tool_status_use_case(self) -> ToolStatusUseCase:
        return ToolStatusUseCase(self.adapters)


def get_runtime(request: Request) -> ConverterRuntime:
    return request.app.state.runtime
