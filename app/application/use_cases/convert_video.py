import logging
import os
from typing import Optional

from app.application.interfaces.converter_adapters import IConverterAdapters
from app.application.interfaces.transcoder import ConversionProgressCallback
from app.core.config import settings
from app.core.exceptions import CancellationError, ConverterError, InputNotFoundError
from app.core.models import ConversionRequest, ConvertResult
from utils.video_utils import build_output_path, clamp_quality

logger = logging.getLogger(__name__)


class ConvertVideoUseCase:
    """Convert one video to an alpha WebM and report the outcome as a result.

    Domain errors never escape: failures and cancellation come back as a
    ConvertResult so the caller can render them.
    """

    def __init__(self, adapters: IConverterAdapters) -> None:
        self._adapters = adapters

    async def execute(
        self,
        input_path: str,
        output_folder: str = "",
        quality: Optional[int] = None,
        on_progress: Optional[ConversionProgressCallback] = None,
    ) -> ConvertResult:
        if not input_path:
            return ConvertResult(
                success=False, message="Please select an input file", error_code="NO_INPUT"
            )

        if not os.path.exists(input_path):
            err = InputNotFoundError(file_path=input_path)
            logger.warning(err.message)
            return ConvertResult(success=False, message=err.message, error_code=err.error_code)

        if quality is None:
            quality = settings.conversion_default_quality
        request = ConversionRequest(
            input_path=input_path,
            output_path=build_output_path(input_path, output_folder),
            quality=clamp_quality(quality),
        )

        try:
            output_path = await self._adapters.transcoder.convert(request, on_progress)
        except CancellationError as e:
            return ConvertResult(
                success=False, cancelled=True, message=e.message, error_code=e.error_code
            )
        except ConverterError as e:
            logger.error("Conversion of %s failed: %s", input_path, e.message)
            return ConvertResult(
                success=False,
                message=f"Conversion failed: {e.message}",
                error_code=e.error_code,
            )

        return ConvertResult(
            success=True, message="Conversion complete", output_path=output_path
        )


class CancelConversionUseCase:
    def __init__(self, adapters: IConverterAdapters) -> None:
        self._adapters = adapters

    def execute(self) -> bool:
        return self._adapters.transcoder.cancel()
