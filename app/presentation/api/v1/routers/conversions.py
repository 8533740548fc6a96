"""
Conversion endpoints
"""

import logging

from fastapi import APIRouter, Depends

from app.core.models import ConvertResult
from app.presentation.api.v1.dependencies.converter import (
    ConverterRuntime,
    get_runtime,
)
from app.presentation.api.v1.schemas.converter import (
    CancelResponse,
    ConversionProgressResponse,
    ConvertRequestBody,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversions", tags=["conversions"])


@router.post("", response_model=ConvertResult)
async def convert(
    body: ConvertRequestBody, runtime: ConverterRuntime = Depends(get_runtime)
):
    """Convert to VP9/WebM with alpha. Returns once ffmpeg has finished."""

    def on_progress(percent: float) -> None:
        runtime.conversion_progress = percent

    use_case = runtime.convert_use_case()
    if runtime.adapters.transcoder.is_running:
        # Rejected by the transcoder; leave the running job's progress alone
        return await use_case.execute(
            body.input_path, body.output_folder, body.quality
        )

    runtime.conversion_progress = 0.0
    try:
        return await use_case.execute(
            body.input_path, body.output_folder, body.quality, on_progress
        )
    finally:
        runtime.conversion_progress = None


@router.get("/progress", response_model=ConversionProgressResponse)
async def conversion_progress(runtime: ConverterRuntime = Depends(get_runtime)):
    return ConversionProgressResponse(
        running=runtime.adapters.transcoder.is_running,
        progress=runtime.conversion_progress,
    )


@router.post("/cancel", response_model=CancelResponse)
async def cancel(runtime: ConverterRuntime = Depends(get_runtime)):
    cancelled = runtime.cancel_use_case().execute()
    logger.info("Cancel requested, running conversion found: %s", cancelled)
    return CancelResponse(cancelled=cancelled)
