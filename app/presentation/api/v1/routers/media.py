"""
Media probing endpoints
"""

from fastapi import APIRouter, Depends, Query

from app.core.models import MediaInfo
from app.presentation.api.v1.dependencies.converter import (
    ConverterRuntime,
    get_runtime,
)

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/info", response_model=MediaInfo)
async def media_info(
    path: str = Query(..., description="Local path of the media file"),
    runtime: ConverterRuntime = Depends(get_runtime),
):
    """Container and first video stream metadata. Errors map to 404/422."""
    return await runtime.media_info_use_case().execute(path)
