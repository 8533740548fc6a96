"""
Health check API endpoints
"""

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.core.monitoring import health_checker, SystemHealth
from app.presentation.api.v1.dependencies.converter import (
    ConverterRuntime,
    get_runtime,
)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=SystemHealth)
async def health_check(runtime: ConverterRuntime = Depends(get_runtime)):
    """
    Health check endpoint that returns system status and metrics
    """
    return health_checker.get_system_health(
        ffmpeg_state=runtime.install.state,
        conversion_running=runtime.adapters.transcoder.is_running,
        disk_path=str(settings.base_dir),
    )


@router.get("/")
async def root():
    """
    Root endpoint
    """
    return {"message": "Alpha WebM Converter is running", "status": "healthy"}
