"""
FFmpeg provisioning endpoints
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.presentation.api.v1.dependencies.converter import (
    ConverterRuntime,
    get_runtime,
)
from app.presentation.api.v1.schemas.converter import (
    InstallQueuedResponse,
    ToolStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("/status", response_model=ToolStatusResponse)
async def tool_status(runtime: ConverterRuntime = Depends(get_runtime)):
    """Whether ffmpeg answers, where it is, and how the last setup went."""
    status = await runtime.tool_status_use_case().execute()
    install = runtime.install
    return ToolStatusResponse(
        installed=status.installed,
        path=status.path,
        state=install.state,
        label=install.label,
        progress=install.progress,
        error=install.error,
    )


@router.post("/install", response_model=InstallQueuedResponse, status_code=202)
async def install_tools(runtime: ConverterRuntime = Depends(get_runtime)):
    """Retry FFmpeg setup explicitly; failed downloads are never retried on their own."""
    if runtime.installing:
        raise HTTPException(
            status_code=409, detail={"error": "FFmpeg setup already running"}
        )
    runtime.start_ensure_ready()
    return InstallQueuedResponse(state=runtime.install.state)
