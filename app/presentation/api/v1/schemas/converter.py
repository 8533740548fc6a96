from typing import Optional

from pydantic import BaseModel, Field

from app.core.config import settings


class ConvertRequestBody(BaseModel):
    input_path: str = ""
    output_folder: str = ""
    # Out-of-range values are clamped, not rejected
    quality: int = Field(default_factory=lambda: settings.conversion_default_quality)


class ToolStatusResponse(BaseModel):
    installed: bool
    path: str
    state: str
    label: str
    progress: float
    error: Optional[str] = None


class InstallQueuedResponse(BaseModel):
    state: str


class ConversionProgressResponse(BaseModel):
    running: bool
    progress: Optional[float] = None


class CancelResponse(BaseModel):
    cancelled: bool
