from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PlatformOS(str, Enum):
    windows = "windows"
    macos_intel = "macos-intel"
    macos_arm = "macos-arm"
    unsupported = "unsupported"


@dataclass(frozen=True, slots=True)
class ToolPaths:
    """Resolved ffmpeg/ffprobe locations.

    Paths are not guaranteed to exist; only invoking them tells.
    """

    transcoder_path: str
    prober_path: str


@dataclass(frozen=True, slots=True)
class PlatformArtifact:
    os: PlatformOS
    platform_id: str = ""
    transcoder_url: str = ""
    prober_url: str = ""
    file_extension: str = ""

    @property
    def supported(self) -> bool:
        return self.os is not PlatformOS.unsupported


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    input_path: str
    output_path: str
    quality: int


@dataclass(frozen=True, slots=True)
class ProgressSample:
    fraction_complete: float


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    bytes_written: int
    estimated_fraction: float


class MediaInfo(BaseModel):
    filename: Optional[str] = None
    duration: Optional[float] = None
    size: Optional[int] = None
    bitrate: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    codec: Optional[str] = None
    fps: Optional[str] = None
    pixel_format: Optional[str] = None
    has_alpha: bool = False


class ConvertResult(BaseModel):
    success: bool
    message: str
    output_path: Optional[str] = None
    cancelled: bool = False
    error_code: Optional[str] = None


class ToolStatus(BaseModel):
    installed: bool
    path: str
