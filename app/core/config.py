"""
Application configuration using Pydantic Settings
"""

import sys
from pathlib import Path
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # API Settings
    api_title: str = "Alpha WebM Converter"
    api_description: str = "Local backend converting videos to VP9/WebM with alpha"
    api_version: str = "1.0.0"

    # Server Settings
    host: str = "127.0.0.1"
    port: int = 8765
    debug: bool = False

    # CORS Settings
    cors_origins: Union[List[str], str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string to list.

        Example:
            >>> parse_cors_origins("http://localhost:3000,http://localhost:8080")
            ['http://localhost:3000', 'http://localhost:8080']
        """
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Logging Settings
    log_level: str = "INFO"
    log_format: str = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    log_file: str = "data/app.log"

    # Binary layout
    # Directory treated as "where the executable lives". Empty = auto-detect.
    app_base_dir: str = ""
    ffmpeg_tool_dir: str = "ffmpeg"
    ffmpeg_binary_name: str = "ffmpeg"
    ffprobe_binary_name: str = "ffprobe"
    # Used instead of site-packages when installed as a wheel
    user_data_dir_name: str = ".alpha-webm-converter"

    # Download Settings
    ffmpeg_static_version: str = "b6.1.1"
    ffmpeg_download_host: str = "https://cdn.npmmirror.com/binaries/ffmpeg-static"
    download_chunk_size: int = 32 * 1024
    # gzip'd ffmpeg binaries expand roughly 3x
    download_expansion_factor: int = 3
    download_timeout: Optional[float] = None

    # Conversion Settings
    conversion_default_quality: int = 30
    conversion_min_quality: int = 0
    conversion_max_quality: int = 63
    conversion_output_extension: str = ".webm"

    # Throttling of state-changing requests
    max_post_requests_per_minute: int = 30

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def ffmpeg_download_base_url(self) -> str:
        """Base URL for the ffmpeg-static release artifacts"""
        return f"{self.ffmpeg_download_host.rstrip('/')}/{self.ffmpeg_static_version}"

    @property
    def base_dir(self) -> Path:
        """Directory of the running executable.

        Frozen builds (PyInstaller and friends) live next to sys.executable;
        from source the project root plays that role. An installed package
        would land in site-packages, so it gets a per-user directory.
        """
        if self.app_base_dir:
            return Path(self.app_base_dir)
        if getattr(sys, "frozen", False):
            return Path(sys.executable).resolve().parent
        source_root = Path(__file__).resolve().parents[2]
        if source_root.name in ("site-packages", "dist-packages"):
            return Path.home() / self.user_data_dir_name
        return source_root


# Global settings instance
settings = Settings()
