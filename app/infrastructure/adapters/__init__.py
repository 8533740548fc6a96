from .binary_resolver import BinaryResolver
from .archive_installer import ArchiveInstaller, platform_artifact
from .media_probe_ffmpeg import FFmpegMediaProbe
from .transcoder_ffmpeg import FFmpegTranscoder

__all__ = [
    "BinaryResolver",
    "ArchiveInstaller",
    "platform_artifact",
    "FFmpegMediaProbe",
    "FFmpegTranscoder",
]
