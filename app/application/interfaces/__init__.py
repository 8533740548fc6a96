from .binary_resolver import IBinaryResolver
from .installer import IArchiveInstaller, InstallProgressCallback
from .media_probe import IMediaProbe
from .transcoder import ITranscoder, ConversionProgressCallback
from .converter_adapters import IConverterAdapters

__all__ = [
    "IBinaryResolver",
    "IArchiveInstaller",
    "InstallProgressCallback",
    "IMediaProbe",
    "ITranscoder",
    "ConversionProgressCallback",
    "IConverterAdapters",
]
