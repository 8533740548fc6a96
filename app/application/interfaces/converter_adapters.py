from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from app.core.models import PlatformArtifact

from .binary_resolver import IBinaryResolver
from .installer import IArchiveInstaller
from .media_probe import IMediaProbe
from .transcoder import ITranscoder


@runtime_checkable
class IConverterAdapters(Protocol):
    resolver: IBinaryResolver
    installer: IArchiveInstaller
    media_probe: IMediaProbe
    transcoder: ITranscoder
    artifact_provider: Callable[[], PlatformArtifact]
