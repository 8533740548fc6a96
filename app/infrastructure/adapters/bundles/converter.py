from __future__ import annotations

from types import SimpleNamespace

from app.application.interfaces.converter_adapters import IConverterAdapters
from app.infrastructure.adapters import (
    ArchiveInstaller,
    BinaryResolver,
    FFmpegMediaProbe,
    FFmpegTranscoder,
    platform_artifact,
)


def get_converter_adapter_bundle(*, base_dir: str | None = None) -> IConverterAdapters:
    """Provide the adapters container for conversion and tool provisioning.

    Prober and transcoder share one resolver so a refresh after installing
    binaries is seen by both.
    """
    resolver = BinaryResolver(base_dir=base_dir)
    media_probe = FFmpegMediaProbe(resolver)
    return SimpleNamespace(
        resolver=resolver,
        installer=ArchiveInstaller(),
        media_probe=media_probe,
        transcoder=FFmpegTranscoder(resolver, media_probe),
        artifact_provider=platform_artifact,
    )
