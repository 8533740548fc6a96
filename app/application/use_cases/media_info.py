import os

from app.application.interfaces.converter_adapters import IConverterAdapters
from app.core.exceptions import InputNotFoundError
from app.core.models import MediaInfo


class MediaInfoUseCase:
    def __init__(self, adapters: IConverterAdapters) -> None:
        self._adapters = adapters

    async def execute(self, input_path: str) -> MediaInfo:
        """Probe ``input_path``. Raises InputNotFoundError or ProbeError."""
        if not input_path or not os.path.exists(input_path):
            raise InputNotFoundError(file_path=input_path)
        return await self._adapters.media_probe.info(input_path)
