from app.application.interfaces.converter_adapters import IConverterAdapters
from app.core.models import ToolStatus


class ToolStatusUseCase:
    def __init__(self, adapters: IConverterAdapters) -> None:
        self._adapters = adapters

    async def execute(self) -> ToolStatus:
        installed = await self._adapters.transcoder.self_test()
        return ToolStatus(
            installed=installed, path=self._adapters.resolver.paths.transcoder_path
        )
