from __future__ import annotations

from datetime import date
from typing import Callable

from ..schemas import Asset
from .cached import CachingApiAssetsPool


class MemoryAssetsPool(CachingApiAssetsPool):
    """Today's "on this day" memories. The listing is keyed by calendar day."""

    name = "memories"

    def __init__(self, *args, today: Callable[[], date] = date.today, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._today = today

    @property
    def cache_key(self) -> str:
        return f"{super().cache_key}:{self._today().isoformat()}"

    async def load_assets(self) -> list[Asset]:
        return await self._client.get_memory_assets(self._today())
