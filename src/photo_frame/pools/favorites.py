from __future__ import annotations

from ..schemas import Asset, AssetType
from .cached import CachingApiAssetsPool


class FavoriteAssetsPool(CachingApiAssetsPool):
    name = "favorites"

    async def load_assets(self) -> list[Asset]:
        return await self._client.search_metadata(isFavorite=True, type=AssetType.IMAGE.value)
