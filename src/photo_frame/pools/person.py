from __future__ import annotations

from ..schemas import Asset, AssetType
from .cached import CachingApiAssetsPool


class PersonAssetsPool(CachingApiAssetsPool):
    name = "person"

    async def load_assets(self) -> list[Asset]:
        assets: list[Asset] = []
        for person_id in self._account.people:
            assets.extend(
                await self._client.search_metadata(personIds=[person_id], type=AssetType.IMAGE.value)
            )
        return assets
