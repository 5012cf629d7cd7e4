from __future__ import annotations

from ..schemas import Asset
from .cached import CachingApiAssetsPool


class AlbumAssetsPool(CachingApiAssetsPool):
    """Assets of the configured albums, minus anything in an excluded album."""

    name = "album"

    async def load_assets(self) -> list[Asset]:
        excluded: set[str] = set()
        for album_id in self._account.excluded_albums:
            excluded.update(asset.id for asset in await self._client.get_album_assets(album_id))

        assets: list[Asset] = []
        for album_id in self._account.albums:
            album_assets = await self._client.get_album_assets(album_id)
            assets.extend(asset for asset in album_assets if asset.id not in excluded)
        return assets
