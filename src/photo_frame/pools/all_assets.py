from __future__ import annotations

from ..api import ImmichClient
from ..config import AccountSettings
from ..schemas import Asset
from .cached import is_displayable, remote_query


class AllAssetsPool:
    """The whole library, sampled through the server's random search.

    Samples are independent server-side draws, so there is no true snapshot
    and client-side rotation over it is not attempted.
    """

    name = "all"
    supports_rotation = False
    supports_snapshot = False

    def __init__(self, client: ImmichClient, account: AccountSettings) -> None:
        self._client = client
        self._account = account

    async def get_asset_count(self) -> int:
        async with remote_query(self.name):
            statistics = await self._client.get_asset_statistics()
        return int(statistics.get("images", 0))

    async def get_assets(self, n: int) -> list[Asset]:
        if n <= 0:
            return []
        async with remote_query(self.name):
            assets = await self._client.search_random(n)
        return [asset for asset in assets if is_displayable(asset, self._account)]

    async def get_all_assets(self) -> list[Asset]:
        return await self.get_assets(await self.get_asset_count())
