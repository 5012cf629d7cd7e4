from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from ..api import ImmichClient
from ..api_cache import ApiCache
from ..config import AccountSettings
from ..errors import RemoteApiError, TransientPoolError
from ..schemas import Asset, AssetType
from .interfaces import dedupe_by_id

logger = logging.getLogger("photo_frame.pools")


@asynccontextmanager
async def remote_query(pool_name: str) -> AsyncIterator[None]:
    """Translate remote API and transport failures into TransientPoolError."""
    try:
        yield
    except (RemoteApiError, httpx.HTTPError) as exc:
        logger.warning({"event": "pool.query_failed", "pool": pool_name, "error": str(exc)})
        raise TransientPoolError(f"{pool_name} query failed: {exc}") from exc


def is_displayable(asset: Asset, account: AccountSettings) -> bool:
    if asset.type != AssetType.IMAGE:
        return False
    return account.show_archived or not asset.is_archived


class CachingApiAssetsPool:
    """Pool backed by one full listing, reused through the ApiCache."""

    name = "pool"
    supports_rotation = True
    supports_snapshot = True

    def __init__(
        self,
        api_cache: ApiCache,
        client: ImmichClient,
        account: AccountSettings,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._api_cache = api_cache
        self._client = client
        self._account = account
        self._rng = rng or random.Random()

    @property
    def cache_key(self) -> str:
        return f"{self.name}:{self._account.rotation_key}"

    async def get_asset_count(self) -> int:
        return len(await self._all_assets())

    async def get_assets(self, n: int) -> list[Asset]:
        assets = await self._all_assets()
        if n <= 0 or not assets:
            return []
        return self._rng.sample(assets, min(n, len(assets)))

    async def get_all_assets(self) -> list[Asset]:
        return list(await self._all_assets())

    async def load_assets(self) -> list[Asset]:
        raise NotImplementedError

    async def _all_assets(self) -> list[Asset]:
        return await self._api_cache.get_or_add(self.cache_key, self._load_filtered)

    async def _load_filtered(self) -> list[Asset]:
        async with remote_query(self.name):
            assets = await self.load_assets()

        filtered = dedupe_by_id([asset for asset in assets if is_displayable(asset, self._account)])
        logger.info({"event": "pool.loaded", "pool": self.name, "count": len(filtered)})
        return filtered
