from __future__ import annotations

import random
from typing import Optional

from ..api import ImmichClient
from ..api_cache import ApiCache
from ..config import AccountSettings
from .album import AlbumAssetsPool
from .all_assets import AllAssetsPool
from .favorites import FavoriteAssetsPool
from .interfaces import AssetPool
from .memories import MemoryAssetsPool
from .multi import MultiAssetPool
from .person import PersonAssetsPool


def build_pool(
    account: AccountSettings,
    client: ImmichClient,
    api_cache: ApiCache,
    *,
    rng: Optional[random.Random] = None,
) -> AssetPool:
    """Compose the pool described by an account's filter flags."""
    if not (account.show_favorites or account.show_memories or account.albums or account.people):
        return AllAssetsPool(client, account)

    pools: list[AssetPool] = []
    if account.show_favorites:
        pools.append(FavoriteAssetsPool(api_cache, client, account, rng=rng))
    if account.show_memories:
        pools.append(MemoryAssetsPool(api_cache, client, account, rng=rng))
    if account.albums:
        pools.append(AlbumAssetsPool(api_cache, client, account, rng=rng))
    if account.people:
        pools.append(PersonAssetsPool(api_cache, client, account, rng=rng))

    return MultiAssetPool(pools, rng=rng)
