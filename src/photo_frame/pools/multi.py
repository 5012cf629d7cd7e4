from __future__ import annotations

import asyncio
import random
from collections import Counter
from typing import Optional, Sequence

from ..schemas import Asset
from .interfaces import AssetPool, dedupe_by_id


class MultiAssetPool:
    """Union of several pools.

    Each sampled slot is assigned to a sub-pool with probability proportional
    to that pool's count; an asset present in two sub-pools is twice as likely.
    """

    name = "multi"

    def __init__(self, pools: Sequence[AssetPool], *, rng: Optional[random.Random] = None) -> None:
        self._pools = list(pools)
        self._rng = rng or random.Random()
        self.supports_rotation = all(pool.supports_rotation for pool in self._pools)
        self.supports_snapshot = all(pool.supports_snapshot for pool in self._pools)

    @property
    def pools(self) -> list[AssetPool]:
        return list(self._pools)

    async def get_asset_count(self) -> int:
        return sum(await self._counts())

    async def get_assets(self, n: int) -> list[Asset]:
        if n <= 0 or not self._pools:
            return []
        counts = await self._counts()
        if sum(counts) == 0:
            return []

        picks = Counter(self._rng.choices(range(len(self._pools)), weights=counts, k=n))
        samples = await asyncio.gather(
            *(self._pools[index].get_assets(quantity) for index, quantity in sorted(picks.items()))
        )
        assets = [asset for sample in samples for asset in sample]
        self._rng.shuffle(assets)
        return assets

    async def get_all_assets(self) -> list[Asset]:
        snapshots = await asyncio.gather(*(pool.get_all_assets() for pool in self._pools))
        return dedupe_by_id([asset for snapshot in snapshots for asset in snapshot])

    async def _counts(self) -> list[int]:
        return list(await asyncio.gather(*(pool.get_asset_count() for pool in self._pools)))
