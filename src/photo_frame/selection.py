from __future__ import annotations

import logging
import random
from typing import Optional

from .errors import ExhaustedError
from .pools import AssetPool, dedupe_by_id
from .rotation import RotationTable
from .schemas import Asset

logger = logging.getLogger("photo_frame.selection")


class SelectionPolicy:
    """Decide how the next asset or batch is drawn from a pool."""

    def __init__(
        self,
        pool: AssetPool,
        rotation_key: str,
        *,
        exhaustive_shuffle: bool = False,
        sample_attempts: int = 5,
        rotation_table: Optional[RotationTable[Asset]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.pool = pool
        self.rotation_key = rotation_key
        self.exhaustive_shuffle = exhaustive_shuffle
        self.sample_attempts = max(1, sample_attempts)
        self._rng = rng or random.Random()
        self.rotation_table = rotation_table or RotationTable(lambda _key: self._rotation_candidates)

    @property
    def uses_rotation(self) -> bool:
        return self.exhaustive_shuffle and self.pool.supports_rotation

    async def get_next_asset(self) -> Optional[Asset]:
        if self.uses_rotation:
            try:
                return await self.rotation_table.next(self.rotation_key)
            except ExhaustedError:
                logger.info({"event": "rotation.exhausted_fallback", "key": self.rotation_key})
                return await self._direct_draw()

        if self.exhaustive_shuffle:
            logger.debug(
                {
                    "event": "rotation.skipped",
                    "key": self.rotation_key,
                    "reason": "pool samples randomly server-side",
                }
            )
        return await self._direct_draw()

    async def get_batch(self, count: int) -> list[Asset]:
        """Return ``count`` assets; with exhaustive shuffle, cover the universe evenly."""
        if not self.exhaustive_shuffle:
            return await self.pool.get_assets(count)

        universe = await self.build_universe()
        if not universe:
            return await self.pool.get_assets(count)

        batch: list[Asset] = []
        while len(batch) < count:
            shuffled = list(universe)
            self._rng.shuffle(shuffled)
            batch.extend(shuffled[: count - len(batch)])
        return batch

    async def build_universe(self) -> list[Asset]:
        """Collect the pool's distinct candidates, bounded by its reported count."""
        total = await self.pool.get_asset_count()
        if total <= 0:
            return []

        if self.pool.supports_snapshot:
            return dedupe_by_id(await self.pool.get_all_assets())[:total]

        universe: dict[str, Asset] = {}
        for _ in range(self.sample_attempts):
            for asset in await self.pool.get_assets(total):
                universe.setdefault(asset.id, asset)
            if len(universe) >= total:
                break
        logger.debug(
            {"event": "selection.universe", "key": self.rotation_key, "size": len(universe), "reported": total}
        )
        return list(universe.values())

    async def reset_rotation(self) -> None:
        await self.rotation_table.reset(self.rotation_key)

    async def _direct_draw(self) -> Optional[Asset]:
        assets = await self.pool.get_assets(1)
        return assets[0] if assets else None

    async def _rotation_candidates(self) -> list[Asset]:
        total = await self.pool.get_asset_count()
        if total <= 0:
            return []
        if self.pool.supports_snapshot:
            return await self.pool.get_all_assets()
        return await self.pool.get_assets(total)
