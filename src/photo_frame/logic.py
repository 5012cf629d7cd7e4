from __future__ import annotations

import asyncio
import logging
import random
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from .api import ImmichClient
from .api_cache import ApiCache, refresh_interval
from .config import AccountSettings, Settings
from .errors import AssetNotFoundError
from .image_cache import ImageCache, ImageResult
from .pools import AssetPool, build_pool
from .schemas import Asset
from .selection import SelectionPolicy
from .webhook import send_webhook_notification

logger = logging.getLogger("photo_frame.logic")

OWNER_MEMORY = 10_000


class AccountFrameLogic:
    """Everything a frame asks of one photo server account."""

    def __init__(
        self,
        account: AccountSettings,
        settings: Settings,
        *,
        client: Optional[ImmichClient] = None,
        pool: Optional[AssetPool] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.account = account
        self._settings = settings
        self._client = client or ImmichClient(account.server_url, account.api_key)
        self._api_cache = ApiCache(refresh_interval(settings.REFRESH_ALBUM_PEOPLE_INTERVAL))
        self.pool = pool or build_pool(account, self._client, self._api_cache, rng=rng)
        self.selection = SelectionPolicy(
            self.pool,
            account.rotation_key,
            exhaustive_shuffle=settings.EXHAUSTIVE_SHUFFLE,
            sample_attempts=settings.UNIVERSE_SAMPLE_ATTEMPTS,
            rng=rng,
        )
        self.image_cache = ImageCache(
            self._client,
            settings.IMAGE_CACHE_DIR,
            enabled=settings.DOWNLOAD_IMAGES,
            renew_days=settings.RENEW_IMAGES_DURATION,
        )

    async def get_next_asset(self) -> Optional[Asset]:
        return await self.selection.get_next_asset()

    async def get_assets(self) -> list[Asset]:
        return await self.selection.get_batch(self._settings.BATCH_SIZE)

    async def get_total_assets(self) -> int:
        return await self.pool.get_asset_count()

    async def get_image(self, asset_id: str) -> ImageResult:
        return await self.image_cache.get(asset_id)

    async def get_asset_info(self, asset_id: str) -> Dict[str, Any]:
        return await self._client.get_asset_info(asset_id)

    async def get_album_info(self, asset_id: str) -> List[Dict[str, Any]]:
        return await self._client.get_albums_for_asset(asset_id)

    async def send_webhook_notification(self, notification: BaseModel) -> bool:
        return await send_webhook_notification(notification, self._settings.WEBHOOK)

    async def aclose(self) -> None:
        await self._client.aclose()

    def __str__(self) -> str:
        return f"Account Pool [{self._client.base_url}]"


class MultiAccountFrameLogic:
    """Spread requests over several accounts, weighted by their asset totals.

    Remembers which account served an asset so image and metadata requests
    go back to the right server.
    """

    def __init__(
        self,
        accounts: Sequence[AccountFrameLogic],
        settings: Settings,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.accounts = list(accounts)
        self._settings = settings
        self._rng = rng or random.Random()
        self._owners: OrderedDict[str, AccountFrameLogic] = OrderedDict()

    @classmethod
    def from_settings(cls, settings: Settings) -> "MultiAccountFrameLogic":
        return cls([AccountFrameLogic(account, settings) for account in settings.ACCOUNTS], settings)

    async def get_next_asset(self) -> Optional[Asset]:
        account = await self._choose_account()
        if account is None:
            return None
        asset = await account.get_next_asset()
        if asset is not None:
            self._remember(account, [asset])
        return asset

    async def get_assets(self) -> list[Asset]:
        account = await self._choose_account()
        if account is None:
            return []
        assets = await account.get_assets()
        self._remember(account, assets)
        return assets

    async def get_total_assets(self) -> int:
        return sum(await self._totals())

    async def get_image(self, asset_id: str) -> ImageResult:
        owner = self._owners.get(asset_id)
        if owner is not None:
            return await owner.get_image(asset_id)

        for account in self.accounts:
            try:
                result = await account.get_image(asset_id)
            except AssetNotFoundError:
                continue
            self._remember(account, [asset_id])
            return result
        raise AssetNotFoundError(asset_id)

    async def get_asset_info(self, asset_id: str) -> Dict[str, Any]:
        return await self._owner_or_first(asset_id).get_asset_info(asset_id)

    async def get_album_info(self, asset_id: str) -> List[Dict[str, Any]]:
        return await self._owner_or_first(asset_id).get_album_info(asset_id)

    async def send_webhook_notification(self, notification: BaseModel) -> bool:
        return await send_webhook_notification(notification, self._settings.WEBHOOK)

    async def aclose(self) -> None:
        await asyncio.gather(*(account.aclose() for account in self.accounts))

    async def _totals(self) -> list[int]:
        return list(await asyncio.gather(*(account.get_total_assets() for account in self.accounts)))

    async def _choose_account(self) -> Optional[AccountFrameLogic]:
        if not self.accounts:
            return None
        if len(self.accounts) == 1:
            return self.accounts[0]
        totals = await self._totals()
        if sum(totals) == 0:
            return None
        return self._rng.choices(self.accounts, weights=totals, k=1)[0]

    def _owner_or_first(self, asset_id: str) -> AccountFrameLogic:
        owner = self._owners.get(asset_id)
        if owner is not None:
            return owner
        if not self.accounts:
            raise AssetNotFoundError(asset_id)
        return self.accounts[0]

    def _remember(self, account: AccountFrameLogic, assets: Sequence[Asset | str]) -> None:
        for asset in assets:
            asset_id = asset if isinstance(asset, str) else asset.id
            self._owners[asset_id] = account
            self._owners.move_to_end(asset_id)
        while len(self._owners) > OWNER_MEMORY:
            self._owners.popitem(last=False)
