from __future__ import annotations

import asyncio
import io
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Callable, Optional

from .api import ImmichClient
from .errors import AssetNotFoundError, CacheIOError

logger = logging.getLogger("photo_frame.image_cache")

ImageResult = tuple[str, str, BinaryIO]


def extension_for(content_type: str) -> str:
    return "webp" if content_type.lower() == "image/webp" else "jpeg"


def _created_at(path: Path) -> datetime:
    stat = path.stat()
    created = getattr(stat, "st_birthtime", stat.st_mtime)
    return datetime.fromtimestamp(created, tz=timezone.utc)


class ImageCache:
    """Preview images kept on disk as ``<asset_id>.<ext>`` for a number of days."""

    def __init__(
        self,
        client: ImmichClient,
        directory: Path,
        *,
        enabled: bool = False,
        renew_days: int = 30,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._client = client
        self.directory = Path(directory)
        self.enabled = enabled
        self.renew_days = renew_days
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    async def get(self, asset_id: str) -> ImageResult:
        async with self._asset_lock(asset_id):
            if self.enabled:
                cached = self._read_cached(asset_id)
                if cached is not None:
                    return cached
            return await self._fetch(asset_id)

    @asynccontextmanager
    async def _asset_lock(self, asset_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(asset_id, asyncio.Lock())
        self._waiters[asset_id] = self._waiters.get(asset_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[asset_id] -= 1
            if self._waiters[asset_id] == 0:
                del self._waiters[asset_id]
                del self._locks[asset_id]

    def _read_cached(self, asset_id: str) -> Optional[ImageResult]:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = next((p for p in self.directory.iterdir() if p.stem == asset_id), None)
            if path is None:
                logger.debug({"event": "image_cache.miss", "asset_id": asset_id})
                return None

            age_days = (self._clock() - _created_at(path)).days
            if age_days < self.renew_days:
                logger.debug({"event": "image_cache.hit", "asset_id": asset_id, "age_days": age_days})
                extension = path.suffix.lstrip(".")
                return path.name, f"image/{extension}", path.open("rb")

            logger.info({"event": "image_cache.expired", "asset_id": asset_id, "age_days": age_days})
            path.unlink()
        except OSError as exc:
            raise CacheIOError(f"Image cache read failed for {asset_id}: {exc}") from exc
        return None

    async def _fetch(self, asset_id: str) -> ImageResult:
        payload = await self._client.view_asset(asset_id, size="preview")
        if payload is None:
            raise AssetNotFoundError(asset_id)

        content_type = payload.content_type
        filename = f"{asset_id}.{extension_for(content_type)}"

        if not self.enabled:
            return filename, content_type, io.BytesIO(payload.content)

        path = self.directory / filename
        handle: Optional[BinaryIO] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            handle = path.open("w+b")
            handle.write(payload.content)
            handle.seek(0)
        except OSError as exc:
            if handle is not None:
                handle.close()
            self._discard(path)
            raise CacheIOError(f"Image cache write failed for {asset_id}: {exc}") from exc

        logger.info({"event": "image_cache.stored", "asset_id": asset_id, "bytes": len(payload.content)})
        return filename, content_type, handle

    @staticmethod
    def _discard(path: Path) -> None:
        # No partial file may remain as a cache entry.
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning({"event": "image_cache.discard_failed", "path": str(path), "error": str(exc)})
