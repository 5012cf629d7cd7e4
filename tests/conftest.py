import asyncio
import inspect
from io import BytesIO
from typing import Optional

import httpx
import pytest
from PIL import Image

from photo_frame.api import AssetPayload
from photo_frame.schemas import Asset, AssetType


def pytest_pyfunc_call(pyfuncitem):
    if asyncio.iscoroutinefunction(pyfuncitem.obj):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            sig = inspect.signature(pyfuncitem.obj)
            accepted = {name: value for name, value in pyfuncitem.funcargs.items() if name in sig.parameters}
            loop.run_until_complete(pyfuncitem.obj(**accepted))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def make_assets(*ids: str, asset_type: AssetType = AssetType.IMAGE) -> list[Asset]:
    return [Asset(id=asset_id, type=asset_type) for asset_id in ids]


def image_bytes(color=(200, 120, 40), fmt: str = "JPEG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (16, 16), color=color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakePool:
    """In-memory pool recording how it was queried."""

    def __init__(self, assets, *, supports_rotation: bool = True, supports_snapshot: bool = True) -> None:
        self.assets = list(assets)
        self.supports_rotation = supports_rotation
        self.supports_snapshot = supports_snapshot
        self.count_calls = 0
        self.get_calls: list[int] = []
        self.snapshot_calls = 0

    async def get_asset_count(self) -> int:
        self.count_calls += 1
        return len(self.assets)

    async def get_assets(self, n: int) -> list[Asset]:
        self.get_calls.append(n)
        return self.assets[:n]

    async def get_all_assets(self) -> list[Asset]:
        self.snapshot_calls += 1
        return list(self.assets)


class FakeImmichClient:
    """Stands in for ImmichClient.view_asset in image cache tests."""

    def __init__(self, content: bytes = b"", content_type: Optional[str] = "image/jpeg") -> None:
        self.content = content
        self.content_type = content_type
        self.missing: set[str] = set()
        self.view_calls: list[tuple[str, str]] = []
        self.delay = 0.0
        self.base_url = "http://immich.test/api"

    async def view_asset(self, asset_id: str, size: str = "preview") -> Optional[AssetPayload]:
        self.view_calls.append((asset_id, size))
        if self.delay:
            await asyncio.sleep(self.delay)
        if asset_id in self.missing:
            return None
        headers = httpx.Headers({"Content-Type": self.content_type} if self.content_type is not None else {})
        return AssetPayload(headers=headers, content=self.content)

    async def aclose(self) -> None:
        return None


@pytest.fixture
def five_assets() -> list[Asset]:
    return make_assets("A", "B", "C", "D", "E")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes()
