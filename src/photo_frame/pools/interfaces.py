from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import Asset


@runtime_checkable
class AssetPool(Protocol):
    # False for pools whose remote endpoint already randomizes server-side.
    supports_rotation: bool
    # True when get_all_assets returns the complete candidate set.
    supports_snapshot: bool

    async def get_asset_count(self) -> int: ...

    async def get_assets(self, n: int) -> list[Asset]: ...

    async def get_all_assets(self) -> list[Asset]: ...


def dedupe_by_id(assets: list[Asset]) -> list[Asset]:
    seen: set[str] = set()
    unique: list[Asset] = []
    for asset in assets:
        if asset.id in seen:
            continue
        seen.add(asset.id)
        unique.append(asset)
    return unique
