"""Candidate asset pools."""

from .album import AlbumAssetsPool
from .all_assets import AllAssetsPool
from .builder import build_pool
from .cached import CachingApiAssetsPool
from .favorites import FavoriteAssetsPool
from .interfaces import AssetPool, dedupe_by_id
from .memories import MemoryAssetsPool
from .multi import MultiAssetPool
from .person import PersonAssetsPool

__all__ = [
    "AlbumAssetsPool",
    "AllAssetsPool",
    "AssetPool",
    "CachingApiAssetsPool",
    "FavoriteAssetsPool",
    "MemoryAssetsPool",
    "MultiAssetPool",
    "PersonAssetsPool",
    "build_pool",
    "dedupe_by_id",
]
