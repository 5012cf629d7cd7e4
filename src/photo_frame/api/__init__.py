"""Remote photo server access."""

from .immich_client import AssetPayload, ImmichClient

__all__ = ["AssetPayload", "ImmichClient"]
