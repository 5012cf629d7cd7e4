"""Immich API client for asset queries and image downloads."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from ..errors import RemoteApiError
from ..schemas import Asset, AssetType

logger = logging.getLogger("photo_frame.api.immich")

SEARCH_PAGE_SIZE = 1000


@dataclass(slots=True)
class AssetPayload:
    headers: httpx.Headers
    content: bytes

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")


class ImmichClient:
    """Async client for the subset of the Immich REST API the frame uses."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize with server URL and API key."""
        self.base_url = _normalize_base_url(base_url)
        self.headers = {
            "x-api-key": api_key,
            "Accept": "application/json",
        }
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_asset_statistics(self) -> Dict[str, int]:
        """
        Retrieve library-wide asset counts.

        Returns:
            Dict with ``images``, ``videos`` and ``total`` counts
        """
        response = await self.client.get(
            f"{self.base_url}/assets/statistics", headers=self.headers
        )
        await self._handle_error_response(response)
        return response.json()

    async def search_random(self, size: int, asset_type: AssetType = AssetType.IMAGE) -> List[Asset]:
        """
        Ask the server for a random sample of assets.

        Args:
            size: Maximum number of assets to return
            asset_type: Media type to restrict the sample to

        Returns:
            List of assets, possibly shorter than ``size``
        """
        body = {
            "size": size,
            "type": asset_type.value,
            "withExif": True,
            "withPeople": True,
        }
        response = await self.client.post(
            f"{self.base_url}/search/random", json=body, headers=self.headers
        )
        await self._handle_error_response(response)
        return [Asset.model_validate(item) for item in response.json()]

    async def search_metadata(self, **filters: Any) -> List[Asset]:
        """
        Run a metadata search and collect every result page.

        Args:
            **filters: Search body fields, e.g. ``isFavorite=True`` or ``personIds=[...]``

        Returns:
            All matching assets across pages
        """
        assets: List[Asset] = []
        page: Optional[int] = 1
        while page is not None:
            body = {**filters, "page": page, "size": SEARCH_PAGE_SIZE}
            response = await self.client.post(
                f"{self.base_url}/search/metadata", json=body, headers=self.headers
            )
            await self._handle_error_response(response)
            result = response.json().get("assets", {})
            assets.extend(Asset.model_validate(item) for item in result.get("items", []))

            next_page = result.get("nextPage")
            page = int(next_page) if next_page else None
        return assets

    async def get_album_assets(self, album_id: str) -> List[Asset]:
        """
        List the assets of one album.

        Args:
            album_id: Album identifier

        Returns:
            Assets contained in the album
        """
        response = await self.client.get(
            f"{self.base_url}/albums/{album_id}", headers=self.headers
        )
        await self._handle_error_response(response)
        return [Asset.model_validate(item) for item in response.json().get("assets", [])]

    async def get_memory_assets(self, for_date: date) -> List[Asset]:
        """
        List the assets of every memory for a given day.

        Args:
            for_date: Day the memories are computed for

        Returns:
            Assets across all memories, in server order
        """
        response = await self.client.get(
            f"{self.base_url}/memories",
            params={"for": for_date.isoformat()},
            headers=self.headers,
        )
        await self._handle_error_response(response)
        assets: List[Asset] = []
        for memory in response.json():
            assets.extend(Asset.model_validate(item) for item in memory.get("assets", []))
        return assets

    async def view_asset(self, asset_id: str, size: str = "preview") -> Optional[AssetPayload]:
        """
        Download the rendered image bytes of an asset.

        Args:
            asset_id: Asset identifier
            size: Size tier (thumbnail, preview, fullsize)

        Returns:
            Headers and bytes, or None when the server does not know the asset

        Raises:
            RemoteApiError: For non-404 API errors
        """
        response = await self.client.get(
            f"{self.base_url}/assets/{asset_id}/thumbnail",
            params={"size": size},
            headers={**self.headers, "Accept": "application/octet-stream"},
        )
        if response.status_code == 404:
            return None
        await self._handle_error_response(response)
        return AssetPayload(headers=response.headers, content=response.content)

    async def get_asset_info(self, asset_id: str) -> Dict[str, Any]:
        response = await self.client.get(
            f"{self.base_url}/assets/{asset_id}", headers=self.headers
        )
        await self._handle_error_response(response)
        return response.json()

    async def get_albums_for_asset(self, asset_id: str) -> List[Dict[str, Any]]:
        response = await self.client.get(
            f"{self.base_url}/albums", params={"assetId": asset_id}, headers=self.headers
        )
        await self._handle_error_response(response)
        return response.json()

    async def _handle_error_response(self, response: httpx.Response) -> None:
        """
        Handle error responses from the Immich API.

        Args:
            response: HTTPX response object

        Raises:
            RemoteApiError: With the server's message and status code
        """
        if not response.is_error:
            return

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message", "Unknown Immich API error")
        else:
            message = response.text or "Unknown Immich API error"
        if isinstance(message, list):
            message = "; ".join(str(part) for part in message)

        logger.warning(
            {
                "event": "immich.api.error",
                "status": response.status_code,
                "url": str(response.request.url),
            }
        )
        raise RemoteApiError(str(message), response.status_code)


def _normalize_base_url(server_url: str) -> str:
    url = server_url.strip().rstrip("/")
    if url.lower().endswith("/api"):
        return url
    return f"{url}/api"
