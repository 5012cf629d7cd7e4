from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    AUDIO = "AUDIO"
    OTHER = "OTHER"


class Asset(BaseModel):
    """A media item as reported by the photo server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    type: AssetType = AssetType.IMAGE
    original_file_name: Optional[str] = Field(default=None, alias="originalFileName")
    is_favorite: bool = Field(default=False, alias="isFavorite")
    is_archived: bool = Field(default=False, alias="isArchived")
    file_created_at: Optional[datetime] = Field(default=None, alias="fileCreatedAt")


class HealthResponse(BaseModel):
    ok: bool
    version: str
    service: str


class TotalAssetsResponse(BaseModel):
    total: int


class ImageRequestedNotification(BaseModel):
    """Webhook payload sent when a frame client requests an image."""

    name: str = "ImageRequestedNotification"
    client_identifier: str = Field(serialization_alias="clientIdentifier")
    requested_image_id: str = Field(serialization_alias="requestedImageId")
    date_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        serialization_alias="dateTime",
    )
