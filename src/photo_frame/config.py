from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountSettings(BaseModel):
    """Connection details and pool filters for one photo server account."""

    server_url: str = ""
    api_key: str = ""
    show_favorites: bool = False
    show_memories: bool = False
    show_archived: bool = False
    albums: list[str] = Field(default_factory=list)
    excluded_albums: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)

    @property
    def rotation_key(self) -> str:
        return self.server_url or "default"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_nested_delimiter="__", extra="ignore"
    )

    APP_NAME: str = "photo-frame"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    EXHAUSTIVE_SHUFFLE: bool = False
    DOWNLOAD_IMAGES: bool = False
    # Days a cached image stays valid before it is fetched again.
    RENEW_IMAGES_DURATION: int = 30
    # Hours album/person/favorite listings are reused before re-querying.
    REFRESH_ALBUM_PEOPLE_INTERVAL: int = 12
    WEBHOOK: Optional[str] = None
    IMAGE_CACHE_DIR: Path = Path("ImageCache")
    BATCH_SIZE: int = 25
    UNIVERSE_SAMPLE_ATTEMPTS: int = 5

    ACCOUNTS: list[AccountSettings] = Field(default_factory=list)


settings = Settings()
