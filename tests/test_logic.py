import json
import random
from datetime import timedelta
from pathlib import Path

import httpx
import pytest

from conftest import FakeImmichClient, FakePool, make_assets
from photo_frame.api_cache import ApiCache, refresh_interval
from photo_frame.config import AccountSettings, Settings
from photo_frame.errors import AssetNotFoundError
from photo_frame.logic import AccountFrameLogic, MultiAccountFrameLogic
from photo_frame.schemas import ImageRequestedNotification
from photo_frame.webhook import send_webhook_notification

pytestmark = pytest.mark.asyncio


def _settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "EXHAUSTIVE_SHUFFLE": True,
        "DOWNLOAD_IMAGES": True,
        "IMAGE_CACHE_DIR": tmp_path / "ImageCache",
        "BATCH_SIZE": 25,
        "ACCOUNTS": [],
    }
    values.update(overrides)
    return Settings(**values)


def _account_logic(tmp_path: Path, server_url: str, pool: FakePool, **overrides) -> AccountFrameLogic:
    return AccountFrameLogic(
        AccountSettings(server_url=server_url),
        _settings(tmp_path, **overrides),
        client=FakeImmichClient(b"image-bytes"),
        pool=pool,
    )


async def test_account_logic_wires_rotation_batch_and_totals(tmp_path: Path, five_assets) -> None:
    logic = _account_logic(tmp_path, "http://home.test", FakePool(five_assets))

    drawn = {(await logic.get_next_asset()).id for _ in range(5)}
    batch = await logic.get_assets()

    assert drawn == {"A", "B", "C", "D", "E"}
    assert len(batch) == 25
    assert await logic.get_total_assets() == 5
    assert logic.selection.rotation_key == "http://home.test"
    assert str(logic) == "Account Pool [http://immich.test/api]"


async def test_account_logic_serves_cached_images(tmp_path: Path, five_assets) -> None:
    logic = _account_logic(tmp_path, "http://home.test", FakePool(five_assets))

    filename, content_type, stream = await logic.get_image("A")
    stream.close()

    assert filename == "A.jpeg"
    assert content_type == "image/jpeg"
    assert (tmp_path / "ImageCache" / "A.jpeg").exists()


async def test_rotation_key_defaults_when_server_url_missing() -> None:
    assert AccountSettings().rotation_key == "default"


async def test_multi_account_routes_images_to_serving_account(tmp_path: Path) -> None:
    home = _account_logic(tmp_path, "http://home.test", FakePool(make_assets("h1", "h2")))
    office = _account_logic(tmp_path, "http://office.test", FakePool(make_assets("o1")))
    multi = MultiAccountFrameLogic([home, office], _settings(tmp_path), rng=random.Random(0))

    served = [await multi.get_next_asset() for _ in range(6)]
    served_ids = {asset.id for asset in served}
    assert served_ids <= {"h1", "h2", "o1"}

    for asset in served:
        await multi.get_image(asset.id)
    home_calls = [asset_id for asset_id, _ in home.image_cache._client.view_calls]
    office_calls = [asset_id for asset_id, _ in office.image_cache._client.view_calls]
    assert set(home_calls) <= {"h1", "h2"}
    assert set(office_calls) <= {"o1"}


async def test_multi_account_total_is_sum(tmp_path: Path) -> None:
    home = _account_logic(tmp_path, "http://home.test", FakePool(make_assets("h1", "h2")))
    office = _account_logic(tmp_path, "http://office.test", FakePool(make_assets("o1")))
    multi = MultiAccountFrameLogic([home, office], _settings(tmp_path))

    assert await multi.get_total_assets() == 3


async def test_multi_account_skips_empty_accounts(tmp_path: Path) -> None:
    empty = _account_logic(tmp_path, "http://empty.test", FakePool([]))
    full = _account_logic(tmp_path, "http://full.test", FakePool(make_assets("f1")))
    multi = MultiAccountFrameLogic([empty, full], _settings(tmp_path))

    for _ in range(5):
        assert (await multi.get_next_asset()).id == "f1"


async def test_multi_account_with_no_assets_returns_nothing(tmp_path: Path) -> None:
    multi = MultiAccountFrameLogic(
        [
            _account_logic(tmp_path, "http://a.test", FakePool([])),
            _account_logic(tmp_path, "http://b.test", FakePool([])),
        ],
        _settings(tmp_path),
    )

    assert await multi.get_next_asset() is None
    assert await multi.get_assets() == []


async def test_multi_account_unknown_image_tries_each_account(tmp_path: Path) -> None:
    home = _account_logic(tmp_path, "http://home.test", FakePool([]), DOWNLOAD_IMAGES=False)
    office = _account_logic(tmp_path, "http://office.test", FakePool([]), DOWNLOAD_IMAGES=False)
    home.image_cache._client.missing.add("x")
    multi = MultiAccountFrameLogic([home, office], _settings(tmp_path))

    filename, _, _ = await multi.get_image("x")

    assert filename == "x.jpeg"
    assert len(office.image_cache._client.view_calls) == 1

    office.image_cache._client.missing.add("y")
    home.image_cache._client.missing.add("y")
    with pytest.raises(AssetNotFoundError):
        await multi.get_image("y")


async def test_api_cache_reuses_value_until_expiry() -> None:
    now = 0.0
    cache = ApiCache(timedelta(hours=1), clock=lambda: now)
    loads = 0

    async def load():
        nonlocal loads
        loads += 1
        return ["listing"]

    assert await cache.get_or_add("albums", load) == ["listing"]
    assert await cache.get_or_add("albums", load) == ["listing"]
    assert loads == 1

    now = 3601.0
    await cache.get_or_add("albums", load)
    assert loads == 2

    cache.invalidate("albums")
    await cache.get_or_add("albums", load)
    assert loads == 3


async def test_api_cache_drops_stale_keys_and_idle_locks() -> None:
    now = 0.0
    cache = ApiCache(timedelta(hours=1), clock=lambda: now)

    async def load():
        return ["memories"]

    await cache.get_or_add("memories:2026-10-18", load)
    now = 86400.0
    await cache.get_or_add("memories:2026-10-19", load)

    assert list(cache._entries) == ["memories:2026-10-19"]
    assert cache._locks == {}


async def test_refresh_interval_disabled_when_not_positive() -> None:
    assert refresh_interval(0) == timedelta(milliseconds=1)
    assert refresh_interval(6) == timedelta(hours=6)


async def test_webhook_posts_notification_json() -> None:
    received: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(request)
        return httpx.Response(200)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    notification = ImageRequestedNotification(client_identifier="kitchen", requested_image_id="abc")

    delivered = await send_webhook_notification(notification, "http://hooks.test/frame", http_client=http_client)

    assert delivered is True
    body = json.loads(received[0].content)
    assert body["name"] == "ImageRequestedNotification"
    assert body["clientIdentifier"] == "kitchen"
    assert body["requestedImageId"] == "abc"


async def test_webhook_failure_is_logged_not_raised(caplog) -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    notification = ImageRequestedNotification(client_identifier="kitchen", requested_image_id="abc")

    delivered = await send_webhook_notification(notification, "http://hooks.test/frame", http_client=http_client)

    assert delivered is False
    assert any("webhook.failed" in record.getMessage() for record in caplog.records)


async def test_webhook_without_url_is_skipped() -> None:
    notification = ImageRequestedNotification(client_identifier="kitchen", requested_image_id="abc")

    assert await send_webhook_notification(notification, None) is False
