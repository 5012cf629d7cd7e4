import asyncio

import pytest

from photo_frame.rotation import RotationTable

pytestmark = pytest.mark.asyncio


def static_sources(universes: dict[str, list[str]]):
    created: list[str] = []

    def factory(key: str):
        created.append(key)

        async def source() -> list[str]:
            return list(universes[key])

        return source

    return factory, created


async def test_decks_are_created_once_per_key() -> None:
    factory, created = static_sources({"home": ["A", "B"]})
    table = RotationTable(factory)

    first = table.get_deck("home")
    await table.next("home")
    await table.next("home")

    assert table.get_deck("home") is first
    assert created == ["home"]
    assert table.keys() == ["home"]


async def test_keys_rotate_independently() -> None:
    factory, _ = static_sources({"home": ["A", "B", "C"], "office": ["X", "Y"]})
    table = RotationTable(factory)

    home = [await table.next("home") for _ in range(3)]
    office = [await table.next("office") for _ in range(2)]

    assert sorted(home) == ["A", "B", "C"]
    assert sorted(office) == ["X", "Y"]


async def test_reset_of_unknown_key_creates_nothing() -> None:
    factory, created = static_sources({})
    table = RotationTable(factory)

    await table.reset("never-drawn")

    assert "never-drawn" not in table
    assert created == []


async def test_reset_discards_remaining_items() -> None:
    factory, _ = static_sources({"home": ["A", "B", "C", "D"]})
    table = RotationTable(factory)

    await table.next("home")
    await table.reset("home")

    assert table.get_deck("home").remaining == 0
    drawn = [await table.next("home") for _ in range(4)]
    assert sorted(drawn) == ["A", "B", "C", "D"]


async def test_concurrent_first_access_builds_a_single_deck() -> None:
    factory, created = static_sources({"home": [str(i) for i in range(8)]})
    table = RotationTable(factory)

    drawn = await asyncio.gather(*(table.next("home") for _ in range(8)))

    assert created == ["home"]
    assert sorted(drawn) == [str(i) for i in range(8)]


async def test_slow_refill_on_one_key_does_not_block_another() -> None:
    release = asyncio.Event()

    def factory(key: str):
        async def source() -> list[str]:
            if key == "slow":
                await release.wait()
            return [f"{key}-1"]

        return source

    table = RotationTable(factory)

    slow_draw = asyncio.ensure_future(table.next("slow"))
    await asyncio.sleep(0)

    fast = await asyncio.wait_for(table.next("fast"), timeout=1.0)
    assert fast == "fast-1"
    assert not slow_draw.done()

    release.set()
    assert await slow_draw == "slow-1"
