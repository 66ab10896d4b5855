from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from spritestrip.cache import AssetCache
from spritestrip.errors import DecodeError, FetchError
from spritestrip.models import PixelBuffer

SOURCES = ["https://example.com/a.png", "https://example.com/b.png", "https://example.com/c.png"]


def _decoder() -> MagicMock:
    return MagicMock(side_effect=lambda data: PixelBuffer(1, 1, data))


def _fetcher() -> AsyncMock:
    return AsyncMock(side_effect=lambda source: bytes([len(source) % 256, 0, 0, 255]))


async def test_population_fetches_and_decodes_each_source_once():
    cache = AssetCache(SOURCES)
    fetch, decode = _fetcher(), _decoder()

    first = await cache.get_or_populate(decode, fetch)
    second = await cache.get_or_populate(decode, fetch)

    assert first is second
    assert len(first) == 3
    assert fetch.await_count == 3
    assert decode.call_count == 3
    assert [c.args[0] for c in fetch.await_args_list] == SOURCES


async def test_assets_kept_in_source_order():
    cache = AssetCache(SOURCES)
    payloads = {s: bytes([i, 0, 0, 255]) for i, s in enumerate(SOURCES)}
    fetch = AsyncMock(side_effect=payloads.__getitem__)
    assets = await cache.get_or_populate(_decoder(), fetch)
    assert [a.pixel(0, 0)[0] for a in assets] == [0, 1, 2]


async def test_not_populated_until_first_call():
    cache = AssetCache(SOURCES)
    assert not cache.populated
    assert len(cache) == 0
    await cache.get_or_populate(_decoder(), _fetcher())
    assert cache.populated
    assert len(cache) == 3


async def test_fetch_failure_leaves_cache_empty():
    cache = AssetCache(SOURCES)
    fetch = AsyncMock(side_effect=[b"\x00\x00\x00\xff", b"\x00\x00\x00\xff", FetchError("boom")])

    with pytest.raises(FetchError):
        await cache.get_or_populate(_decoder(), fetch)

    assert not cache.populated
    assert len(cache) == 0


async def test_decode_failure_on_first_source_stops_population():
    cache = AssetCache(SOURCES)
    fetch = _fetcher()
    decode = MagicMock(side_effect=DecodeError("not an image"))

    with pytest.raises(DecodeError):
        await cache.get_or_populate(decode, fetch)

    assert fetch.await_count == 1
    assert not cache.populated


async def test_failed_population_is_retried():
    cache = AssetCache(SOURCES)
    failing = AsyncMock(side_effect=FetchError("offline"))
    with pytest.raises(FetchError):
        await cache.get_or_populate(_decoder(), failing)

    fetch = _fetcher()
    assets = await cache.get_or_populate(_decoder(), fetch)
    assert len(assets) == 3
    assert fetch.await_count == 3


async def test_concurrent_callers_share_one_population():
    cache = AssetCache(SOURCES)
    calls: list[str] = []

    async def slow_fetch(source: str) -> bytes:
        calls.append(source)
        await asyncio.sleep(0.01)
        return b"\x01\x02\x03\xff"

    results = await asyncio.gather(
        *(cache.get_or_populate(_decoder(), slow_fetch) for _ in range(5))
    )

    assert calls == SOURCES
    assert all(r is results[0] for r in results)


async def test_concurrent_callers_after_failure_retry_once():
    cache = AssetCache(["only"])
    attempts = 0

    async def flaky(source: str) -> bytes:
        nonlocal attempts
        attempts += 1
        await asyncio.sleep(0.01)
        if attempts == 1:
            raise FetchError("first attempt fails")
        return b"\x01\x02\x03\xff"

    results = await asyncio.gather(
        *(cache.get_or_populate(_decoder(), flaky) for _ in range(3)),
        return_exceptions=True,
    )

    assert isinstance(results[0], FetchError)
    assert results[1] is results[2]
    assert attempts == 2


async def test_empty_source_list():
    cache = AssetCache([])
    fetch = _fetcher()
    assert await cache.get_or_populate(_decoder(), fetch) == ()
    assert cache.populated
    fetch.assert_not_awaited()
