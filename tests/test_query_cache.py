import asyncio

import pytest

from crypto_dashboard.services.query_cache import QueryCache

pytestmark = pytest.mark.asyncio


class CountingLoader:
    """Async loader returning successive values and counting calls."""

    def __init__(self, *values, gate: asyncio.Event | None = None):
        self.values = list(values)
        self.calls = 0
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        return self.values[min(self.calls, len(self.values)) - 1]


async def test_concurrent_fetches_share_one_load():
    cache = QueryCache()
    loader = CountingLoader(["bitcoin"])

    results = await asyncio.gather(*(cache.fetch(("watchlist",), loader) for _ in range(3)))

    assert loader.calls == 1
    assert results == [["bitcoin"]] * 3


async def test_fresh_entries_are_served_from_memory(clock):
    cache = QueryCache(stale_time=60, clock=clock)
    loader = CountingLoader("v1", "v2")

    assert await cache.fetch(("watchlist",), loader) == "v1"
    clock.advance(59)
    assert await cache.fetch(("watchlist",), loader) == "v1"
    assert loader.calls == 1
    assert not cache.is_stale(("watchlist",))


async def test_stale_entry_is_served_while_revalidating(clock):
    cache = QueryCache(stale_time=60, clock=clock)
    loader = CountingLoader("v1", "v2")
    await cache.fetch(("watchlist",), loader)

    clock.advance(60)
    assert cache.is_stale(("watchlist",))
    assert await cache.fetch(("watchlist",), loader) == "v1"

    await cache.drain()
    assert loader.calls == 2
    assert cache.peek(("watchlist",)) == "v2"


async def test_invalidate_drops_only_that_family():
    cache = QueryCache()
    loader = CountingLoader("value")
    for key in [("watchlist",), ("alerts",), ("alerts", "coin", "bitcoin")]:
        await cache.fetch(key, loader)

    assert cache.invalidate("alerts") == 2

    assert cache.peek(("watchlist",)) == "value"
    assert cache.peek(("alerts",)) is None
    assert cache.peek(("alerts", "coin", "bitcoin")) is None


async def test_load_invalidated_in_flight_is_not_cached():
    cache = QueryCache()
    gate = asyncio.Event()
    slow = CountingLoader("before", gate=gate)

    pending = asyncio.create_task(cache.fetch(("watchlist",), slow))
    await asyncio.sleep(0)
    cache.invalidate("watchlist")
    gate.set()

    assert await pending == "before"
    assert cache.peek(("watchlist",)) is None

    assert await cache.fetch(("watchlist",), CountingLoader("after")) == "after"


async def test_mutation_invalidates_only_on_success():
    cache = QueryCache()
    await cache.fetch(("watchlist",), CountingLoader(["bitcoin"]))

    async def failed():
        return False

    async def succeeded():
        return True

    assert await cache.mutate("watchlist", failed) is False
    assert cache.peek(("watchlist",)) == ["bitcoin"]

    assert await cache.mutate("watchlist", succeeded) is True
    assert cache.peek(("watchlist",)) is None


async def test_custom_success_predicate():
    cache = QueryCache()
    await cache.fetch(("watchlist",), CountingLoader("cached"))

    async def created():
        return None

    await cache.mutate("watchlist", created, succeeded=lambda result: result is not None)
    assert cache.peek(("watchlist",)) == "cached"


async def test_failed_load_is_not_cached():
    cache = QueryCache()

    async def broken():
        raise RuntimeError("backend down")

    with pytest.raises(RuntimeError):
        await cache.fetch(("watchlist",), broken)

    assert cache.peek(("watchlist",)) is None
    assert await cache.fetch(("watchlist",), CountingLoader("ok")) == "ok"


async def test_empty_key_is_rejected():
    with pytest.raises(ValueError):
        await QueryCache().fetch((), CountingLoader("x"))
