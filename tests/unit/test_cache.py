"""Unit tests for the per-owner fetch cache"""

import pytest
from coop_notify.services.cache import FetchCache


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingLoader:
    def __init__(self, data=None, error: Exception | None = None):
        self.data = ["a", "b"] if data is None else data
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.data)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(fake_clock: FakeClock) -> FetchCache:
    return FetchCache("notifications", ttl_seconds=300.0, clock=fake_clock)


async def test_fetch_within_ttl_hits_cache(cache: FetchCache, fake_clock: FakeClock):
    loader = CountingLoader()

    first = await cache.fetch("user-123", loader)
    fake_clock.advance(299)
    second = await cache.fetch("user-123", loader)

    assert first == second == ["a", "b"]
    assert loader.calls == 1


async def test_fetch_after_ttl_reloads(cache: FetchCache, fake_clock: FakeClock):
    loader = CountingLoader()

    await cache.fetch("user-123", loader)
    fake_clock.advance(300)
    await cache.fetch("user-123", loader)

    assert loader.calls == 2


async def test_force_refresh_always_fetches(cache: FetchCache):
    loader = CountingLoader()

    await cache.fetch("user-123", loader)
    await cache.fetch("user-123", loader, force_refresh=True)

    assert loader.calls == 2


async def test_empty_result_is_never_served_from_cache(cache: FetchCache):
    loader = CountingLoader(data=[])

    await cache.fetch("user-123", loader)
    await cache.fetch("user-123", loader)

    assert loader.calls == 2


async def test_entries_are_per_owner(cache: FetchCache):
    loader = CountingLoader()

    await cache.fetch("user-123", loader)
    await cache.fetch("user-456", loader)

    assert loader.calls == 2


async def test_invalidate_single_owner(cache: FetchCache):
    loader = CountingLoader()
    await cache.fetch("user-123", loader)
    await cache.fetch("user-456", loader)

    cache.invalidate("user-123")
    await cache.fetch("user-123", loader)
    await cache.fetch("user-456", loader)

    assert loader.calls == 3


async def test_invalidate_all(cache: FetchCache):
    loader = CountingLoader()
    await cache.fetch("user-123", loader)

    cache.invalidate()

    assert cache.entries == {}


async def test_failed_load_records_error_and_keeps_data(cache: FetchCache, fake_clock: FakeClock):
    await cache.fetch("user-123", CountingLoader())
    fake_clock.advance(301)

    with pytest.raises(RuntimeError):
        await cache.fetch("user-123", CountingLoader(error=RuntimeError("boom")))

    entry = cache.entry("user-123")
    assert entry.data == ["a", "b"]
    assert isinstance(entry.error, RuntimeError)
    assert entry.loading is False


async def test_returned_list_is_a_copy(cache: FetchCache):
    result = await cache.fetch("user-123", CountingLoader())
    result.append("mutated")

    assert cache.entry("user-123").data == ["a", "b"]
