"""CodeCache unit tests: retention, sweep, and single exchange per code."""

import asyncio

import pytest

from gateway.infrastructure.cache.code_cache import CodeCache


async def test_lookup_returns_none_for_unknown_code(code_cache: CodeCache) -> None:
    assert await code_cache.lookup("abc") is None


async def test_store_then_lookup_returns_token(code_cache: CodeCache) -> None:
    await code_cache.store("abc", "tok-1")
    assert await code_cache.lookup("abc") == "tok-1"


async def test_store_keeps_first_token_for_code(code_cache: CodeCache) -> None:
    """Entries are never updated after insertion."""
    await code_cache.store("abc", "tok-1")
    await code_cache.store("abc", "tok-2")
    assert await code_cache.lookup("abc") == "tok-1"
    assert len(code_cache) == 1


async def test_codes_are_not_normalized(code_cache: CodeCache) -> None:
    await code_cache.store("AbC", "tok-1")
    assert await code_cache.lookup("abc") is None
    assert await code_cache.lookup(" AbC") is None


async def test_sweep_removes_entries_older_than_ttl(code_cache: CodeCache, fake_clock) -> None:
    await code_cache.store("old", "tok-old")
    fake_clock.advance(200)
    await code_cache.store("new", "tok-new")
    fake_clock.advance(101)

    removed = await code_cache.sweep()

    assert removed == 1
    assert await code_cache.lookup("old") is None
    assert await code_cache.lookup("new") == "tok-new"


async def test_sweep_keeps_entry_exactly_at_ttl(code_cache: CodeCache, fake_clock) -> None:
    await code_cache.store("abc", "tok")
    fake_clock.advance(300)
    assert await code_cache.sweep() == 0
    assert await code_cache.lookup("abc") == "tok"


async def test_sweep_accepts_explicit_now(code_cache: CodeCache, fake_clock) -> None:
    await code_cache.store("abc", "tok")
    assert await code_cache.sweep(now=fake_clock() + 301) == 1
    assert len(code_cache) == 0


async def test_get_or_exchange_caches_token(code_cache: CodeCache) -> None:
    calls = 0

    async def exchange() -> str:
        nonlocal calls
        calls += 1
        return "tok-1"

    assert await code_cache.get_or_exchange("abc", exchange) == "tok-1"
    assert await code_cache.get_or_exchange("abc", exchange) == "tok-1"
    assert calls == 1


async def test_get_or_exchange_runs_exchange_once_for_concurrent_requests(
    code_cache: CodeCache,
) -> None:
    """Duplicate deliveries of a code in flight share one exchange."""
    release = asyncio.Event()
    calls = 0

    async def exchange() -> str:
        nonlocal calls
        calls += 1
        await release.wait()
        return "tok-1"

    first = asyncio.create_task(code_cache.get_or_exchange("abc", exchange))
    second = asyncio.create_task(code_cache.get_or_exchange("abc", exchange))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    release.set()

    assert await asyncio.gather(first, second) == ["tok-1", "tok-1"]
    assert calls == 1


async def test_failed_exchange_is_not_cached_and_reaches_waiters(
    code_cache: CodeCache,
) -> None:
    release = asyncio.Event()

    async def failing() -> str:
        await release.wait()
        raise ValueError("exchange failed")

    first = asyncio.create_task(code_cache.get_or_exchange("abc", failing))
    second = asyncio.create_task(code_cache.get_or_exchange("abc", failing))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, second, return_exceptions=True)
    assert all(isinstance(r, ValueError) for r in results)
    assert await code_cache.lookup("abc") is None

    async def succeeding() -> str:
        return "tok-2"

    assert await code_cache.get_or_exchange("abc", succeeding) == "tok-2"


async def test_entry_expires_after_retention_and_code_is_exchanged_again(
    code_cache: CodeCache, fake_clock
) -> None:
    tokens = iter(["tok-1", "tok-2"])

    async def exchange() -> str:
        return next(tokens)

    assert await code_cache.get_or_exchange("abc", exchange) == "tok-1"
    fake_clock.advance(301)
    await code_cache.sweep()
    assert await code_cache.get_or_exchange("abc", exchange) == "tok-2"


async def test_background_sweeper_removes_expired_entries(fake_clock) -> None:
    cache = CodeCache(ttl_seconds=300, sweep_interval_seconds=0.01, clock=fake_clock)
    await cache.store("abc", "tok")
    fake_clock.advance(301)

    cache.start()
    try:
        for _ in range(100):
            if len(cache) == 0:
                break
            await asyncio.sleep(0.01)
    finally:
        await cache.stop()

    assert len(cache) == 0


async def test_stop_without_start_is_noop(code_cache: CodeCache) -> None:
    await code_cache.stop()


@pytest.mark.parametrize("ttl", [0.5, 60.0])
async def test_ttl_is_configurable(fake_clock, ttl: float) -> None:
    cache = CodeCache(ttl_seconds=ttl, clock=fake_clock)
    await cache.store("abc", "tok")
    fake_clock.advance(ttl + 0.1)
    assert await cache.sweep() == 1
