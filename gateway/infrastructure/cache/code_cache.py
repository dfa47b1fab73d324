"""Authorization code cache.

Providers issue single-use authorization codes, but the callback can be
delivered twice (popup reloads, duplicate network delivery). The cache maps
a code to the token it was exchanged for so a repeat callback is answered
without a second exchange. Entries are swept after a fixed retention window
by a background task owned by the service (started in the app lifespan).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from gateway.domain.exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class CacheEntry:
    """Token obtained for one authorization code."""

    code: str
    token: str
    inserted_at: float


class CodeCache:
    """Process-wide, time-bounded code -> token store.

    One asyncio.Lock guards every read and write. Codes are used exactly as
    received (no normalization). Entries are never updated after insertion.

    get_or_exchange() additionally collapses concurrent exchanges for the
    same code: the first caller runs the exchange, later callers await its
    result. Failed exchanges are not cached.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            ttl_seconds: Retention window; older entries are removed on sweep.
            sweep_interval_seconds: Period of the background sweeper.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Future[str]] = {}
        self._lock = asyncio.Lock()
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    async def lookup(self, code: str) -> str | None:
        """Return the token cached for code, or None."""
        async with self._lock:
            entry = self._entries.get(code)
        return entry.token if entry else None

    async def store(self, code: str, token: str) -> None:
        """Insert code -> token. A code already present keeps its first token."""
        async with self._lock:
            self._store_locked(code, token)

    def _store_locked(self, code: str, token: str) -> None:
        if code not in self._entries:
            self._entries[code] = CacheEntry(code=code, token=token, inserted_at=self._clock())

    async def sweep(self, now: float | None = None) -> int:
        """Remove entries older than the retention window.

        Args:
            now: Reference time; defaults to the cache clock.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            reference = self._clock() if now is None else now
            expired = [
                code
                for code, entry in self._entries.items()
                if reference - entry.inserted_at > self.ttl_seconds
            ]
            for code in expired:
                del self._entries[code]
        if expired:
            logger.debug("Code cache sweep removed %d entries", len(expired))
        return len(expired)

    async def get_or_exchange(
        self, code: str, exchange: Callable[[], Awaitable[str]]
    ) -> str:
        """Return the cached token for code, running exchange() at most once.

        Args:
            code: Authorization code exactly as received.
            exchange: Coroutine factory performing the outbound exchange.

        Returns:
            The access token.

        Raises:
            Whatever exchange() raises; concurrent waiters see the same error.
        """
        async with self._lock:
            entry = self._entries.get(code)
            if entry is not None:
                logger.info("Authorization code already exchanged; returning cached token")
                return entry.token
            pending = self._inflight.get(code)
            owner = pending is None
            if pending is None:
                pending = asyncio.get_running_loop().create_future()
                self._inflight[code] = pending

        if not owner:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if pending.cancelled():
                    raise TransportError("Token exchange was interrupted") from None
                raise

        try:
            token = await exchange()
        except asyncio.CancelledError:
            async with self._lock:
                self._inflight.pop(code, None)
            pending.cancel()
            raise
        except Exception as exc:
            async with self._lock:
                self._inflight.pop(code, None)
            pending.set_exception(exc)
            # Mark retrieved so an unawaited future does not log a warning.
            pending.exception()
            raise

        async with self._lock:
            self._store_locked(code, token)
            self._inflight.pop(code, None)
        pending.set_result(token)
        return token

    def start(self) -> None:
        """Start the periodic sweeper on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._run_sweeper())
            logger.info(
                "Code cache sweeper started (ttl=%ss, interval=%ss)",
                self.ttl_seconds,
                self.sweep_interval_seconds,
            )

    async def stop(self) -> None:
        """Cancel the sweeper and wait for it to finish."""
        task = self._sweeper
        self._sweeper = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Code cache sweeper stopped")

    async def _run_sweeper(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Code cache sweep failed")
