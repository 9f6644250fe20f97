"""Query cache: request de-duplication, staleness windows and family-scoped invalidation.

Query keys are tuples whose first element is an entity family name, e.g.
("watchlist",) or ("alerts", "bitcoin"). Invalidating a family drops exactly
the entries whose key starts with that name.
"""
import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryKey = tuple[Hashable, ...]

DEFAULT_STALE_SECONDS = 60.0


@dataclass
class _Entry:
    value: Any
    fetched_at: float
    generation: int


class QueryCache:
    """In-process cache for async loaders keyed by QueryKey.

    - Concurrent fetches of one key share a single in-flight load.
    - Fresh entries are served from memory.
    - Entries older than stale_time are served once more while a background
      refresh runs (stale-while-revalidate).
    - invalidate(family) drops the family's entries; the next fetch awaits a
      fresh load. Loads started before the invalidation are not cached.
    """

    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._stale_time = stale_time
        self._clock = clock
        self._entries: dict[QueryKey, _Entry] = {}
        self._inflight: dict[QueryKey, asyncio.Task] = {}
        self._generations: dict[Hashable, int] = {}
        self._background: set[asyncio.Task] = set()

    @property
    def stale_time(self) -> float:
        return self._stale_time

    def _generation(self, key: QueryKey) -> int:
        return self._generations.get(key[0], 0)

    def is_stale(self, key: QueryKey) -> bool:
        """True when key has no entry or its entry is older than stale_time."""
        entry = self._entries.get(key)
        if entry is None:
            return True
        return self._clock() - entry.fetched_at >= self._stale_time

    def peek(self, key: QueryKey) -> Any | None:
        """Cached value for key without loading, or None."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the value for key, loading it via loader when needed."""
        if not key:
            raise ValueError("Query key must not be empty")
        entry = self._entries.get(key)
        if entry is not None:
            if self.is_stale(key):
                self._refresh_in_background(key, loader)
            return entry.value
        return await asyncio.shield(self._load(key, loader))

    def _load(self, key: QueryKey, loader: Callable[[], Awaitable[T]]) -> asyncio.Task:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(
                self._run_loader(key, loader, self._generation(key))
            )
            self._inflight[key] = task
        return task

    async def _run_loader(
        self, key: QueryKey, loader: Callable[[], Awaitable[T]], generation: int
    ) -> T:
        try:
            value = await loader()
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]
        if generation == self._generation(key):
            self._entries[key] = _Entry(value, self._clock(), generation)
        else:
            logger.debug("Discarding load for %s: invalidated while in flight", key)
        return value

    def _refresh_in_background(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> None:
        if key in self._inflight:
            return
        task = self._load(key, loader)
        self._background.add(task)
        task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Background refresh failed: %s", task.exception())

    def invalidate(self, family: Hashable) -> int:
        """Drop every entry (and in-flight load) for family. Returns entries dropped."""
        self._generations[family] = self._generations.get(family, 0) + 1
        stale_keys = [key for key in self._entries if key[0] == family]
        for key in stale_keys:
            del self._entries[key]
        for key in [key for key in self._inflight if key[0] == family]:
            del self._inflight[key]
        logger.debug("Invalidated %d cached queries for %s", len(stale_keys), family)
        return len(stale_keys)

    async def mutate(
        self,
        family: Hashable,
        operation: Callable[[], Awaitable[T]],
        *,
        succeeded: Callable[[T], bool] = bool,
    ) -> T:
        """Run a mutation and invalidate family's queries only if it succeeded.

        Args:
            family: Entity family the mutation writes to.
            operation: The async mutation.
            succeeded: Decides from the result whether the write took effect.
        """
        result = await operation()
        if succeeded(result):
            self.invalidate(family)
        return result

    async def drain(self) -> None:
        """Wait for background refreshes started so far."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
