"""UI-facing facades: cached reads and invalidating mutations per entity family.

These are what a dashboard view talks to. Reads go through the query cache;
mutations go through QueryCache.mutate so a successful write refreshes every
view of that family and a failed one leaves the cache alone. Only the
duplicate-coin outcome carries a user-facing error message.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from crypto_dashboard.schemas import (Alert, AlertCreate, AlertUpdate,
                                      WatchlistItem, normalize_coin_id)
from crypto_dashboard.services.effective_store import AlertStore, WatchlistStore
from crypto_dashboard.services.query_cache import QueryCache
from crypto_dashboard.stores.core import DUPLICATE

T = TypeVar("T")

DUPLICATE_COIN_MESSAGE = "Coin is already in your watchlist."


@dataclass(frozen=True)
class MutationOutcome(Generic[T]):
    """Result of a UI mutation: success flag, value, and an optional message to show."""

    ok: bool
    value: T | None = None
    message: str | None = None


def _created(result: object) -> bool:
    return result is not None and result is not DUPLICATE


class WatchlistDashboard:
    """Watchlist view model."""

    def __init__(self, store: WatchlistStore, cache: QueryCache) -> None:
        self._store = store
        self._cache = cache
        self._family = store.family.name

    @property
    def query_key(self) -> tuple[str]:
        return (self._family,)

    async def items(self) -> list[WatchlistItem]:
        return await self._cache.fetch(self.query_key, self._store.list)

    async def coin_ids(self) -> list[str]:
        return [item.coin_id for item in await self.items()]

    async def is_in_watchlist(self, coin_id: str) -> bool:
        wanted = normalize_coin_id(coin_id)
        return any(item.coin_id == wanted for item in await self.items())

    async def add_coin(self, coin_id: str) -> MutationOutcome[WatchlistItem]:
        result = await self._cache.mutate(
            self._family,
            lambda: self._store.add({"coin_id": coin_id}),
            succeeded=_created,
        )
        if result is DUPLICATE:
            return MutationOutcome(False, message=DUPLICATE_COIN_MESSAGE)
        if result is None:
            return MutationOutcome(False)
        return MutationOutcome(True, result, f"Added {result.coin_id} to watchlist!")

    async def remove_coin(self, coin_id: str) -> MutationOutcome[None]:
        removed = await self._cache.mutate(self._family, lambda: self._store.remove(coin_id))
        if not removed:
            return MutationOutcome(False)
        return MutationOutcome(True, message=f"Removed {normalize_coin_id(coin_id)} from watchlist")

    def refresh(self) -> None:
        self._cache.invalidate(self._family)


class AlertsDashboard:
    """Alerts view model."""

    def __init__(self, store: AlertStore, cache: QueryCache) -> None:
        self._store = store
        self._cache = cache
        self._family = store.family.name

    @property
    def query_key(self) -> tuple[str]:
        return (self._family,)

    async def alerts(self) -> list[Alert]:
        return await self._cache.fetch(self.query_key, self._store.list)

    async def alerts_for_coin(self, coin_id: str) -> list[Alert]:
        return await self._cache.fetch(
            (self._family, "coin", coin_id), lambda: self._store.for_coin(coin_id)
        )

    async def create_alert(
        self, fields: AlertCreate | Mapping[str, Any]
    ) -> MutationOutcome[Alert]:
        result = await self._cache.mutate(
            self._family, lambda: self._store.add(fields), succeeded=_created
        )
        if not _created(result):
            return MutationOutcome(False)
        return MutationOutcome(True, result, f'Alert "{result.alert_name}" created!')

    async def update_alert(
        self, alert_id: str, updates: AlertUpdate | Mapping[str, Any]
    ) -> MutationOutcome[None]:
        ok = await self._cache.mutate(
            self._family, lambda: self._store.update(alert_id, updates)
        )
        return MutationOutcome(ok, message="Alert updated" if ok else None)

    async def delete_alert(self, alert_id: str) -> MutationOutcome[None]:
        ok = await self._cache.mutate(self._family, lambda: self._store.remove(alert_id))
        return MutationOutcome(ok)

    async def toggle_alert(self, alert_id: str) -> MutationOutcome[None]:
        ok = await self._cache.mutate(self._family, lambda: self._store.toggle(alert_id))
        return MutationOutcome(ok, message="Alert status toggled" if ok else None)

    def refresh(self) -> None:
        self._cache.invalidate(self._family)
