"""Factory wiring the client-side sync core: stores, cache, coordinator, facades."""
from dataclasses import dataclass

import httpx

from crypto_dashboard.services.dashboard import (AlertsDashboard,
                                                 WatchlistDashboard)
from crypto_dashboard.services.effective_store import AlertStore, WatchlistStore
from crypto_dashboard.services.query_cache import (DEFAULT_STALE_SECONDS,
                                                   QueryCache)
from crypto_dashboard.services.sync import FamilySync, SyncCoordinator
from crypto_dashboard.session import SessionState
from crypto_dashboard.stores.core import ALERTS, WATCHLIST
from crypto_dashboard.stores.local import KeyValueStorage, LocalStore
from crypto_dashboard.stores.remote import RemoteStoreClient


@dataclass
class Dashboard:
    """Everything a dashboard page needs, sharing one session and one cache."""

    sessions: SessionState
    cache: QueryCache
    watchlist_store: WatchlistStore
    alert_store: AlertStore
    watchlist: WatchlistDashboard
    alerts: AlertsDashboard
    sync: SyncCoordinator

    def close(self) -> None:
        """Stop listening for session transitions."""
        self.sync.detach()


def create_dashboard(
    storage: KeyValueStorage | None,
    http_client: httpx.AsyncClient,
    sessions: SessionState,
    *,
    stale_time: float = DEFAULT_STALE_SECONDS,
) -> Dashboard:
    """Create the stores for both families and attach the sync coordinator to sessions.

    Args:
        storage: Origin-local storage backend (None when unavailable).
        http_client: httpx client with base_url pointing at the dashboard API.
        sessions: Session boundary; its absent -> present edges trigger a sync.
        stale_time: Seconds before cached reads are refreshed.

    Returns:
        A Dashboard whose coordinator is already subscribed to sessions.
    """
    cache = QueryCache(stale_time=stale_time)

    watchlist_local = LocalStore(WATCHLIST, storage)
    watchlist_remote = RemoteStoreClient(WATCHLIST, http_client)
    alerts_local = LocalStore(ALERTS, storage)
    alerts_remote = RemoteStoreClient(ALERTS, http_client)

    watchlist_store = WatchlistStore(watchlist_local, watchlist_remote, sessions)
    alert_store = AlertStore(alerts_local, alerts_remote, sessions)

    coordinator = SyncCoordinator(
        [
            FamilySync(watchlist_local, watchlist_remote),
            FamilySync(alerts_local, alerts_remote),
        ],
        cache=cache,
    )
    coordinator.attach(sessions)

    return Dashboard(
        sessions=sessions,
        cache=cache,
        watchlist_store=watchlist_store,
        alert_store=alert_store,
        watchlist=WatchlistDashboard(watchlist_store, cache),
        alerts=AlertsDashboard(alert_store, cache),
        sync=coordinator,
    )
