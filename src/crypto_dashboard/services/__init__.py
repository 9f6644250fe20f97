"""Service layer: effective stores, query cache, sync coordinator and repositories."""
from crypto_dashboard.services.dashboard import (AlertsDashboard,
                                                 MutationOutcome,
                                                 WatchlistDashboard)
from crypto_dashboard.services.dashboard_factory import (Dashboard,
                                                         create_dashboard)
from crypto_dashboard.services.effective_store import (AlertStore,
                                                       EffectiveStore,
                                                       WatchlistStore)
from crypto_dashboard.services.query_cache import QueryCache
from crypto_dashboard.services.sync import (FamilySync, SyncCoordinator,
                                            SyncReport, SyncState)

__all__ = [
    "AlertStore",
    "AlertsDashboard",
    "Dashboard",
    "EffectiveStore",
    "FamilySync",
    "MutationOutcome",
    "QueryCache",
    "SyncCoordinator",
    "SyncReport",
    "SyncState",
    "WatchlistDashboard",
    "WatchlistStore",
    "create_dashboard",
]
