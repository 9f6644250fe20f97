"""Entity stores for watchlist items and alerts.

- LocalStore: synchronous origin-local persistence (one JSON array per family)
- RemoteStoreClient: async CRUD against the server-backed API

Both resolve every operation to a value rather than raising, so the effective
store can route between them based on session state.

Example:
    local = LocalStore(WATCHLIST, MemoryStorage())
    local.add({"coinId": "Bitcoin"})
    print([item.coin_id for item in local.read()])  # ["bitcoin"]
"""
from crypto_dashboard.stores.core import (ALERTS, DUPLICATE, FAMILIES,
                                          WATCHLIST, EntityFamily,
                                          EntityStoreABC, RemoteOutcome)
from crypto_dashboard.stores.local import (FileStorage, KeyValueStorage,
                                           LocalStore, MemoryStorage)
from crypto_dashboard.stores.remote import RemoteResult, RemoteStoreClient

__all__ = [
    "ALERTS",
    "DUPLICATE",
    "FAMILIES",
    "WATCHLIST",
    "EntityFamily",
    "EntityStoreABC",
    "FileStorage",
    "KeyValueStorage",
    "LocalStore",
    "MemoryStorage",
    "RemoteOutcome",
    "RemoteResult",
    "RemoteStoreClient",
]
