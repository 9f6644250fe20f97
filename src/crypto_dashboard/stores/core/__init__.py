"""Core store abstractions."""
from crypto_dashboard.stores.core.error_mapper import (RemoteOutcome,
                                                       StoreErrorMapper)
from crypto_dashboard.stores.core.exceptions import (AlreadyExists,
                                                     NetworkError, NotFound,
                                                     SerializationError,
                                                     StoreError, Unauthorized)
from crypto_dashboard.stores.core.families import (ALERTS, FAMILIES, WATCHLIST,
                                                   EntityFamily)
from crypto_dashboard.stores.core.ids import (RecordOrigin, is_local_id,
                                              new_local_id, new_remote_id,
                                              origin_of)
from crypto_dashboard.stores.core.store_abc import DUPLICATE, EntityStoreABC

__all__ = [
    "ALERTS",
    "DUPLICATE",
    "FAMILIES",
    "WATCHLIST",
    "AlreadyExists",
    "EntityFamily",
    "EntityStoreABC",
    "NetworkError",
    "NotFound",
    "RecordOrigin",
    "RemoteOutcome",
    "SerializationError",
    "StoreError",
    "StoreErrorMapper",
    "Unauthorized",
    "is_local_id",
    "new_local_id",
    "new_remote_id",
    "origin_of",
]
