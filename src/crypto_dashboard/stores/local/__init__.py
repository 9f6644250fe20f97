"""Origin-local persistence: storage backends and the per-family LocalStore."""
from crypto_dashboard.stores.local.local_store import LocalStore
from crypto_dashboard.stores.local.storage import (FileStorage,
                                                   KeyValueStorage,
                                                   MemoryStorage,
                                                   StorageFullError)

__all__ = [
    "FileStorage",
    "KeyValueStorage",
    "LocalStore",
    "MemoryStorage",
    "StorageFullError",
]
