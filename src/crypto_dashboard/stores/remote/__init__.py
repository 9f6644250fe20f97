"""Client for the server-backed store."""
from crypto_dashboard.stores.remote.remote_client import (RemoteResult,
                                                          RemoteStoreClient)

__all__ = ["RemoteResult", "RemoteStoreClient"]
