"""API routers for the dashboard's server-backed store.

Includes routes for:
- /api/watchlist - the signed-in user's watchlist (GET, POST, PUT, DELETE ?coinId=)
- /api/alerts - the signed-in user's alerts (GET, POST, PUT, DELETE ?id=)

Every route requires an `Authorization: Bearer <token>` header.
"""
from crypto_dashboard.routers.alerts import router as alerts_router
from crypto_dashboard.routers.watchlist import router as watchlist_router

__all__ = [
    "alerts_router",
    "watchlist_router",
]
