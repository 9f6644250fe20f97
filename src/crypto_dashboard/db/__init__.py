"""Database package: models and session management."""
from crypto_dashboard.db.models import (AlertRecord, ApiSession, User,
                                        WatchlistEntry)

__all__ = ["AlertRecord", "ApiSession", "User", "WatchlistEntry"]
