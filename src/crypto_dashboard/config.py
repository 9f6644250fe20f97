"""Environment-driven settings for the API server and the dashboard client."""
import os
from dataclasses import dataclass
from pathlib import Path

from crypto_dashboard.db.sessions import DATABASE_URL
from crypto_dashboard.services.query_cache import DEFAULT_STALE_SECONDS


@dataclass(frozen=True)
class Settings:
    """Runtime configuration. Build with Settings.from_env()."""

    database_url: str = DATABASE_URL
    api_url: str = "http://127.0.0.1:8000"
    storage_dir: Path = Path.home() / ".crypto_dashboard" / "storage"
    stale_seconds: float = DEFAULT_STALE_SECONDS
    token: str | None = None
    user_id: str | None = None
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        storage_dir = os.getenv("CRYPTO_DASHBOARD_STORAGE_DIR")
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            api_url=os.getenv("CRYPTO_DASHBOARD_API_URL", defaults.api_url),
            storage_dir=Path(storage_dir).expanduser() if storage_dir else defaults.storage_dir,
            stale_seconds=float(
                os.getenv("CRYPTO_DASHBOARD_STALE_SECONDS", str(defaults.stale_seconds))
            ),
            token=os.getenv("CRYPTO_DASHBOARD_TOKEN") or None,
            user_id=os.getenv("CRYPTO_DASHBOARD_USER_ID") or None,
            host=os.getenv("CRYPTO_DASHBOARD_HOST", defaults.host),
            port=int(os.getenv("CRYPTO_DASHBOARD_PORT", str(defaults.port))),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )
