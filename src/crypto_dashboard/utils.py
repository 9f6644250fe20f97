"""Shared utilities for the crypto dashboard."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    """Attach UTC to naive datetimes (e.g. read back from SQLite); pass aware ones through."""
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def epoch_ms(ts: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for ts (default: now)."""
    return int((ts or utcnow()).timestamp() * 1000)
