"""Database models for the dashboard's server-backed store.

Only per-user application state is persisted: watchlist entries and alerts,
plus the users and API sessions that own them.
"""
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from crypto_dashboard.stores.core.ids import new_remote_id
from crypto_dashboard.utils import utcnow


class User(SQLModel, table=True):
    """User account owning watchlist entries and alerts."""

    id: str = Field(default_factory=new_remote_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class ApiSession(SQLModel, table=True):
    """Bearer token issued to a signed-in user."""

    __tablename__ = "api_session"

    token: str = Field(primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    expires_at: datetime


class WatchlistEntry(SQLModel, table=True):
    """A coin on a user's watchlist; one row per (user, coin)."""

    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_id", "coin_id", name="watchlist_user_coin_uq"),)

    id: str = Field(default_factory=new_remote_id, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    coin_id: str = Field(index=True)  # lowercase CoinGecko id
    added_at: datetime = Field(default_factory=utcnow)


class AlertRecord(SQLModel, table=True):
    """A user's alert definition."""

    __tablename__ = "alerts"

    id: str = Field(default_factory=new_remote_id, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    alert_name: str
    coin_id: str = Field(index=True)
    coin_name: str
    coin_symbol: str
    alert_type: str  # price | percentage_change | volume | market_cap
    condition: str
    threshold_value: str
    frequency: str  # once | once_per_day | every_time
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None
