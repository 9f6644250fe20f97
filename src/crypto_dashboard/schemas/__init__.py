"""Pydantic schemas for watchlist items and alerts.

The same shapes travel over the wire (HTTP API) and into origin-local storage,
always as camelCase JSON. Python code uses the snake_case attribute names.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from crypto_dashboard.utils import utcnow


def normalize_coin_id(coin_id: str) -> str:
    """Normalize a CoinGecko coin ID (trimmed, lowercase)."""
    return coin_id.strip().lower()


class AlertType(str, Enum):
    """What an alert measures."""

    PRICE = "price"
    PERCENTAGE_CHANGE = "percentage_change"
    VOLUME = "volume"
    MARKET_CAP = "market_cap"


class AlertCondition(str, Enum):
    """Comparison applied against the threshold."""

    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EQUAL_TO = "equal_to"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"


class AlertFrequency(str, Enum):
    """How often an alert may fire."""

    ONCE = "once"
    ONCE_PER_DAY = "once_per_day"
    EVERY_TIME = "every_time"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys; accepts either spelling on input."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class WatchlistItemCreate(CamelModel):
    """Fields a client supplies to add a coin to the watchlist."""

    coin_id: str = Field(min_length=1)

    @field_validator("coin_id")
    @classmethod
    def _lower_coin_id(cls, value: str) -> str:
        normalized = normalize_coin_id(value)
        if not normalized:
            raise ValueError("coinId is required")
        return normalized


class WatchlistItemUpdate(CamelModel):
    """Partial update for a watchlist item."""

    coin_id: str | None = None

    @field_validator("coin_id")
    @classmethod
    def _lower_coin_id(cls, value: str | None) -> str | None:
        return normalize_coin_id(value) if value is not None else None


class WatchlistItem(WatchlistItemCreate):
    """A coin the user follows."""

    id: str
    added_at: datetime = Field(default_factory=utcnow)


class AlertCreate(CamelModel):
    """Fields a client supplies to create an alert."""

    alert_name: str = Field(min_length=1)
    coin_id: str = Field(min_length=1)
    coin_name: str
    coin_symbol: str
    alert_type: AlertType
    condition: AlertCondition
    threshold_value: str
    frequency: AlertFrequency

    @field_validator("threshold_value")
    @classmethod
    def _numeric_threshold(cls, value: str) -> str:
        float(value)  # raises ValueError for non-numeric text
        return value


class AlertUpdate(CamelModel):
    """Partial update for an alert; only the fields that were set are applied."""

    alert_name: str | None = None
    coin_id: str | None = None
    coin_name: str | None = None
    coin_symbol: str | None = None
    alert_type: AlertType | None = None
    condition: AlertCondition | None = None
    threshold_value: str | None = None
    frequency: AlertFrequency | None = None
    is_active: bool | None = None

    @field_validator("threshold_value")
    @classmethod
    def _numeric_threshold(cls, value: str | None) -> str | None:
        if value is not None:
            float(value)
        return value


class Alert(AlertCreate):
    """A user-configured alert on a coin metric."""

    id: str
    created_at: datetime = Field(default_factory=utcnow)
    is_active: bool = True
    updated_at: datetime | None = None


__all__ = [
    "Alert",
    "AlertCondition",
    "AlertCreate",
    "AlertFrequency",
    "AlertType",
    "AlertUpdate",
    "CamelModel",
    "WatchlistItem",
    "WatchlistItemCreate",
    "WatchlistItemUpdate",
    "normalize_coin_id",
]
