"""Entity family descriptors.

An EntityFamily tells the generic stores how one collection (watchlist items,
alerts, ...) is shaped: which model it holds, where it is persisted locally and
remotely, what its dedup key is, and which fields exist only locally.
"""
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from crypto_dashboard.schemas import (Alert, AlertCreate, AlertUpdate,
                                      WatchlistItem, WatchlistItemCreate,
                                      WatchlistItemUpdate, normalize_coin_id)

EntityT = TypeVar("EntityT", bound=BaseModel)

STORAGE_KEY_PREFIX = "crypto-dashboard"


def _identity(value: str) -> str:
    return value


@dataclass(frozen=True)
class EntityFamily(Generic[EntityT]):
    """Static description of one entity family.

    Attributes:
        name: Family name, also the first element of its query-cache keys.
        model: Full record model (e.g. WatchlistItem).
        create_model: Payload accepted by add/create.
        update_model: Partial payload accepted by update.
        api_path: Collection path on the server API.
        remove_field: Field matched by remove(key) ("coin_id" or "id").
        created_field: Timestamp stamped on creation.
        dedup_field: Field that must be unique per owner, if any.
        updated_field: Timestamp stamped on update, if any.
        local_defaults: Extra fields set when a record is created locally.
        key_normalizer: Applied to remove/lookup keys before comparison.
    """

    name: str
    model: type[EntityT]
    create_model: type[BaseModel]
    update_model: type[BaseModel]
    api_path: str
    remove_field: str
    created_field: str
    dedup_field: str | None = None
    updated_field: str | None = None
    local_defaults: Mapping[str, Any] = field(default_factory=dict)
    key_normalizer: Callable[[str], str] = _identity

    @property
    def storage_key(self) -> str:
        """Fixed origin-local storage key for this family."""
        return f"{STORAGE_KEY_PREFIX}:{self.name}"

    @property
    def remove_param(self) -> str:
        """Query parameter name for DELETE (camelCase, as on the wire)."""
        return to_camel(self.remove_field)

    @property
    def local_only_fields(self) -> frozenset[str]:
        """Fields dropped before a local record is re-created remotely."""
        names = {"id", self.created_field, *self.local_defaults}
        if self.updated_field:
            names.add(self.updated_field)
        return frozenset(names)

    def parse_create(self, fields: BaseModel | Mapping[str, Any]) -> BaseModel:
        """Validate a create payload (model instance or mapping)."""
        if isinstance(fields, self.create_model):
            return fields
        if isinstance(fields, BaseModel):
            fields = fields.model_dump()
        return self.create_model.model_validate(fields)

    def parse_update(self, fields: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
        """Validate a partial update and return only the fields that were set."""
        if not isinstance(fields, self.update_model):
            fields = self.update_model.model_validate(fields)
        return fields.model_dump(exclude_unset=True)

    def migration_payload(self, record: EntityT) -> BaseModel:
        """Strip local-only fields from a record, leaving a create payload."""
        data = record.model_dump(exclude=set(self.local_only_fields))
        return self.create_model.model_validate(data)

    def key_of(self, record: EntityT) -> str:
        return getattr(record, self.remove_field)


WATCHLIST: EntityFamily[WatchlistItem] = EntityFamily(
    name="watchlist",
    model=WatchlistItem,
    create_model=WatchlistItemCreate,
    update_model=WatchlistItemUpdate,
    api_path="/api/watchlist",
    remove_field="coin_id",
    created_field="added_at",
    dedup_field="coin_id",
    key_normalizer=normalize_coin_id,
)

ALERTS: EntityFamily[Alert] = EntityFamily(
    name="alerts",
    model=Alert,
    create_model=AlertCreate,
    update_model=AlertUpdate,
    api_path="/api/alerts",
    remove_field="id",
    created_field="created_at",
    updated_field="updated_at",
    local_defaults={"is_active": True},
)

FAMILIES: tuple[EntityFamily, ...] = (WATCHLIST, ALERTS)
