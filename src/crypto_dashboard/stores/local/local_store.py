"""Local Store: one JSON array per entity family in origin-local storage.

All operations are synchronous and never raise for storage problems: a missing
key, inaccessible storage or unparseable JSON reads as an empty list, and a
failed write is logged and leaves the previous value untouched.
"""
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, Generic

from pydantic import BaseModel, ValidationError

from crypto_dashboard.stores.core import (DUPLICATE, EntityFamily,
                                          SerializationError, new_local_id)
from crypto_dashboard.stores.core.families import EntityT
from crypto_dashboard.stores.core.store_abc import _Duplicate
from crypto_dashboard.stores.local.storage import KeyValueStorage
from crypto_dashboard.utils import utcnow

logger = logging.getLogger(__name__)


class LocalStore(Generic[EntityT]):
    """Key-scoped persistence of one entity family.

    Args:
        family: Which entity family (and therefore which storage key) to manage.
        storage: Backend, or None when storage is unavailable in this context.
        id_factory: Generates ids for new records (local-origin ids by default).
        clock: Returns the timestamp stamped on created/updated records.
    """

    def __init__(
        self,
        family: EntityFamily[EntityT],
        storage: KeyValueStorage | None,
        *,
        id_factory: Callable[[], str] = new_local_id,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._family = family
        self._storage = storage
        self._new_id = id_factory
        self._now = clock

    @property
    def family(self) -> EntityFamily[EntityT]:
        return self._family

    @property
    def key(self) -> str:
        return self._family.storage_key

    def read(self) -> list[EntityT]:
        """Return every stored record, or [] when nothing valid is stored."""
        if self._storage is None:
            return []
        try:
            raw = self._storage.get_item(self.key)
        except (OSError, ValueError) as exc:
            # ValueError covers undecodable bytes in file-backed storage.
            logger.warning("Local storage unreadable for %s: %s", self.key, exc)
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.warning("Discarding unparseable local %s data: %s", self._family.name, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Discarding local %s data: expected a JSON array", self._family.name)
            return []

        items: list[EntityT] = []
        for entry in data:
            try:
                items.append(self._family.model.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping invalid local %s record: %s", self._family.name, exc)
        return items

    def write(self, items: Sequence[EntityT | Mapping[str, Any]]) -> bool:
        """Serialize and persist items, replacing the stored array.

        Returns:
            True when the write completed; False (logged) when serialization or
            storage failed, in which case the previous value is still stored.
        """
        if self._storage is None:
            logger.warning("Local storage unavailable; dropping write to %s", self.key)
            return False
        try:
            payload = self._serialize(items)
            self._storage.set_item(self.key, payload)
        except SerializationError as exc:
            logger.warning("Could not serialize local %s data: %s", self._family.name, exc)
            return False
        except OSError as exc:
            logger.warning("Could not persist local %s data: %s", self._family.name, exc)
            return False
        return True

    def _serialize(self, items: Sequence[EntityT | Mapping[str, Any]]) -> str:
        try:
            records = [
                item if isinstance(item, BaseModel) else self._family.model.model_validate(item)
                for item in items
            ]
            return json.dumps(
                [r.model_dump(mode="json", by_alias=True) for r in records]
            )
        except (ValidationError, TypeError, ValueError) as exc:
            raise SerializationError(str(exc)) from exc

    def get(self, record_id: str) -> EntityT | None:
        """Return the record with record_id, if present."""
        return next((r for r in self.read() if r.id == record_id), None)

    def add(self, fields: BaseModel | Mapping[str, Any]) -> EntityT | _Duplicate | None:
        """Append a new record built from fields.

        Returns:
            The created record; DUPLICATE when a record with the same dedup key
            exists; None when the write failed.
        """
        payload = self._family.parse_create(fields)
        items = self.read()
        dedup = self._family.dedup_field
        if dedup is not None:
            value = getattr(payload, dedup)
            if any(getattr(item, dedup) == value for item in items):
                return DUPLICATE

        record = self._family.model.model_validate(
            {
                **payload.model_dump(),
                **self._family.local_defaults,
                "id": self._new_id(),
                self._family.created_field: self._now(),
            }
        )
        items.append(record)
        if not self.write(items):
            return None
        return record

    def remove(self, key: str) -> bool:
        """Remove the first record whose remove field (coin id or id) matches key."""
        key = self._family.key_normalizer(key)
        items = self.read()
        for index, item in enumerate(items):
            if self._family.key_of(item) == key:
                del items[index]
                return self.write(items)
        return False

    def update(self, record_id: str, fields: BaseModel | Mapping[str, Any]) -> bool:
        """Merge fields into the record with record_id.

        Returns False when no record matches, when the change would collide with
        another record's dedup key, or when the write failed.
        """
        changes = self._family.parse_update(fields)
        items = self.read()
        index = next((i for i, item in enumerate(items) if item.id == record_id), None)
        if index is None:
            return False

        dedup = self._family.dedup_field
        if dedup is not None and changes.get(dedup) is not None:
            if any(
                getattr(other, dedup) == changes[dedup]
                for i, other in enumerate(items)
                if i != index
            ):
                logger.info(
                    "Local %s update rejected: %s '%s' already present",
                    self._family.name, dedup, changes[dedup],
                )
                return False

        merged = items[index].model_dump()
        merged.update({k: v for k, v in changes.items() if v is not None})
        if self._family.updated_field:
            merged[self._family.updated_field] = self._now()
        items[index] = self._family.model.model_validate(merged)
        return self.write(items)

    def clear(self) -> None:
        """Delete the family's storage key entirely."""
        if self._storage is None:
            return
        try:
            self._storage.remove_item(self.key)
        except OSError as exc:
            logger.warning("Could not clear local %s data: %s", self._family.name, exc)
