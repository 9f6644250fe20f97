"""Abstract base class for the UI-facing entity store surface."""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic

from pydantic import BaseModel

from crypto_dashboard.stores.core.families import EntityFamily, EntityT


class _Duplicate:
    """Sentinel type returned by add() when the dedup key already exists."""

    _instance: "_Duplicate | None" = None

    def __new__(cls) -> "_Duplicate":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DUPLICATE"

    def __bool__(self) -> bool:
        return False


DUPLICATE = _Duplicate()


class EntityStoreABC(ABC, Generic[EntityT]):
    """Uniform async operations over one entity family.

    Every operation resolves to a value (list, record, DUPLICATE, None, bool);
    callers never need to know which backing store served the request.
    """

    def __init__(self, family: EntityFamily[EntityT]) -> None:
        self._family = family

    @property
    def family(self) -> EntityFamily[EntityT]:
        return self._family

    @abstractmethod
    async def list(self) -> list[EntityT]:
        """Return all records of the family for the current owner."""

    @abstractmethod
    async def add(
        self, fields: BaseModel | Mapping[str, Any]
    ) -> EntityT | _Duplicate | None:
        """Create a record.

        Returns:
            The created record, DUPLICATE when the dedup key is taken, or None
            when the write failed.
        """

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Remove the record matching key (dedup key or id). True if removed."""

    @abstractmethod
    async def update(self, record_id: str, fields: BaseModel | Mapping[str, Any]) -> bool:
        """Merge fields into the record with record_id. True if it matched."""
