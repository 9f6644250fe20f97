"""Effective Store: one interface per entity family over the Local and Remote stores.

Each operation resolves the session afresh. Without a session it acts on the
LocalStore; with one it acts on the RemoteStoreClient, and an unauthorized
response (a session that expired mid-call) degrades to the LocalStore instead
of surfacing an error.
"""
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from crypto_dashboard.schemas import Alert, WatchlistItem, normalize_coin_id
from crypto_dashboard.session import SessionSource, resolve_session
from crypto_dashboard.stores.core import (DUPLICATE, EntityStoreABC,
                                          RemoteOutcome)
from crypto_dashboard.stores.core.families import EntityT
from crypto_dashboard.stores.core.store_abc import _Duplicate
from crypto_dashboard.stores.local import LocalStore
from crypto_dashboard.stores.remote import RemoteResult, RemoteStoreClient

logger = logging.getLogger(__name__)

# Remote outcomes after which list() serves local data instead.
_LIST_FALLBACK = (RemoteOutcome.UNAUTHORIZED, RemoteOutcome.NETWORK_ERROR)


class EffectiveStore(EntityStoreABC[EntityT]):
    """Routes each operation to the store that currently owns the family's records."""

    def __init__(
        self,
        local: LocalStore[EntityT],
        remote: RemoteStoreClient[EntityT],
        session_source: SessionSource,
    ) -> None:
        """Initialize with both stores and the session capability.

        Args:
            local: Origin-local store for the family.
            remote: Server-backed client for the same family.
            session_source: SessionState or callable resolving the current session.
        """
        if local.family is not remote.family:
            raise ValueError(
                f"Local ({local.family.name}) and remote ({remote.family.name}) families differ"
            )
        super().__init__(local.family)
        self._local = local
        self._remote = remote
        self._session_source = session_source

    @property
    def local(self) -> LocalStore[EntityT]:
        return self._local

    @property
    def remote(self) -> RemoteStoreClient[EntityT]:
        return self._remote

    def _falls_back(self, result: RemoteResult, operation: str) -> bool:
        if result.unauthorized:
            logger.info(
                "Remote %s %s unauthorized; using local store", self._family.name, operation
            )
            return True
        return False

    async def list(self) -> list[EntityT]:
        session = await resolve_session(self._session_source)
        if session is None:
            return self._local.read()
        result = await self._remote.list(session)
        if result.outcome in _LIST_FALLBACK:
            logger.info(
                "Remote %s list %s; serving local data", self._family.name, result.outcome.value
            )
            return self._local.read()
        return result.value

    async def add(
        self, fields: BaseModel | Mapping[str, Any]
    ) -> EntityT | _Duplicate | None:
        session = await resolve_session(self._session_source)
        if session is None:
            return self._local.add(fields)
        result = await self._remote.create(session, fields)
        if result.outcome is RemoteOutcome.CONFLICT:
            return DUPLICATE
        if self._falls_back(result, "create"):
            return self._local.add(fields)
        return result.value

    async def remove(self, key: str) -> bool:
        session = await resolve_session(self._session_source)
        if session is None:
            return self._local.remove(key)
        result = await self._remote.remove(session, key)
        if self._falls_back(result, "remove"):
            return self._local.remove(key)
        return result.value

    async def update(self, record_id: str, fields: BaseModel | Mapping[str, Any]) -> bool:
        session = await resolve_session(self._session_source)
        if session is None:
            return self._local.update(record_id, fields)
        result = await self._remote.update(session, record_id, fields)
        if self._falls_back(result, "update"):
            return self._local.update(record_id, fields)
        return result.value

    async def get(self, record_id: str) -> EntityT | None:
        """Return the record with record_id from the effective store, if any."""
        return next((r for r in await self.list() if r.id == record_id), None)


class WatchlistStore(EffectiveStore[WatchlistItem]):
    """Effective store for watchlist items; coin ids compare lower-cased."""

    async def contains(self, coin_id: str) -> bool:
        """Whether coin_id (any case) is on the watchlist."""
        wanted = normalize_coin_id(coin_id)
        return any(item.coin_id == wanted for item in await self.list())

    async def coin_ids(self) -> list[str]:
        return [item.coin_id for item in await self.list()]


class AlertStore(EffectiveStore[Alert]):
    """Effective store for alerts."""

    async def toggle(self, alert_id: str) -> bool:
        """Flip is_active on the alert. False when it does not exist or the write failed."""
        alert = await self.get(alert_id)
        if alert is None:
            return False
        return await self.update(alert_id, {"is_active": not alert.is_active})

    async def for_coin(self, coin_id: str) -> list[Alert]:
        return [alert for alert in await self.list() if alert.coin_id == coin_id]
