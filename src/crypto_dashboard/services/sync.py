"""Sync Coordinator: drains local records into the remote store on login.

Runs once per observed no-session -> session transition. Each family migrates
independently and concurrently: every local-origin record is re-created
remotely (no retries), the family's local storage is then cleared whatever the
per-record outcomes were, and only after that are the family's cached queries
invalidated.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from crypto_dashboard.session import AuthSession, SessionState
from crypto_dashboard.services.query_cache import QueryCache
from crypto_dashboard.stores.core import (RemoteOutcome, StoreErrorMapper,
                                          is_local_id)
from crypto_dashboard.stores.local import LocalStore
from crypto_dashboard.stores.remote import RemoteStoreClient

logger = logging.getLogger(__name__)

_ERRORS = StoreErrorMapper(resource_name="Record")


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


@dataclass
class SyncReport:
    """What one family's migration sweep did."""

    family: str
    attempted: int = 0
    migrated: int = 0
    skipped: int = 0
    dropped: dict[str, RemoteOutcome] = field(default_factory=dict)
    ignored: bool = False

    @property
    def failed(self) -> int:
        return len(self.dropped)


@dataclass(frozen=True)
class FamilySync:
    """The local/remote store pair migrated for one family."""

    local: LocalStore
    remote: RemoteStoreClient

    @property
    def name(self) -> str:
        return self.local.family.name


class SyncCoordinator:
    """Edge-triggered, best-effort migration of LocalStore contents to the remote store."""

    def __init__(
        self,
        families: list[FamilySync],
        cache: QueryCache | None = None,
    ) -> None:
        """Initialize with the families to migrate.

        Args:
            families: One FamilySync per entity family.
            cache: Query cache whose family entries are invalidated after each sweep.
        """
        self._families = families
        self._cache = cache
        self._states: dict[str, SyncState] = {f.name: SyncState.IDLE for f in families}
        self._task: asyncio.Task | None = None
        self._pending: AuthSession | None = None
        self._unsubscribe = None

    def state(self, family: str) -> SyncState:
        return self._states[family]

    @property
    def syncing(self) -> bool:
        """True while a sweep is pending, scheduled or migrating any family."""
        if self._pending is not None:
            return True
        if self._task is not None and not self._task.done():
            return True
        return any(s is SyncState.SYNCING for s in self._states.values())

    def attach(self, sessions: SessionState) -> None:
        """Subscribe to session-acquired events from sessions."""
        self.detach()
        self._unsubscribe = sessions.subscribe(self.on_session_acquired)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_session_acquired(self, session: AuthSession) -> None:
        """Session listener: schedule a sync unless one is already in flight.

        Outside a running event loop the transition is kept and the sync starts
        on the next wait().
        """
        if self.syncing:
            logger.info("Sync already in progress; ignoring session transition")
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.info(
                "Session acquired for user %s outside the event loop; sync deferred",
                session.user_id,
            )
            self._pending = session
            return
        logger.info("Session acquired for user %s; syncing local data", session.user_id)
        self._task = loop.create_task(self.run(session))

    async def wait(self) -> list[SyncReport]:
        """Start any deferred sync, then wait for the latest sync and return its reports."""
        if self._pending is not None:
            session, self._pending = self._pending, None
            self._task = asyncio.get_running_loop().create_task(self.run(session))
        if self._task is None:
            return []
        return await self._task

    async def run(self, session: AuthSession) -> list[SyncReport]:
        """Migrate every family concurrently. Never raises for migration failures."""
        results = await asyncio.gather(
            *(self._sync_family(family, session) for family in self._families),
            return_exceptions=True,
        )
        reports: list[SyncReport] = []
        for family, result in zip(self._families, results):
            if isinstance(result, Exception):
                logger.error("Sync of %s failed: %s", family.name, result, exc_info=result)
                reports.append(SyncReport(family=family.name, ignored=True))
                continue
            reports.append(result)
        return reports

    async def _sync_family(self, family: FamilySync, session: AuthSession) -> SyncReport:
        report = SyncReport(family=family.name)
        if self._states[family.name] is SyncState.SYNCING:
            logger.info("Sync of %s already running; trigger ignored", family.name)
            report.ignored = True
            return report

        self._states[family.name] = SyncState.SYNCING
        try:
            await self._migrate(family, session, report)
        finally:
            self._states[family.name] = SyncState.IDLE
        if self._cache is not None:
            self._cache.invalidate(family.name)

        if report.failed:
            logger.warning(
                "Synced %s: %d/%d migrated, %d dropped",
                family.name, report.migrated, report.attempted, report.failed,
            )
        else:
            logger.info("Synced %s: %d/%d migrated", family.name, report.migrated, report.attempted)
        return report

    async def _migrate(self, family: FamilySync, session: AuthSession, report: SyncReport) -> None:
        records = family.local.read()
        entity = family.local.family
        for record in records:
            if not is_local_id(record.id):
                # Server-origin copy; already lives remotely.
                report.skipped += 1
                continue
            report.attempted += 1
            try:
                result = await family.remote.create(session, entity.migration_payload(record))
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Migrating %s %s failed: %s", family.name, record.id, exc)
                report.dropped[record.id] = _ERRORS.to_outcome(exc)
                continue
            if result.ok:
                report.migrated += 1
            else:
                report.dropped[record.id] = result.outcome
        # Reached only once every record was attempted.
        family.local.clear()
