"""Server-side repositories: per-user CRUD over the watchlist, alerts and sessions tables.

Repositories raise the store error taxonomy (AlreadyExists, NotFound,
Unauthorized); the routers map those to HTTP via StoreErrorMapper.
"""
import logging
import secrets
from datetime import timedelta

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from crypto_dashboard.db.models import (AlertRecord, ApiSession, User,
                                        WatchlistEntry)
from crypto_dashboard.db.sessions import get_session
from crypto_dashboard.schemas import (Alert, AlertCreate, AlertUpdate,
                                      WatchlistItem, normalize_coin_id)
from crypto_dashboard.stores.core import AlreadyExists, NotFound, Unauthorized
from crypto_dashboard.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(days=7)


def _watchlist_item(row: WatchlistEntry) -> WatchlistItem:
    return WatchlistItem.model_validate(
        {"id": row.id, "coin_id": row.coin_id, "added_at": as_utc(row.added_at)}
    )


def _alert(row: AlertRecord) -> Alert:
    data = row.model_dump(exclude={"user_id"})
    data["created_at"] = as_utc(row.created_at)
    data["updated_at"] = as_utc(row.updated_at) if row.updated_at else None
    return Alert.model_validate(data)


class WatchlistRepository:
    """Watchlist entries scoped to one user per call."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list(self, user_id: str) -> list[WatchlistItem]:
        """All entries for user_id, oldest first."""
        with get_session(self._engine) as session:
            rows = session.exec(
                select(WatchlistEntry)
                .where(WatchlistEntry.user_id == user_id)
                .order_by(WatchlistEntry.added_at)
            ).all()
            return [_watchlist_item(row) for row in rows]

    def add(self, user_id: str, coin_id: str) -> WatchlistItem:
        """Add coin_id for user_id. Raises AlreadyExists for a duplicate coin."""
        coin_id = normalize_coin_id(coin_id)
        try:
            with get_session(self._engine) as session:
                if self._find(session, user_id, coin_id) is not None:
                    raise AlreadyExists("Coin already in watchlist")
                row = WatchlistEntry(user_id=user_id, coin_id=coin_id)
                session.add(row)
                session.flush()
                return _watchlist_item(row)
        except IntegrityError as exc:
            # Concurrent insert won the unique constraint.
            raise AlreadyExists("Coin already in watchlist") from exc

    def update(self, user_id: str, item_id: str, changes: dict) -> WatchlistItem:
        """Change an entry's coin. Raises NotFound or AlreadyExists."""
        try:
            with get_session(self._engine) as session:
                row = session.get(WatchlistEntry, item_id)
                if row is None or row.user_id != user_id:
                    raise NotFound(item_id)
                coin_id = changes.get("coin_id")
                if coin_id is not None and coin_id != row.coin_id:
                    if self._find(session, user_id, coin_id) is not None:
                        raise AlreadyExists("Coin already in watchlist")
                    row.coin_id = coin_id
                    session.add(row)
                return _watchlist_item(row)
        except IntegrityError as exc:
            # Concurrent change won the unique constraint.
            raise AlreadyExists("Coin already in watchlist") from exc

    def remove(self, user_id: str, coin_id: str) -> None:
        """Remove coin_id from user_id's watchlist. Raises NotFound when absent."""
        with get_session(self._engine) as session:
            row = self._find(session, user_id, normalize_coin_id(coin_id))
            if row is None:
                raise NotFound(coin_id)
            session.delete(row)

    @staticmethod
    def _find(session, user_id: str, coin_id: str) -> WatchlistEntry | None:
        return session.exec(
            select(WatchlistEntry).where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.coin_id == coin_id,
            )
        ).first()


class AlertRepository:
    """Alerts scoped to one user per call."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list(self, user_id: str) -> list[Alert]:
        """All alerts for user_id, oldest first."""
        with get_session(self._engine) as session:
            rows = session.exec(
                select(AlertRecord)
                .where(AlertRecord.user_id == user_id)
                .order_by(AlertRecord.created_at)
            ).all()
            return [_alert(row) for row in rows]

    def create(self, user_id: str, payload: AlertCreate) -> Alert:
        """Create an active alert from payload."""
        with get_session(self._engine) as session:
            row = AlertRecord(
                user_id=user_id,
                is_active=True,
                **payload.model_dump(mode="json"),
            )
            session.add(row)
            session.flush()
            return _alert(row)

    def update(self, user_id: str, alert_id: str, changes: AlertUpdate) -> Alert:
        """Merge the set fields of changes into the alert. Raises NotFound."""
        with get_session(self._engine) as session:
            row = session.get(AlertRecord, alert_id)
            if row is None or row.user_id != user_id:
                raise NotFound(alert_id)
            for name, value in changes.model_dump(mode="json", exclude_unset=True).items():
                if value is not None:
                    setattr(row, name, value)
            row.updated_at = utcnow()
            session.add(row)
            return _alert(row)

    def delete(self, user_id: str, alert_id: str) -> None:
        """Delete the alert. Raises NotFound when it is not the user's."""
        with get_session(self._engine) as session:
            row = session.get(AlertRecord, alert_id)
            if row is None or row.user_id != user_id:
                raise NotFound(alert_id)
            session.delete(row)


class SessionRepository:
    """Users and bearer tokens."""

    def __init__(self, engine: Engine, ttl: timedelta = DEFAULT_SESSION_TTL) -> None:
        self._engine = engine
        self._ttl = ttl

    def issue(self, email: str) -> ApiSession:
        """Issue a token for email, creating the user on first sign-in."""
        with get_session(self._engine) as session:
            user = session.exec(select(User).where(User.email == email)).first()
            if user is None:
                user = User(email=email)
                session.add(user)
                session.flush()
                logger.info("Created user %s", user.id)
            api_session = ApiSession(
                token=secrets.token_urlsafe(32),
                user_id=user.id,
                expires_at=utcnow() + self._ttl,
            )
            session.add(api_session)
            return api_session

    def resolve(self, token: str) -> str:
        """Return the user id for token. Raises Unauthorized if unknown or expired."""
        with get_session(self._engine) as session:
            api_session = session.get(ApiSession, token)
            if api_session is None:
                raise Unauthorized("Unknown session")
            if as_utc(api_session.expires_at) <= utcnow():
                raise Unauthorized("Session expired")
            return api_session.user_id

    def revoke(self, token: str) -> None:
        with get_session(self._engine) as session:
            api_session = session.get(ApiSession, token)
            if api_session is not None:
                session.delete(api_session)
