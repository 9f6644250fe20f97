"""Authentication session boundary.

The dashboard does not authenticate anyone itself; it only needs to know
whether a session exists right now and to hear about the moment one appears.
SessionState is that boundary: stores read it on every call, and the sync
coordinator subscribes to its "session acquired" edge.
"""
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    """An established session: who the user is and the bearer token to present."""

    user_id: str
    token: str


SessionListener = Callable[[AuthSession], None]


class SessionState:
    """Holds the current session and notifies listeners on absent -> present edges.

    An instance constructed with a session is already authenticated; that
    initial state is not a transition and fires nothing.
    """

    def __init__(self, initial: AuthSession | None = None) -> None:
        self._current = initial
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> AuthSession | None:
        return self._current

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener for session-acquired events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, session: AuthSession | None) -> bool:
        """Replace the current session.

        Returns:
            True if this call was a no-session -> session transition (listeners
            were notified), False otherwise.
        """
        previous, self._current = self._current, session
        if previous is not None or session is None:
            return False
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Session listener %r failed", listener)
        return True

    def clear(self) -> None:
        """Drop the current session (sign out or expiry)."""
        self.set(None)


SessionSource = Union[
    SessionState,
    Callable[[], AuthSession | None],
    Callable[[], Awaitable[AuthSession | None]],
]


async def resolve_session(source: SessionSource) -> AuthSession | None:
    """Resolve the current session from a SessionState or a sync/async callable."""
    if isinstance(source, SessionState):
        return source.current
    value = source()
    if inspect.isawaitable(value):
        value = await value
    return value
