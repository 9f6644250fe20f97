"""FastAPI dependencies: resolve the signed-in user from the bearer token."""
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header, HTTPException

from crypto_dashboard.container import Container
from crypto_dashboard.services.repositories import SessionRepository
from crypto_dashboard.stores.core import Unauthorized


@inject
def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
    sessions: SessionRepository = Depends(Provide[Container.session_repository]),
) -> str:
    """Return the user id for the request's bearer token, or respond 401."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return sessions.resolve(token.strip())
    except Unauthorized as exc:
        raise HTTPException(status_code=401, detail="Unauthorized") from exc


# Type alias for route injection
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
