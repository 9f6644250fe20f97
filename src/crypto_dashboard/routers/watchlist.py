"""Watchlist routes: the signed-in user's followed coins."""
import logging
from typing import Any

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError

from crypto_dashboard.container import Container
from crypto_dashboard.deps import CurrentUserId
from crypto_dashboard.schemas import (WatchlistItem, WatchlistItemCreate,
                                      WatchlistItemUpdate)
from crypto_dashboard.services.repositories import WatchlistRepository
from crypto_dashboard.stores.core import StoreError, StoreErrorMapper

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])

_errors = StoreErrorMapper(resource_name="Watchlist item")


@router.get("", response_model=list[WatchlistItem])
@inject
def list_watchlist(
    user_id: CurrentUserId,
    repo: WatchlistRepository = Depends(Provide[Container.watchlist_repository]),
) -> list[WatchlistItem]:
    """Return the user's watchlist ordered by when each coin was added."""
    return repo.list(user_id)


@router.post("", response_model=WatchlistItem, status_code=201)
@inject
def add_to_watchlist(
    user_id: CurrentUserId,
    body: dict[str, Any] = Body(...),
    repo: WatchlistRepository = Depends(Provide[Container.watchlist_repository]),
) -> WatchlistItem:
    """Add a coin (lower-cased). 400 without coinId, 409 if already present."""
    try:
        payload = WatchlistItemCreate.model_validate(body)
        return repo.add(user_id, payload.coin_id)
    except (ValidationError, StoreError) as exc:
        _errors.raise_http(exc, key=body.get("coinId"))


@router.put("", response_model=WatchlistItem)
@inject
def update_watchlist_item(
    user_id: CurrentUserId,
    body: dict[str, Any] = Body(...),
    repo: WatchlistRepository = Depends(Provide[Container.watchlist_repository]),
) -> WatchlistItem:
    """Change the coin of an existing entry. Body: {"id": ..., "coinId": ...}."""
    item_id = body.get("id")
    if not item_id:
        _errors.raise_http(ValueError("Watchlist item ID is required"))
    try:
        changes = WatchlistItemUpdate.model_validate(
            {k: v for k, v in body.items() if k != "id"}
        ).model_dump(exclude_unset=True)
        return repo.update(user_id, item_id, changes)
    except (ValidationError, StoreError) as exc:
        _errors.raise_http(exc, key=item_id)


@router.delete("")
@inject
def remove_from_watchlist(
    user_id: CurrentUserId,
    coin_id: str | None = Query(default=None, alias="coinId"),
    repo: WatchlistRepository = Depends(Provide[Container.watchlist_repository]),
) -> dict[str, bool]:
    """Remove a coin by coinId. 404 when it is not on the watchlist."""
    if not coin_id:
        _errors.raise_http(ValueError("coinId is required"))
    try:
        repo.remove(user_id, coin_id)
    except StoreError as exc:
        _errors.raise_http(exc, key=coin_id)
    return {"success": True}
