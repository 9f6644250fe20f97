"""Alert routes: create, list, edit and delete the signed-in user's alerts."""
import logging
from typing import Any

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError

from crypto_dashboard.container import Container
from crypto_dashboard.deps import CurrentUserId
from crypto_dashboard.schemas import Alert, AlertCreate, AlertUpdate
from crypto_dashboard.services.repositories import AlertRepository
from crypto_dashboard.stores.core import StoreError, StoreErrorMapper

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/alerts", tags=["alerts"])

_errors = StoreErrorMapper(resource_name="Alert")


@router.get("", response_model=list[Alert])
@inject
def list_alerts(
    user_id: CurrentUserId,
    repo: AlertRepository = Depends(Provide[Container.alert_repository]),
) -> list[Alert]:
    """Return the user's alerts ordered by creation time."""
    return repo.list(user_id)


@router.post("", response_model=Alert, status_code=201)
@inject
def create_alert(
    user_id: CurrentUserId,
    body: dict[str, Any] = Body(...),
    repo: AlertRepository = Depends(Provide[Container.alert_repository]),
) -> Alert:
    """Create an alert. New alerts are always active."""
    try:
        payload = AlertCreate.model_validate(body)
    except ValidationError as exc:
        _errors.raise_http(exc)
    alert = repo.create(user_id, payload)
    logger.info("User %s created alert %s on %s", user_id, alert.id, alert.coin_id)
    return alert


@router.put("", response_model=Alert)
@inject
def update_alert(
    user_id: CurrentUserId,
    body: dict[str, Any] = Body(...),
    repo: AlertRepository = Depends(Provide[Container.alert_repository]),
) -> Alert:
    """Merge fields into an alert. Body: {"id": ..., <fields>}."""
    alert_id = body.get("id")
    if not alert_id:
        _errors.raise_http(ValueError("Alert ID is required"))
    try:
        changes = AlertUpdate.model_validate({k: v for k, v in body.items() if k != "id"})
        return repo.update(user_id, alert_id, changes)
    except (ValidationError, StoreError) as exc:
        _errors.raise_http(exc, key=alert_id)


@router.delete("")
@inject
def delete_alert(
    user_id: CurrentUserId,
    alert_id: str | None = Query(default=None, alias="id"),
    repo: AlertRepository = Depends(Provide[Container.alert_repository]),
) -> dict[str, bool]:
    """Delete an alert by id. 404 when the user has no such alert."""
    if not alert_id:
        _errors.raise_http(ValueError("Alert ID is required"))
    try:
        repo.delete(user_id, alert_id)
    except StoreError as exc:
        _errors.raise_http(exc, key=alert_id)
    return {"success": True}
