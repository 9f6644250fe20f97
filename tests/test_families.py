import re

import pytest
from fastapi import HTTPException

from crypto_dashboard.schemas import Alert, WatchlistItem
from crypto_dashboard.stores.core import (ALERTS, WATCHLIST, AlreadyExists,
                                          NetworkError, NotFound,
                                          RecordOrigin, RemoteOutcome,
                                          StoreErrorMapper, Unauthorized,
                                          new_local_id, new_remote_id,
                                          origin_of)


def test_local_ids_are_tagged_and_unique():
    ids = {new_local_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(re.fullmatch(r"local_\d+_[0-9a-f]{8}", record_id) for record_id in ids)
    assert all(origin_of(record_id) is RecordOrigin.LOCAL for record_id in ids)


def test_server_ids_are_remote_origin():
    assert origin_of(new_remote_id()) is RecordOrigin.REMOTE


def test_storage_keys_and_wire_names():
    assert WATCHLIST.storage_key == "crypto-dashboard:watchlist"
    assert ALERTS.storage_key == "crypto-dashboard:alerts"
    assert WATCHLIST.remove_param == "coinId"
    assert ALERTS.remove_param == "id"


def test_watchlist_migration_payload_strips_local_fields():
    item = WatchlistItem(id=new_local_id(), coin_id="bitcoin")
    payload = WATCHLIST.migration_payload(item)
    assert payload.model_dump() == {"coin_id": "bitcoin"}


def test_alert_migration_payload_strips_local_fields(alert_fields):
    alert = Alert(id=new_local_id(), is_active=False, **alert_fields())
    payload = ALERTS.migration_payload(alert).model_dump(mode="json", by_alias=True)
    assert set(payload) == {
        "alertName", "coinId", "coinName", "coinSymbol",
        "alertType", "condition", "thresholdValue", "frequency",
    }


def test_parse_update_keeps_only_set_fields():
    assert ALERTS.parse_update({"isActive": False}) == {"is_active": False}
    assert WATCHLIST.parse_update({"coinId": "ETH"}) == {"coin_id": "eth"}


@pytest.mark.parametrize(
    "exc, outcome, status",
    [
        (Unauthorized(), RemoteOutcome.UNAUTHORIZED, 401),
        (AlreadyExists(), RemoteOutcome.CONFLICT, 409),
        (NotFound(), RemoteOutcome.NOT_FOUND, 404),
        (NetworkError("down"), RemoteOutcome.NETWORK_ERROR, 500),
        (RuntimeError("bug"), RemoteOutcome.SERVER_ERROR, 500),
    ],
)
def test_error_mapper(exc, outcome, status):
    mapper = StoreErrorMapper(resource_name="Alert")
    assert mapper.to_outcome(exc) is outcome
    assert mapper.to_http(exc)[0] == status


def test_error_mapper_raises_http():
    mapper = StoreErrorMapper(resource_name="Watchlist item")
    with pytest.raises(HTTPException) as info:
        mapper.raise_http(NotFound("bitcoin"), key="bitcoin")
    assert info.value.status_code == 404
    assert info.value.detail == "Watchlist item 'bitcoin' not found"
