import httpx
import pytest

from crypto_dashboard.session import AuthSession
from crypto_dashboard.stores.core import (ALERTS, WATCHLIST, RemoteOutcome,
                                          is_local_id)
from crypto_dashboard.stores.remote import RemoteStoreClient

pytestmark = pytest.mark.asyncio


@pytest.fixture
def watchlist_remote(http_client):
    return RemoteStoreClient(WATCHLIST, http_client)


@pytest.fixture
def alerts_remote(http_client):
    return RemoteStoreClient(ALERTS, http_client)


def _client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")


async def test_list_without_session_is_unauthorized(watchlist_remote):
    result = await watchlist_remote.list(None)
    assert result.outcome is RemoteOutcome.UNAUTHORIZED
    assert result.value == []


async def test_unknown_token_is_unauthorized(watchlist_remote, expired_auth):
    result = await watchlist_remote.create(expired_auth, {"coin_id": "bitcoin"})
    assert result.unauthorized
    assert result.value is None


async def test_create_and_list(watchlist_remote, auth):
    created = await watchlist_remote.create(auth, {"coin_id": "BitCoin"})
    assert created.ok
    assert created.value.coin_id == "bitcoin"
    assert not is_local_id(created.value.id)

    listed = await watchlist_remote.list(auth)
    assert listed.ok
    assert listed.value == [created.value]


async def test_create_duplicate_is_conflict(watchlist_remote, auth):
    await watchlist_remote.create(auth, {"coin_id": "bitcoin"})
    result = await watchlist_remote.create(auth, {"coin_id": "bitcoin"})
    assert result.outcome is RemoteOutcome.CONFLICT
    assert result.value is None


async def test_remove_twice(watchlist_remote, auth):
    await watchlist_remote.create(auth, {"coin_id": "bitcoin"})

    first = await watchlist_remote.remove(auth, "Bitcoin")
    second = await watchlist_remote.remove(auth, "bitcoin")

    assert first.ok and first.value is True
    assert second.outcome is RemoteOutcome.NOT_FOUND
    assert second.value is False


async def test_records_are_scoped_per_user(watchlist_remote, auth, other_auth):
    await watchlist_remote.create(auth, {"coin_id": "bitcoin"})
    result = await watchlist_remote.list(other_auth)
    assert result.ok
    assert result.value == []


async def test_alert_update(alerts_remote, auth, alert_fields):
    created = (await alerts_remote.create(auth, alert_fields())).value
    assert created.is_active is True

    updated = await alerts_remote.update(auth, created.id, {"is_active": False, "threshold_value": "95000"})
    assert updated.ok and updated.value is True

    [alert] = (await alerts_remote.list(auth)).value
    assert alert.is_active is False
    assert alert.threshold_value == "95000"
    assert alert.alert_name == created.alert_name


async def test_alert_update_unknown_id(alerts_remote, auth):
    result = await alerts_remote.update(auth, "00000000-0000-0000-0000-000000000000", {"is_active": False})
    assert result.outcome is RemoteOutcome.NOT_FOUND
    assert result.value is False


async def test_sends_bearer_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async with _client_for(handler) as client:
        result = await RemoteStoreClient(WATCHLIST, client).list(AuthSession("u1", "secret"))

    assert result.ok
    assert seen[0].headers["Authorization"] == "Bearer secret"
    assert seen[0].url.path == "/api/watchlist"


async def test_remove_sends_key_as_query_param():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    async with _client_for(handler) as client:
        await RemoteStoreClient(WATCHLIST, client).remove(AuthSession("u1", "t"), "Ethereum")
        await RemoteStoreClient(ALERTS, client).remove(AuthSession("u1", "t"), "abc")

    assert seen[0].method == "DELETE"
    assert seen[0].url.params["coinId"] == "ethereum"
    assert seen[1].url.params["id"] == "abc"


async def test_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client_for(handler) as client:
        result = await RemoteStoreClient(WATCHLIST, client).list(AuthSession("u1", "t"))

    assert result.outcome is RemoteOutcome.NETWORK_ERROR
    assert result.value == []


async def test_server_failure_is_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    async with _client_for(handler) as client:
        result = await RemoteStoreClient(WATCHLIST, client).create(
            AuthSession("u1", "t"), {"coin_id": "bitcoin"}
        )

    assert result.outcome is RemoteOutcome.SERVER_ERROR
    assert result.value is None


async def test_unexpected_list_body_is_server_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": []})

    async with _client_for(handler) as client:
        result = await RemoteStoreClient(WATCHLIST, client).list(AuthSession("u1", "t"))

    assert result.outcome is RemoteOutcome.SERVER_ERROR
    assert result.value == []
