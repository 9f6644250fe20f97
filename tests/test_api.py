"""HTTP contract of the /api/watchlist and /api/alerts routes."""

from crypto_dashboard.services.repositories import WatchlistRepository


def _alert_body(**overrides):
    body = {
        "alertName": "ETH dip",
        "coinId": "ethereum",
        "coinName": "Ethereum",
        "coinSymbol": "ETH",
        "alertType": "price",
        "condition": "less_than",
        "thresholdValue": "2500",
        "frequency": "once_per_day",
    }
    body.update(overrides)
    return body


def test_health(api_client):
    assert api_client.get("/").json() == {"status": "ok"}


def test_requires_bearer_token(api_client):
    assert api_client.get("/api/watchlist").status_code == 401
    assert api_client.get("/api/alerts", headers={"Authorization": "Token abc"}).status_code == 401
    assert (
        api_client.get("/api/watchlist", headers={"Authorization": "Bearer unknown"}).status_code
        == 401
    )


def test_watchlist_add_list_remove(api_client, auth_headers):
    created = api_client.post("/api/watchlist", json={"coinId": "BitCoin"}, headers=auth_headers)
    assert created.status_code == 201
    body = created.json()
    assert body["coinId"] == "bitcoin"
    assert set(body) == {"id", "coinId", "addedAt"}

    listed = api_client.get("/api/watchlist", headers=auth_headers).json()
    assert [item["coinId"] for item in listed] == ["bitcoin"]

    removed = api_client.delete("/api/watchlist", params={"coinId": "BITCOIN"}, headers=auth_headers)
    assert removed.status_code == 200
    assert removed.json() == {"success": True}
    assert api_client.get("/api/watchlist", headers=auth_headers).json() == []


def test_watchlist_errors(api_client, auth_headers):
    assert api_client.post("/api/watchlist", json={}, headers=auth_headers).status_code == 400
    assert api_client.post("/api/watchlist", json={"coinId": " "}, headers=auth_headers).status_code == 400

    api_client.post("/api/watchlist", json={"coinId": "bitcoin"}, headers=auth_headers)
    duplicate = api_client.post("/api/watchlist", json={"coinId": "Bitcoin"}, headers=auth_headers)
    assert duplicate.status_code == 409

    assert api_client.delete("/api/watchlist", headers=auth_headers).status_code == 400
    missing = api_client.delete("/api/watchlist", params={"coinId": "dogecoin"}, headers=auth_headers)
    assert missing.status_code == 404


def test_watchlist_update(api_client, auth_headers):
    item = api_client.post("/api/watchlist", json={"coinId": "bitcoin"}, headers=auth_headers).json()
    api_client.post("/api/watchlist", json={"coinId": "ethereum"}, headers=auth_headers)

    changed = api_client.put(
        "/api/watchlist", json={"id": item["id"], "coinId": "Solana"}, headers=auth_headers
    )
    assert changed.status_code == 200
    assert changed.json()["coinId"] == "solana"

    clash = api_client.put(
        "/api/watchlist", json={"id": item["id"], "coinId": "ethereum"}, headers=auth_headers
    )
    assert clash.status_code == 409
    assert api_client.put("/api/watchlist", json={"coinId": "x"}, headers=auth_headers).status_code == 400


def test_watchlist_is_per_user(api_client, auth_headers, other_headers):
    api_client.post("/api/watchlist", json={"coinId": "bitcoin"}, headers=auth_headers)

    assert api_client.get("/api/watchlist", headers=other_headers).json() == []
    assert api_client.post("/api/watchlist", json={"coinId": "bitcoin"}, headers=other_headers).status_code == 201
    assert (
        api_client.delete("/api/watchlist", params={"coinId": "bitcoin"}, headers=other_headers).status_code
        == 200
    )
    assert len(api_client.get("/api/watchlist", headers=auth_headers).json()) == 1


def test_alert_create_update_delete(api_client, auth_headers):
    created = api_client.post("/api/alerts", json=_alert_body(), headers=auth_headers)
    assert created.status_code == 201
    alert = created.json()
    assert alert["isActive"] is True
    assert alert["frequency"] == "once_per_day"

    updated = api_client.put(
        "/api/alerts",
        json={"id": alert["id"], "isActive": False, "thresholdValue": "2400"},
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["isActive"] is False
    assert updated.json()["thresholdValue"] == "2400"
    assert updated.json()["alertName"] == "ETH dip"

    [listed] = api_client.get("/api/alerts", headers=auth_headers).json()
    assert listed["thresholdValue"] == "2400"

    deleted = api_client.delete("/api/alerts", params={"id": alert["id"]}, headers=auth_headers)
    assert deleted.json() == {"success": True}
    assert api_client.delete("/api/alerts", params={"id": alert["id"]}, headers=auth_headers).status_code == 404


def test_alert_validation(api_client, auth_headers):
    bad_threshold = api_client.post(
        "/api/alerts", json=_alert_body(thresholdValue="lots"), headers=auth_headers
    )
    assert bad_threshold.status_code == 400
    bad_condition = api_client.post(
        "/api/alerts", json=_alert_body(condition="sideways"), headers=auth_headers
    )
    assert bad_condition.status_code == 400
    assert api_client.put("/api/alerts", json={"isActive": False}, headers=auth_headers).status_code == 400
    assert api_client.delete("/api/alerts", headers=auth_headers).status_code == 400


def test_alerts_of_other_users_are_hidden(api_client, auth_headers, other_headers):
    alert = api_client.post("/api/alerts", json=_alert_body(), headers=auth_headers).json()

    assert api_client.get("/api/alerts", headers=other_headers).json() == []
    hijack = api_client.put(
        "/api/alerts", json={"id": alert["id"], "isActive": False}, headers=other_headers
    )
    assert hijack.status_code == 404
    assert api_client.delete("/api/alerts", params={"id": alert["id"]}, headers=other_headers).status_code == 404


def test_alert_updated_at_is_set_only_by_edits(api_client, auth_headers):
    alert = api_client.post("/api/alerts", json=_alert_body(), headers=auth_headers).json()
    assert alert["updatedAt"] is None

    updated = api_client.put(
        "/api/alerts", json={"id": alert["id"], "alertName": "ETH deep dip"}, headers=auth_headers
    ).json()
    assert updated["updatedAt"] is not None
    assert api_client.get("/api/alerts", headers=auth_headers).json()[0]["updatedAt"] is not None


def test_watchlist_update_racing_duplicate_is_conflict(api_client, auth_headers, monkeypatch):
    item = api_client.post("/api/watchlist", json={"coinId": "bitcoin"}, headers=auth_headers).json()
    api_client.post("/api/watchlist", json={"coinId": "ethereum"}, headers=auth_headers)
    # The pre-check misses the other entry, as when a concurrent request commits first.
    monkeypatch.setattr(
        WatchlistRepository, "_find", staticmethod(lambda session, user_id, coin_id: None)
    )

    clash = api_client.put(
        "/api/watchlist", json={"id": item["id"], "coinId": "ethereum"}, headers=auth_headers
    )
    assert clash.status_code == 409
