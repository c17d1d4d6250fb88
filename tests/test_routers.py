from __future__ import annotations

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from tests.conftest import FakeProvider
from watchlist_sync.container import Container
from watchlist_sync.main import create_app

U1 = {"X-User-Id": "u1", "X-User-Email": "ann@example.com"}
U2 = {"X-User-Id": "u2"}

ALERT = {
    "symbol": "aapl",
    "company": "Apple Inc.",
    "alert_name": "Apple breakout",
    "alert_type": "upper",
    "threshold": "150",
}


@pytest.fixture
def client(engine, provider: FakeProvider):
    container = Container()
    container.engine.override(providers.Object(engine))
    container.market_data_provider.override(providers.Object(provider))
    with TestClient(create_app(container)) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    assert client.get("/").json() == {"status": "ok"}


def test_anonymous_watchlist_is_empty_and_writes_are_rejected(client: TestClient) -> None:
    assert client.get("/watchlist").json() == []
    assert client.get("/watchlist/status").json()["status"] == "unauthenticated"

    response = client.post("/watchlist", json={"symbol": "AAPL", "company": "Apple"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Not authenticated", "alert": None}


def test_add_list_and_remove(client: TestClient) -> None:
    added = client.post("/watchlist", json={"symbol": "aapl", "company": "Apple Inc."}, headers=U1)
    assert added.status_code == 200
    assert added.json()["message"] == "Added to watchlist"
    client.post("/watchlist", json={"symbol": "XYZ", "company": "Xyz Corp"}, headers=U1)

    rows = client.get("/watchlist", headers=U1).json()
    assert [row["symbol"] for row in rows] == ["XYZ", "AAPL"]
    assert rows[1]["price_formatted"] == "$123.40"
    assert rows[1]["change_formatted"] == "-2.35%"
    assert rows[0]["price_formatted"] is None

    membership = client.get("/watchlist/aapl/membership", headers=U1).json()
    assert membership == {"symbol": "AAPL", "in_watchlist": True}
    assert client.get("/watchlist/aapl/membership", headers=U2).json()["in_watchlist"] is False

    removed = client.delete("/watchlist/AAPL", headers=U1)
    assert removed.json() == {"success": True, "message": "Removed from watchlist", "alert": None}
    assert client.delete("/watchlist/AAPL", headers=U1).status_code == 404


def test_duplicate_add_is_409(client: TestClient) -> None:
    client.post("/watchlist", json={"symbol": "AAPL", "company": "Apple"}, headers=U1)
    response = client.post("/watchlist", json={"symbol": "AAPL", "company": "Apple"}, headers=U1)
    assert response.status_code == 409
    assert response.json()["message"] == "Already in watchlist"


def test_status_reports_empty(client: TestClient) -> None:
    assert client.get("/watchlist/status", headers=U1).json() == {"status": "empty", "items": []}


def test_alerts_status_tells_empty_from_anonymous(client: TestClient) -> None:
    assert client.get("/alerts/status").json() == {"status": "unauthenticated", "items": []}
    assert client.get("/alerts/status", headers=U1).json() == {"status": "empty", "items": []}
    client.post("/alerts", json=ALERT, headers=U1)
    body = client.get("/alerts/status", headers=U1).json()
    assert body["status"] == "ok"
    assert [a["symbol"] for a in body["items"]] == ["AAPL"]


def test_alert_crud(client: TestClient) -> None:
    created = client.post("/alerts", json=ALERT, headers=U1)
    assert created.status_code == 200
    alert = created.json()["alert"]
    assert alert["symbol"] == "AAPL"
    assert alert["current_price"] == 123.4
    assert "user_id" not in alert

    updated = client.put(f"/alerts/{alert['id']}", json=ALERT | {"threshold": 175}, headers=U1)
    assert updated.json()["alert"]["threshold"] == 175.0

    listed = client.get("/alerts", headers=U1).json()
    assert [a["id"] for a in listed] == [alert["id"]]
    assert client.get("/alerts", headers=U2).json() == []

    assert client.delete(f"/alerts/{alert['id']}", headers=U2).status_code == 404
    assert client.delete(f"/alerts/{alert['id']}", headers=U1).json()["message"] == "Alert deleted"
    assert client.delete(f"/alerts/{alert['id']}", headers=U1).status_code == 404


def test_alert_validation_and_conflict(client: TestClient) -> None:
    invalid = client.post("/alerts", json=ALERT | {"threshold": "abc"}, headers=U1)
    assert invalid.status_code == 422
    assert invalid.json()["message"] == "Please enter a valid price threshold."

    client.post("/alerts", json=ALERT, headers=U1)
    duplicate = client.post("/alerts", json=ALERT, headers=U1)
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "An alert with this configuration already exists."


def test_unknown_alert_id_is_404(client: TestClient) -> None:
    assert client.delete("/alerts/not-a-number", headers=U1).json()["message"] == "Alert not found"


def test_shutdown_closes_provider(engine, provider: FakeProvider) -> None:
    container = Container()
    container.engine.override(providers.Object(engine))
    container.market_data_provider.override(providers.Object(provider))
    with TestClient(create_app(container)):
        pass
    assert provider.closed
