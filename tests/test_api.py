import pytest
from fastapi.testclient import TestClient

from uniview.config import Settings
from uniview.main import create_app
from uniview.store import ParkingStore


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert body["data"]["storeAvailable"] is True
    assert body["meta"]["requestId"] == r.headers["X-Request-ID"]


@pytest.mark.parametrize("prefix", ["", "/api/v1"])
def test_list_lots(client, prefix):
    r = client.get(f"{prefix}/lots")
    assert r.status_code == 200
    lots = {lot["lotId"]: lot for lot in r.json()["data"]}

    assert lots["LOT_A"]["totalSpaces"] == 5
    assert lots["LOT_A"]["occupancyRate"] == 40.0
    assert lots["LOT_A"]["availableSpaces"] == 1
    assert lots["LOT_EMPTY"]["totalSpaces"] == 40
    assert "lastUpdate" in lots["LOT_A"]


def test_nearby_lots(client):
    r = client.get("/lots", params={"lat": 40.5230, "lon": -74.4580, "radius_m": 1000})
    assert r.status_code == 200
    data = r.json()["data"]
    assert [lot["lotId"] for lot in data] == ["LOT_A"]
    assert data[0]["distanceM"] < 1000


def test_nearby_needs_both_coordinates(client):
    r = client.get("/lots", params={"lat": 40.5})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_get_lot(client):
    r = client.get("/lots/LOT_A")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Lot A"
    assert data["occupiedSpaces"] == 2
    assert data["offlineSpaces"] == 1


def test_get_lot_not_found(client):
    r = client.get("/lots/NOPE")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "LOT_NOT_FOUND"
    assert body["error"]["message"] == "Parking lot with ID 'NOPE' does not exist"


def test_spaces_with_filters(client):
    r = client.get("/lots/LOT_A/spaces", params={"status": "occupied", "zone": "B"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["lotId"] == "LOT_A"
    assert [s["nodeId"] for s in data["spaces"]] == ["N3"]
    assert data["totalCount"] == 1
    assert data["occupiedCount"] == 1
    assert data["availableCount"] == 0


def test_spaces_unknown_lot(client):
    assert client.get("/lots/NOPE/spaces").status_code == 404


def test_prediction_default_horizon(client):
    r = client.get("/lots/LOT_A/prediction")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["lotId"] == "LOT_A"
    assert data["currentOccupancy"] == 40.0
    assert len(data["predictions"]) == 3
    assert data["predictions"][0]["trend"] == "STABLE"
    assert data["factors"]["weather"] == "Clear"
    assert data["factors"]["specialEvents"] == []
    assert isinstance(data["recommendation"], str)


@pytest.mark.parametrize("hours", [1, 12])
def test_prediction_horizon_bounds(client, hours):
    r = client.get("/api/v1/lots/LOT_A/prediction", params={"hours": hours})
    assert r.status_code == 200
    assert len(r.json()["data"]["predictions"]) == hours


@pytest.mark.parametrize("hours", ["0", "13", "-2", "abc"])
def test_prediction_rejects_bad_horizon(client, hours):
    r = client.get("/lots/LOT_A/prediction", params={"hours": hours})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_prediction_unknown_lot(client):
    r = client.get("/lots/NOPE/prediction", params={"hours": 2})
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "LOT_NOT_FOUND"


def test_unknown_route(client):
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"
    assert r.json()["error"]["message"] == "Route GET /nowhere not found"


def test_fallback_when_data_missing():
    settings = Settings(environment="test", data_path="/nonexistent/uniview.json")
    with TestClient(create_app(settings=settings, store=ParkingStore())) as client:
        r = client.get("/lots")
        assert r.status_code == 200
        assert [lot["lotId"] for lot in r.json()["data"]] == ["lot-1", "lot-2", "lot-3"]
        assert client.get("/health").json()["data"]["fallback"] is True
        assert client.get("/lots/lot-3/prediction").status_code == 200


def test_startup_loads_data_file(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(
        '{"lots": [{"lotId": "L1", "name": "Garage", "totalSpaces": 3}],'
        ' "spaces": [{"nodeId": "S1", "lotId": "L1", "status": "occupied", "lastUpdate": "2026-03-02T08:00:00Z"}]}',
        encoding="utf-8",
    )
    settings = Settings(environment="test", data_path=str(path))
    with TestClient(create_app(settings=settings, store=ParkingStore())) as client:
        data = client.get("/lots/L1").json()["data"]
        assert data["totalSpaces"] == 1
        assert data["occupancyRate"] == 100.0


def _register(client, email="ada@example.edu", password="correct horse", **extra):
    return client.post("/auth/register", json={"email": email, "password": password, **extra})


def test_register_login_me_flow(client):
    r = _register(client, firstName="Ada", lastName="Lovelace")
    assert r.status_code == 201
    session = r.json()["data"]
    assert session["role"] == "user"
    assert session["expiresIn"] == 3600

    r = client.post("/auth/login", json={"email": "ada@example.edu", "password": "correct horse"})
    assert r.status_code == 200
    token = r.json()["data"]["accessToken"]

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    me = r.json()["data"]
    assert me["name"] == "Ada Lovelace"
    assert me["userId"] == session["userId"]
    assert "passwordHash" not in me


def test_register_validation(client):
    assert _register(client, email="").status_code == 400
    bad_email = _register(client, email="not-an-email")
    assert bad_email.status_code == 400
    assert bad_email.json()["error"]["details"] == {"field": "email"}
    short = _register(client, password="short")
    assert short.json()["error"]["details"] == {"field": "password"}


def test_register_name_falls_back_to_email(client):
    token = _register(client, email="grace@example.edu").json()["data"]["accessToken"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    assert me["name"] == "grace"


def test_register_duplicate(client):
    _register(client)
    r = _register(client)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "EMAIL_EXISTS"


def test_login_bad_password(client):
    _register(client)
    r = client.post("/auth/login", json={"email": "ada@example.edu", "password": "wrong password"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_missing_fields(client):
    r = client.post("/auth/login", json={"email": "ada@example.edu"})
    assert r.status_code == 400


def test_refresh(client):
    refresh_token = _register(client).json()["data"]["refreshToken"]

    r = client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert r.status_code == 200
    assert r.json()["data"]["expiresIn"] == 3600

    r = client.post("/auth/refresh", json={"refreshToken": "nope"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_TOKEN"

    assert client.post("/auth/refresh", json={}).status_code == 400


def test_me_requires_bearer(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_logout(client):
    r = client.post("/auth/logout")
    assert r.status_code == 200
    assert r.json()["data"]["message"] == "Successfully logged out"


def test_websocket_subscribe(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json()["type"] == "pong"

        ws.send_json({"type": "subscribe", "lotId": "LOT_A"})
        msg = ws.receive_json()
        assert msg["type"] == "lot_update"
        assert msg["data"]["occupancyRate"] == 40.0

        ws.send_json({"type": "subscribe", "lotId": "NOPE"})
        assert ws.receive_json()["code"] == "LOT_NOT_FOUND"

        ws.send_json({"type": "unsubscribe", "lotId": "LOT_A"})
        assert ws.receive_json()["type"] == "unsubscribed"

        ws.send_text("not json")
        assert ws.receive_json()["code"] == "BAD_MESSAGE"


def test_websocket_subscribe_in_fallback_mode():
    app = create_app(settings=Settings(environment="test", data_path="/nonexistent/uniview.json"), store=ParkingStore())
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "subscribe", "lotId": "lot-1"})
            msg = ws.receive_json()

    assert msg["type"] == "lot_update"
    assert msg["data"]["lotId"] == "lot-1"
    assert app.state.lot_service.use_fallback is True
