from __future__ import annotations

from fastapi.testclient import TestClient

from .helpers.fakes import EMAIL


def test_unknown_route(client):
    resp = client.get("/no/such/route")

    assert resp.status_code == 404
    assert resp.json() == {
        "status": "fail",
        "message": "Can't find this page or route /no/such/route",
    }


def test_wrong_method(client):
    resp = client.post("/token")

    assert resp.status_code == 405
    assert resp.json() == {"status": "fail", "message": "Method Not Allowed"}
    assert "GET" in resp.headers["allow"]


def test_invalid_login_body(client):
    resp = client.post("/api/user/login", json={"email": EMAIL})

    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == "fail"
    assert body["message"].startswith("Invalid request")
    assert "password" in body["message"]
    assert "detail" not in body


def test_unexpected_error_is_hidden(app):
    @app.get("/explode")
    async def explode():
        raise RuntimeError("database password is hunter2")

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/explode")

    assert resp.status_code == 500
    assert resp.json() == {"status": "error", "message": "Internal Server Error"}
    assert "hunter2" not in resp.text


def test_issue_with_numeric_id_returns_session(app):
    @app.get("/issue-numeric")
    async def issue_numeric():
        return app.state.token_issuer.issue({"id": 1})

    with TestClient(app) as c:
        resp = c.get("/issue-numeric")

    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["id"] == "1"
