from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlparse

import pytest
from fastapi.testclient import TestClient

VIDEO = b"\x00\x00\x00\x18ftypmp42" + b"frame" * 4000


@pytest.fixture
def video(settings):
    path = settings.storage_path / "video" / "123"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(VIDEO)
    return path


def _mint(client, resource="video/123"):
    return client.post("/url/signed", json={"resource": resource})


def test_mint_requires_session(client, video):
    resp = _mint(client)

    assert resp.status_code == 401
    assert resp.json()["status"] == "fail"


def test_mint_and_stream(app, client, login, video, clock):
    login()
    resp = _mint(client)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["resource"] == "video/123"
    assert data["expires_at"] == int(clock.now) + 60
    assert data["url"].startswith("http://testserver/authenticated/videoUrl?")

    # The URL is the capability: no session cookie needed to redeem it
    with TestClient(app) as anonymous:
        streamed = anonymous.get(data["url"])

    assert streamed.status_code == 200
    assert streamed.content == VIDEO
    assert streamed.headers["cache-control"] == "private, no-store"


def test_stream_supports_range_requests(client, login, video):
    login()
    url = _mint(client).json()["data"]["url"]

    resp = client.get(url, headers={"Range": "bytes=0-3"})
    assert resp.status_code == 206
    assert resp.content == VIDEO[:4]


def test_stream_media_type_from_extension(client, login, settings):
    path = settings.storage_path / "video" / "intro.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(VIDEO)

    login()
    url = _mint(client, "video/intro.mp4").json()["data"]["url"]

    resp = client.get(url)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("video/mp4")


def test_signed_url_expires_after_sixty_seconds(client, login, video, clock):
    login()
    url = _mint(client).json()["data"]["url"]

    assert client.get(url).status_code == 200

    clock.advance(61)
    resp = client.get(url)
    assert resp.status_code == 403
    assert resp.json() == {"status": "fail", "message": "Signed URL expired"}


def test_stream_at_exact_expiry_is_rejected(client, login, video, clock):
    login()
    url = _mint(client).json()["data"]["url"]

    clock.advance(60)
    assert client.get(url).status_code == 403


@pytest.mark.parametrize("name,value", [("res", "video/124"), ("exp", "1800000000"), ("uid", "u2")])
def test_tampered_url_is_rejected(client, login, video, name, value):
    login()
    url = _mint(client).json()["data"]["url"]

    parsed = urlparse(url)
    params = [(k, value if k == name else v) for k, v in parse_qsl(parsed.query)]
    resp = client.get(parsed._replace(query=urlencode(params)).geturl())

    assert resp.status_code == 401
    assert resp.json()["status"] == "fail"


def test_stream_without_signature(client):
    resp = client.get("/authenticated/videoUrl?res=video%2F123&uid=u1&exp=9999999999")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Missing signature"


def test_mint_missing_resource(client, login):
    login()
    resp = _mint(client, "video/nope")

    assert resp.status_code == 404
    assert resp.json() == {"status": "fail", "message": "Resource not found"}


@pytest.mark.parametrize("resource", ["../secret", "/etc/passwd", "video/../../x"])
def test_mint_rejects_bad_resource_refs(client, login, resource):
    login()
    resp = _mint(client, resource)
    assert resp.status_code == 400


def test_resource_removed_after_minting(client, login, video):
    login()
    url = _mint(client).json()["data"]["url"]
    video.unlink()

    assert client.get(url).status_code == 404
