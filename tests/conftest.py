from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from werkzeug.security import generate_password_hash

from tutorstream.auth import SignedURLAuthorizer, TokenIssuer
from tutorstream.config import Settings
from tutorstream.identity import Identity, InMemoryIdentityProvider
from tutorstream.main import create_app
from tutorstream.storage import LocalStorage

from .helpers.fakes import EMAIL, JWT_SECRET, PASSWORD, URL_SECRET, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        jwt_secret=JWT_SECRET,
        jwt_expires_in="2h",
        secret_key=URL_SECRET,
        signed_url_expires_in=60,
        storage_path=tmp_path / "videos",
    )


@pytest.fixture
def identity():
    return Identity(
        id="u1",
        name="Ada",
        email=EMAIL,
        password=generate_password_hash(PASSWORD),
        role="admin",
        active=True,
        password_changed_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
        created_at=datetime(2019, 6, 1, tzinfo=timezone.utc),
        updated_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
        profile_image_id="img-profile",
        cover_image_id="img-cover",
    )


@pytest.fixture
def provider(identity):
    return InMemoryIdentityProvider([identity])


@pytest.fixture
def storage(settings):
    return LocalStorage(settings.storage_path)


@pytest.fixture
def issuer(settings, clock):
    return TokenIssuer.from_settings(settings, clock=clock)


@pytest.fixture
def authorizer(settings, clock):
    return SignedURLAuthorizer.from_settings(settings, clock=clock)


@pytest.fixture
def app(settings, provider, storage, issuer, authorizer):
    app = create_app(settings, identity_provider=provider, storage=storage)
    # Swap in components driven by the fake clock
    app.state.token_issuer = issuer
    app.state.url_authorizer = authorizer
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    def _login(email: str = EMAIL, password: str = PASSWORD):
        resp = client.post("/api/user/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp

    return _login
