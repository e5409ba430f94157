"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path, so the app and the
direct service tests never see each other's rows.
"""

import pytest
from fastapi.testclient import TestClient

from shortlinks.config import Settings
from shortlinks.database import create_tables, make_engine, make_session_factory
from shortlinks.main import create_app
from shortlinks.models import User
from shortlinks.utils.geo import GeoData


class FakeGeo:
    """Records looked-up IPs and answers with a fixed location."""

    def __init__(self, geo=None):
        self.geo = geo or GeoData(country="Germany", city="Berlin", country_code="DE")
        self.calls = []

    def __call__(self, ip):
        self.calls.append(ip)
        return self.geo


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        SHORT_DOMAIN="sho.rt",
        RATE_LIMIT_ENABLED=False,
        GEO_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def fake_geo() -> FakeGeo:
    return FakeGeo()


@pytest.fixture
def make_client(settings):
    """Build a TestClient for an app wired with the given geolocate callable and setting overrides."""
    clients = []

    def _make(geolocate=None, **overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        app = create_app(app_settings, geolocate=geolocate or FakeGeo())
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, fake_geo) -> TestClient:
    return make_client(fake_geo)


@pytest.fixture
def db(client):
    """Session on the same database the client's app uses."""
    session = client.app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.DATABASE_URL)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    """Session for service-level tests that do not need the HTTP app."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def owner(db_session) -> User:
    user = User(email="owner@example.com", hashed_password="x", first_name="Owner")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def register(client, email="ada@example.com", password="correct-horse"):
    response = client.post("/api/auth/register", json={
        "firstName": "Ada",
        "email": email,
        "password": password,
        "confirmPassword": password,
    })
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client) -> dict:
    return register(client)


@pytest.fixture
def register_user(client):
    """Register another account on the client's app; returns its auth headers."""
    def _register(email, password="correct-horse"):
        return register(client, email=email, password=password)
    return _register
