"""Root conftest: environment defaults, in-memory store, API client."""

import os

# Settings are read once at import time; set safe defaults before that
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOCAL_TIMEZONE", "UTC")
os.environ.setdefault("REALTIME_REDIS_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from pastoral.db import build_engine, init_db
from pastoral.schemas import Identity
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return DocumentStore(engine)


@pytest.fixture
def notices():
    return NoticeBoard()


@pytest.fixture
def identity():
    return Identity(id="pastor-1", display_name="Pastor Jo", email="jo@example.org")


@pytest.fixture
def app(engine):
    from pastoral.main import create_application

    return create_application(engine)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    payload = {
        "email": "jo@example.org",
        "display_name": "Pastor Jo",
        "password": "correct-horse",
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    response = client.post(
        "/api/auth/login",
        json={"email": payload["email"], "password": payload["password"]},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
