import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.base import Base, get_db
from app.main import app


@pytest.fixture
def session_local():
    """Provide an isolated in-memory database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_local):
    session = session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_local):
    def override_get_db():
        session = session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    limiter.reset()


@pytest.fixture
def register(client):
    """Register a user and return (user json, auth headers)."""

    def _register(role="user", team=None, password="password123", **overrides):
        name = overrides.pop("username", f"user_{uuid.uuid4().hex[:8]}")
        body = {
            "username": name,
            "email": overrides.pop("email", f"{name}@example.com"),
            "password": password,
            "role": role,
        }
        if team is not None:
            body["team"] = team
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def create_task(client):
    def _create(headers, **body):
        body.setdefault("title", "Task")
        resp = client.post("/api/tasks", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create
