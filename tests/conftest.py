"""Shared fixtures: settings overrides, an in-memory database, and an API client."""

import os

# Settings are read once at import time.
os.environ.setdefault("FB_JWT_SECRET", "test-jwt-secret-for-testing-only-0123456789")
os.environ.setdefault("FB_BCRYPT_ROUNDS", "4")

import aiosqlite  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from flowboard.config import settings  # noqa: E402
from flowboard.database import create_schema  # noqa: E402
from flowboard.graph.models import Node, NodeMetadata, NodeType  # noqa: E402

API = "/api/v1"


@pytest.fixture
async def db():
    conn = await aiosqlite.connect(":memory:")
    conn.row_factory = aiosqlite.Row
    await create_schema(conn)
    yield conn
    await conn.close()


@pytest.fixture
def client(tmp_path, monkeypatch):
    from flowboard.main import app

    monkeypatch.setattr(settings, "db_path", str(tmp_path / "flowboard-test.db"))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user and return ``(headers, owner_profile_id, body)``."""

    def _register(email: str = "alex@example.com", password: str = "correct-horse"):
        response = client.post(
            f"{API}/auth/register",
            json={"email": email, "password": password, "name": "Alex"},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        headers = {"Authorization": f"Bearer {body['access_token']}"}
        return headers, body["profiles"][0]["id"], body

    return _register


@pytest.fixture
def auth(register):
    headers, profile_id, _ = register()
    return headers, profile_id


@pytest.fixture
def make_node():
    def _make(node_id: str, node_type: NodeType, label: str | None = None, **kwargs) -> Node:
        metadata = kwargs.pop("metadata", None)
        return Node(
            id=node_id,
            type=node_type,
            label=label or node_id,
            metadata=NodeMetadata.parse(metadata),
            **kwargs,
        )

    return _make
