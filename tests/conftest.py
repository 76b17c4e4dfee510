"""Shared test fixtures."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from db.mongo import get_db
from main import app


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-process MongoDB stand-in for each test."""
    mongo_client = AsyncMongoMockClient(tz_aware=True)
    yield mongo_client["calendar_app_test"]


@pytest.fixture(name="client")
def client_fixture(db):
    """Create a test client talking to the test database."""

    def get_db_override():
        return db

    app.dependency_overrides[get_db] = get_db_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="run")
def run_fixture():
    """Run a coroutine against the test database outside of a request."""
    return asyncio.run


@pytest.fixture(name="sample_event")
def sample_event_fixture(client: TestClient) -> dict:
    """Create a sample event for testing."""
    response = client.post(
        "/api/events",
        json={
            "title": "Team Sync",
            "description": "Weekly planning",
            "location": "Room 4B",
            "startTime": "2025-03-10T09:00:00Z",
            "endTime": "2025-03-10T10:00:00Z",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture(name="sample_list")
def sample_list_fixture(client: TestClient) -> dict:
    """Create a sample todo list for testing."""
    response = client.post(
        "/api/todolists",
        json={"title": "Groceries", "description": "Weekend shopping"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture(name="list_with_items")
def list_with_items_fixture(client: TestClient) -> dict:
    """Create a todo list with a few items."""
    response = client.post(
        "/api/todolists",
        json={
            "title": "Trip prep",
            "items": [
                {"text": "Pack bags", "priority": "high"},
                {"text": "Book taxi"},
                {"text": "Water plants", "completed": True},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()
