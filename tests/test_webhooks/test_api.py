"""Tests for webhook history API endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from storehook.api.routes import create_app
from storehook.webhooks.models import (
    DispatchOutcome,
    HistoryRecord,
    Hook,
    HookType,
)
from storehook.webhooks.orchestrator import (
    WebhookOrchestrator,
    get_webhook_orchestrator,
    set_webhook_orchestrator,
    webhook_orchestrator_is_set,
)
from storehook.webhooks.repository import InMemoryHistoryStore, InMemoryHookRepository
from storehook.webhooks.sqlite_store import SQLiteHistoryStore, SQLiteHookRepository

# ============================================================================
# Fixtures
# ============================================================================


class FakeDispatcher:
    """Dispatcher that always succeeds."""

    def __init__(self):
        self.sent = []

    async def send_for_hook(self, hook, url, body):
        self.sent.append((hook.id, url, body))
        return DispatchOutcome(success=True, response="HTTP/1.1 200 OK\r\n\r\n")


@pytest.fixture
def hook():
    """Sample order hook."""
    return Hook(name="ERP", hook_type=HookType.ORDER, payload_url="https://erp.test/orders")


@pytest.fixture
def records(hook):
    """One failed and one successful record for the hook."""
    failed = HistoryRecord.from_outcome(
        hook,
        payload_url="https://erp.test/orders/1",
        body='{"id": 1}',
        outcome=DispatchOutcome(success=False, message="Cannot connect to server. Please try again later."),
    )
    ok = HistoryRecord.from_outcome(
        hook,
        payload_url="https://erp.test/orders/2",
        body='{"id": 2}',
        outcome=DispatchOutcome(success=True, response="HTTP/1.1 200 OK\r\n\r\n"),
    )
    return [failed, ok]


@pytest.fixture
def dispatcher():
    """Fake dispatcher."""
    return FakeDispatcher()


@pytest.fixture
def orchestrator(hook, records, dispatcher):
    """Create and set a test orchestrator with seeded history."""
    history = InMemoryHistoryStore()
    for record in records:
        asyncio.run(history.add(record))

    orch = WebhookOrchestrator(
        InMemoryHookRepository([hook]),
        history,
        dispatcher=dispatcher,
    )
    set_webhook_orchestrator(orch)
    yield orch
    set_webhook_orchestrator(None)


@pytest.fixture
def client(orchestrator):  # noqa: ARG001
    """Create test client (orchestrator fixture ensures it is set)."""
    return TestClient(create_app())


# ============================================================================
# History Endpoint Tests
# ============================================================================


class TestListHistory:
    """Tests for GET /webhooks/history."""

    def test_list_newest_first(self, client, records):
        """Test listing all records."""
        response = client.get("/webhooks/history")

        assert response.status_code == 200
        data = response.json()
        assert [r["id"] for r in data] == [records[1].id, records[0].id]
        assert data[0]["hook_type"] == "order"

    def test_filter_by_status(self, client, records):
        """Test filtering by outcome."""
        response = client.get("/webhooks/history", params={"status": "error"})

        data = response.json()
        assert len(data) == 1
        assert data[0]["id"] == records[0].id
        assert data[0]["message"] == "Cannot connect to server. Please try again later."

    def test_filter_by_hook(self, client):
        """Test filtering by an unknown hook."""
        response = client.get("/webhooks/history", params={"hook_id": "hook_missing"})

        assert response.json() == []

    def test_limit(self, client):
        """Test limiting results."""
        response = client.get("/webhooks/history", params={"limit": 1})

        assert len(response.json()) == 1

    def test_invalid_status(self, client):
        """Test rejecting an unknown status."""
        response = client.get("/webhooks/history", params={"status": "maybe"})

        assert response.status_code == 422


class TestGetHistory:
    """Tests for GET /webhooks/history/{id}."""

    def test_get(self, client, records):
        """Test fetching one record."""
        response = client.get(f"/webhooks/history/{records[1].id}")

        assert response.status_code == 200
        data = response.json()
        assert data["payload_url"] == "https://erp.test/orders/2"
        assert data["status"] == "success"
        assert data["replay_of"] is None

    def test_not_found(self, client):
        """Test a missing record."""
        response = client.get("/webhooks/history/hist_missing")

        assert response.status_code == 404
        assert "not found" in response.json()["error"]


# ============================================================================
# Replay Endpoint Tests
# ============================================================================


class TestReplayHistory:
    """Tests for POST /webhooks/history/{id}/replay."""

    def test_replay(self, client, records, dispatcher, hook):
        """Test replaying a failed record."""
        response = client.post(f"/webhooks/history/{records[0].id}/replay")

        assert response.status_code == 200
        data = response.json()
        assert data["replay_of"] == records[0].id
        assert data["status"] == "success"
        assert dispatcher.sent == [(hook.id, "https://erp.test/orders/1", '{"id": 1}')]

        listing = client.get("/webhooks/history").json()
        assert listing[0]["id"] == data["id"]

    def test_replay_missing_record(self, client):
        """Test replaying an unknown record."""
        response = client.post("/webhooks/history/hist_missing/replay")

        assert response.status_code == 404

    def test_replay_missing_hook(self, client, orchestrator, records, hook):
        """Test replaying after the hook was deleted."""
        asyncio.run(orchestrator.repository.remove(hook.id))

        response = client.post(f"/webhooks/history/{records[0].id}/replay")

        assert response.status_code == 404
        assert hook.id in response.json()["error"]


# ============================================================================
# Health Tests
# ============================================================================


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        """Test liveness."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


# ============================================================================
# Lifespan Tests
# ============================================================================


class TestLifespan:
    """Tests for storage wiring at application startup."""

    def test_sqlite_storage_installed(self, monkeypatch, tmp_path, records):
        """Test that startup installs SQLite stores at WEBHOOK_DB_PATH."""
        db_path = tmp_path / "webhooks.db"
        monkeypatch.setenv("WEBHOOK_DB_PATH", str(db_path))
        set_webhook_orchestrator(None)

        with TestClient(create_app()) as client:
            orchestrator = get_webhook_orchestrator()
            assert isinstance(orchestrator.repository, SQLiteHookRepository)
            assert isinstance(orchestrator.history, SQLiteHistoryStore)

            client.portal.call(orchestrator.history.add, records[0])
            response = client.get(f"/webhooks/history/{records[0].id}")

            assert response.status_code == 200
            assert response.json()["status"] == "error"

        assert db_path.exists()
        assert not webhook_orchestrator_is_set()

    def test_installed_orchestrator_kept(self, orchestrator):
        """Test that an orchestrator set before startup is left in place."""
        with TestClient(create_app()) as client:
            assert get_webhook_orchestrator() is orchestrator
            assert len(client.get("/webhooks/history").json()) == 2

        assert get_webhook_orchestrator() is orchestrator
