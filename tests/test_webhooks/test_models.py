"""Tests for hook and history models."""

import pydantic
import pytest

from storehook.webhooks.models import (
    DispatchOutcome,
    HistoryRecord,
    HistoryStatus,
    Hook,
    HookHeader,
    HookType,
    decode_headers,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def order_hook():
    """Order hook filtered to two statuses."""
    return Hook(
        name="ERP orders",
        hook_type=HookType.ORDER,
        payload_url="https://erp.test/orders",
        store_ids=[5, 7],
        priority=3,
        order_status="processing,complete",
    )


# ============================================================================
# Hook Tests
# ============================================================================


class TestHook:
    """Tests for the Hook model."""

    def test_defaults(self):
        """Test default values."""
        hook = Hook(name="h", hook_type=HookType.INVOICE, payload_url="https://x.test")

        assert hook.id.startswith("hook_")
        assert hook.status is True
        assert hook.store_ids == [0]
        assert hook.method == "GET"
        assert hook.headers == []

    def test_store_ids_from_string(self):
        """Test comma-separated store ids."""
        hook = Hook(name="h", hook_type=HookType.ORDER, payload_url="u", store_ids="1,2")

        assert hook.store_ids == [1, 2]

    def test_store_ids_from_int(self):
        """Test a single store id."""
        hook = Hook(name="h", hook_type=HookType.ORDER, payload_url="u", store_ids=4)

        assert hook.store_ids == [4]

    def test_empty_method_defaults_to_get(self):
        """Test that an empty method becomes GET."""
        hook = Hook(name="h", hook_type=HookType.ORDER, payload_url="u", method="")

        assert hook.method == "GET"

    def test_applies_to_store(self, order_hook):
        """Test store scoping."""
        assert order_hook.applies_to_store(5)
        assert order_hook.applies_to_store(7)
        assert not order_hook.applies_to_store(1)

    def test_all_stores(self):
        """Test that store 0 covers every store."""
        hook = Hook(name="h", hook_type=HookType.ORDER, payload_url="u", store_ids=[0])

        assert hook.applies_to_store(1)
        assert hook.applies_to_store(99)

    def test_accepts_order_status(self, order_hook):
        """Test exact status matching for order hooks."""
        assert order_hook.accepts_order_status("processing")
        assert order_hook.accepts_order_status("complete")
        assert not order_hook.accepts_order_status("pending")
        assert not order_hook.accepts_order_status("process")

    def test_non_order_hooks_ignore_status(self):
        """Test that only order hooks filter by status."""
        hook = Hook(
            name="h",
            hook_type=HookType.INVOICE,
            payload_url="u",
            order_status="complete",
        )

        assert hook.accepts_order_status("pending")

    def test_empty_order_status_matches_nothing(self):
        """Test that an unset filter matches no status, not even an empty one."""
        hook = Hook(name="h", hook_type=HookType.ORDER, payload_url="u")

        assert hook.order_statuses == []
        assert not hook.accepts_order_status("")
        assert not hook.accepts_order_status(None)
        assert not hook.accepts_order_status("pending")

    def test_blank_order_status_entries_dropped(self):
        """Test that stray commas do not add an empty status."""
        hook = Hook(
            name="h",
            hook_type=HookType.ORDER,
            payload_url="u",
            order_status="processing,,complete,",
        )

        assert hook.order_statuses == ["processing", "complete"]
        assert not hook.accepts_order_status("")


# ============================================================================
# Header Decoding Tests
# ============================================================================


class TestDecodeHeaders:
    """Tests for decode_headers."""

    def test_empty(self):
        """Test empty inputs."""
        assert decode_headers(None) == []
        assert decode_headers("") == []
        assert decode_headers([]) == []

    def test_structured(self):
        """Test HookHeader instances pass through."""
        headers = [HookHeader(name="X-A", value="1")]

        assert decode_headers(headers) == headers

    def test_dicts(self):
        """Test dicts with name/value keys."""
        result = decode_headers([{"name": "X-A", "value": "1"}])

        assert result == [HookHeader(name="X-A", value="1")]

    def test_json_list(self):
        """Test a JSON-encoded list."""
        result = decode_headers('[{"name": "X-A", "value": "1"}, {"name": "X-B", "value": "2"}]')

        assert [h.name for h in result] == ["X-A", "X-B"]

    def test_json_rows_object(self):
        """Test a JSON object of keyed rows keeps row order."""
        raw = '{"_1": {"name": "X-A", "value": "1"}, "_2": {"name": "X-B", "value": "2"}}'

        result = decode_headers(raw)

        assert [(h.name, h.value) for h in result] == [("X-A", "1"), ("X-B", "2")]


# ============================================================================
# History Tests
# ============================================================================


class TestHistoryRecord:
    """Tests for HistoryRecord."""

    def test_from_successful_outcome(self, order_hook):
        """Test a success record snapshots the hook."""
        outcome = DispatchOutcome(success=True, response="HTTP/1.1 200 OK\r\n\r\n")

        record = HistoryRecord.from_outcome(
            order_hook,
            payload_url="https://erp.test/orders/1",
            body="{}",
            outcome=outcome,
        )

        assert record.id.startswith("hist_")
        assert record.hook_id == order_hook.id
        assert record.hook_name == "ERP orders"
        assert record.store_ids == [5, 7]
        assert record.hook_type == HookType.ORDER
        assert record.priority == 3
        assert record.status == HistoryStatus.SUCCESS
        assert record.message is None
        assert record.replay_of is None

    def test_from_failed_outcome(self, order_hook):
        """Test a failure record carries the message."""
        outcome = DispatchOutcome(success=False, message="boom")

        record = HistoryRecord.from_outcome(order_hook, payload_url="u", body="", outcome=outcome)

        assert record.status == HistoryStatus.ERROR
        assert record.message == "boom"
        assert record.response == ""

    def test_replay_of(self, order_hook):
        """Test linking to a source record."""
        outcome = DispatchOutcome(success=True, response="HTTP/1.1 200 OK")

        record = HistoryRecord.from_outcome(
            order_hook, payload_url="u", body="", outcome=outcome, replay_of="hist_1"
        )

        assert record.replay_of == "hist_1"

    def test_frozen(self, order_hook):
        """Test records cannot be modified."""
        record = HistoryRecord.from_outcome(
            order_hook,
            payload_url="u",
            body="",
            outcome=DispatchOutcome(success=True),
        )

        with pytest.raises(pydantic.ValidationError):
            record.status = HistoryStatus.ERROR
