"""Tests for tagged domain items."""

import pydantic
import pytest

from storehook.webhooks.items import (
    GenericItem,
    LineItem,
    OrderItem,
    QuoteItem,
    ShipmentItem,
    parse_item,
)


class TestParseItem:
    """Tests for parse_item."""

    def test_order(self):
        """Test parsing an order."""
        item = parse_item(
            {
                "kind": "order",
                "increment_id": "100",
                "store_id": 2,
                "items": [{"product_id": 7, "name": "Shirt"}],
            }
        )

        assert isinstance(item, OrderItem)
        assert item.store_id == 2
        assert item.items[0].product_id == "7"

    def test_shipment_with_order(self):
        """Test nested order parsing."""
        item = parse_item(
            {
                "kind": "shipment",
                "order": {"increment_id": "100"},
                "tracks": [{"track_number": "1Z"}],
            }
        )

        assert isinstance(item, ShipmentItem)
        assert item.order.increment_id == "100"

    def test_generic_keeps_extra_fields(self):
        """Test unknown fields pass through."""
        item = parse_item({"kind": "generic", "email": "a@b.test"})

        assert isinstance(item, GenericItem)
        assert item.model_dump()["email"] == "a@b.test"

    def test_unknown_kind(self):
        """Test that an unknown kind is rejected."""
        with pytest.raises(pydantic.ValidationError):
            parse_item({"kind": "refund"})


class TestVisibleItems:
    """Tests for visible line filtering."""

    def test_children_hidden(self):
        """Test that child lines are excluded."""
        parent = LineItem(item_id="1", product_id="10")
        child = LineItem(item_id="2", product_id="11", parent_item_id="1")

        assert OrderItem(items=[parent, child]).visible_items() == [parent]
        assert QuoteItem(items=[parent, child]).visible_items() == [parent]
