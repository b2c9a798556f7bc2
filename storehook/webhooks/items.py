"""Domain items that trigger webhooks.

Items are tagged with an explicit ``kind`` where they enter the system, so
enrichment dispatches on the tag instead of inspecting concrete types.
Every model accepts extra fields; they are passed through to templates
untouched.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ItemKind(str, Enum):
    """Item variants understood by the enrichment step."""

    ORDER = "order"
    INVOICE = "invoice"
    SHIPMENT = "shipment"
    QUOTE = "quote"
    GENERIC = "generic"


class _PassThrough(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class Address(_PassThrough):
    """Shipping or billing address."""

    street: list[str] = Field(default_factory=list)
    city: str | None = None
    postcode: str | None = None
    country_id: str | None = None


class LineItem(_PassThrough):
    """Order or cart line."""

    item_id: str | None = None
    product_id: str
    parent_item_id: str | None = None
    name: str = ""
    sku: str = ""
    qty: float = 1
    price: float = 0.0
    image_url: str | None = None

    @property
    def is_visible(self) -> bool:
        """Child lines of configurable/bundle products are hidden."""
        return self.parent_item_id is None


class Track(_PassThrough):
    """Shipment tracking entry."""

    track_number: str
    carrier_code: str | None = None


class _Item(_PassThrough):
    store_id: int | None = None
    shipping_address: Address | None = None
    billing_address: Address | None = None


class OrderItem(_Item):
    """A sales order."""

    kind: Literal["order"] = "order"
    increment_id: str = ""
    status: str | None = None
    customer_id: str | None = None
    grand_total: float = 0.0
    subtotal: float = 0.0
    created_at: datetime | None = None
    payment_method_title: str | None = None
    items: list[LineItem] = Field(default_factory=list)

    def visible_items(self) -> list[LineItem]:
        return [line for line in self.items if line.is_visible]


class InvoiceItem(_Item):
    """An invoice issued for an order."""

    kind: Literal["invoice"] = "invoice"
    increment_id: str = ""
    order: OrderItem


class ShipmentItem(_Item):
    """A shipment dispatched for an order."""

    kind: Literal["shipment"] = "shipment"
    increment_id: str = ""
    order: OrderItem
    tracks: list[Track] = Field(default_factory=list)


class QuoteItem(_Item):
    """A shopping cart."""

    kind: Literal["quote"] = "quote"
    customer_id: str | None = None
    grand_total: float = 0.0
    subtotal: float = 0.0
    items: list[LineItem] = Field(default_factory=list)

    def visible_items(self) -> list[LineItem]:
        return [line for line in self.items if line.is_visible]


class GenericItem(_Item):
    """Any other entity (customer, product, subscriber...)."""

    kind: Literal["generic"] = "generic"
    status: str | None = None


AnyItem = OrderItem | InvoiceItem | ShipmentItem | QuoteItem | GenericItem

EventItem = Annotated[
    AnyItem,
    Field(discriminator="kind"),
]

_event_item_adapter: TypeAdapter[Any] = TypeAdapter(EventItem)


def parse_item(data: dict[str, Any]) -> AnyItem:
    """Build a tagged item from raw data carrying a ``kind`` key.

    Args:
        data: Raw item fields.

    Returns:
        The matching item variant.
    """
    return _event_item_adapter.validate_python(data)
