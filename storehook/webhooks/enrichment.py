"""Template context enrichment.

Builds the per-event context exposed to hook templates: the raw item
fields plus derived fields (formatted totals, product links, tracking
codes, customer attributes...). Each item kind has its own enrichment
step, selected by the item's ``kind`` tag.

Lookups go through a CatalogLookup collaborator that returns None when a
product or customer is unknown; a missing lookup result only leaves the
derived field out of the context.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog
from pydantic import BaseModel, Field

from storehook.config import settings
from storehook.webhooks.items import (
    Address,
    AnyItem,
    InvoiceItem,
    ItemKind,
    LineItem,
    OrderItem,
    QuoteItem,
    ShipmentItem,
)
from storehook.webhooks.templates import format_price

logger = structlog.get_logger(__name__)

EventContext = dict[str, Any]

ORDER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ProductInfo(BaseModel):
    """Catalog data for a product."""

    product_id: str
    url: str | None = None
    image: str | None = None
    price: float | None = None


class CustomerInfo(BaseModel):
    """Customer data used by templates."""

    customer_id: str
    taxvat: str | None = None
    custom_attributes: dict[str, Any] = Field(default_factory=dict)


class CatalogLookup(Protocol):
    """Product and customer lookups. Absence is returned as None."""

    async def get_product(self, product_id: str) -> ProductInfo | None: ...

    async def get_customer(self, customer_id: str) -> CustomerInfo | None: ...


class StaticCatalog:
    """In-memory CatalogLookup backed by plain dictionaries."""

    def __init__(
        self,
        products: list[ProductInfo] | None = None,
        customers: list[CustomerInfo] | None = None,
    ) -> None:
        self._products = {p.product_id: p for p in products or []}
        self._customers = {c.customer_id: c for c in customers or []}

    async def get_product(self, product_id: str) -> ProductInfo | None:
        return self._products.get(product_id)

    async def get_customer(self, customer_id: str) -> CustomerInfo | None:
        return self._customers.get(customer_id)


class ContextEnricher:
    """Derives template fields from a domain item.

    The item is never modified; every call builds a fresh context, so two
    calls over the same item and lookups produce equal results.
    """

    def __init__(
        self,
        catalog: CatalogLookup | None = None,
        *,
        storefront_url: str | None = None,
    ) -> None:
        """Initialize the enricher.

        Args:
            catalog: Product/customer lookup (empty catalog if not provided).
            storefront_url: Public store base URL (from settings if not provided).
        """
        self._catalog = catalog or StaticCatalog()
        self._storefront_url = (storefront_url or settings.STOREFRONT_URL).rstrip("/")
        self._steps: dict[str, Callable[[Any, EventContext], Awaitable[None]]] = {
            ItemKind.ORDER.value: self._enrich_order,
            ItemKind.INVOICE.value: self._enrich_invoice,
            ItemKind.SHIPMENT.value: self._enrich_shipment,
            ItemKind.QUOTE.value: self._enrich_quote,
        }
        self._logger = logger.bind(component="context_enricher")

    @property
    def cart_url(self) -> str:
        return f"{self._storefront_url}/checkout/cart/"

    async def enrich(self, item: AnyItem) -> EventContext:
        """Build the template context for an item.

        Args:
            item: Tagged domain item.

        Returns:
            Raw item fields merged with the derived fields.
        """
        context: EventContext = item.model_dump(mode="json")
        context["cart_url"] = self.cart_url

        step = self._steps.get(item.kind)
        if step is not None:
            await step(item, context)

        self._add_addresses(item, context)
        return context

    async def _enrich_order(self, order: OrderItem, context: EventContext) -> None:
        context["payment_method_name"] = order.payment_method_title
        context["items"] = [
            await self._enrich_line(line, with_price=True)
            for line in order.visible_items()
        ]
        context["order_total_formatted"] = format_price(order.grand_total)
        context["order_subtotal_formatted"] = format_price(order.subtotal)

        taxvat = await self._customer_taxvat(order.customer_id)
        if taxvat is not None:
            context["customer_taxvat"] = taxvat

    async def _enrich_shipment(self, shipment: ShipmentItem, context: EventContext) -> None:
        codes = ", ".join(track.track_number for track in shipment.tracks)
        context["tracking_codes"] = codes.rstrip(", ")
        await self._add_parent_order_fields(shipment.order, context)

    async def _enrich_invoice(self, invoice: InvoiceItem, context: EventContext) -> None:
        await self._add_parent_order_fields(invoice.order, context)

    async def _add_parent_order_fields(self, order: OrderItem, context: EventContext) -> None:
        # The _ship suffix is shared by shipment and invoice templates.
        context["order_increment_id"] = order.increment_id
        context["order_total_formatted_ship"] = format_price(order.grand_total)
        context["order_subtotal_formatted_ship"] = format_price(order.subtotal)

        taxvat = await self._customer_taxvat(order.customer_id)
        if taxvat is not None:
            context["customer_taxvat_ship"] = taxvat

        if order.created_at is not None:
            context["order_created_at"] = order.created_at.strftime(ORDER_DATE_FORMAT)

    async def _enrich_quote(self, quote: QuoteItem, context: EventContext) -> None:
        context["items"] = [
            await self._enrich_line(line, with_price=False)
            for line in quote.visible_items()
        ]

        if quote.customer_id:
            customer = await self._catalog.get_customer(quote.customer_id)
            if customer is not None:
                context["customer_cellphone_cart"] = customer.custom_attributes.get("cellphone")

        context["cart_total_formatted"] = format_price(quote.grand_total)
        context["cart_subtotal_formatted"] = format_price(quote.subtotal)

    async def _enrich_line(self, line: LineItem, *, with_price: bool) -> dict[str, Any]:
        data = line.model_dump(mode="json")
        product = await self._catalog.get_product(line.product_id)

        if product is None:
            self._logger.debug("product_not_found", product_id=line.product_id)
        else:
            if product.url:
                data["product_url"] = product.url
            if not line.image_url and product.image:
                data["image_url"] = product.image

        if with_price:
            price = product.price if product is not None and product.price is not None else line.price
            data["product_price_formatted"] = format_price(price)

        return data

    async def _customer_taxvat(self, customer_id: str | None) -> str | None:
        if not customer_id:
            return None
        customer = await self._catalog.get_customer(customer_id)
        if customer is None:
            self._logger.debug("customer_not_found", customer_id=customer_id)
            return None
        return customer.taxvat

    def _add_addresses(self, item: AnyItem, context: EventContext) -> None:
        shipping, billing = _item_addresses(item)

        if shipping is not None:
            context["shippingAddress"] = shipping.model_dump(mode="json")
            context["formatted_shipping_street"] = ", ".join(shipping.street)

        if billing is not None:
            context["billingAddress"] = billing.model_dump(mode="json")
            context["formatted_billing_street"] = ", ".join(billing.street)


def _item_addresses(item: AnyItem) -> tuple[Address | None, Address | None]:
    """Addresses of an item, falling back to the parent order's."""
    shipping = item.shipping_address
    billing = item.billing_address
    if item.kind in (ItemKind.INVOICE.value, ItemKind.SHIPMENT.value):
        order: OrderItem = item.order  # type: ignore[union-attr]
        shipping = shipping or order.shipping_address
        billing = billing or order.billing_address
    return shipping, billing
