"""Webhook dispatch engine for store events.

This module provides:
- Hook / HistoryRecord: Hook configuration and delivery history models
- HookSelector: Ordered, filtered hook resolution for an event
- ContextEnricher: Per-item template context construction
- TemplateRenderer: Sandboxed Jinja2 rendering with custom filters
- build_auth_header: Basic and Digest authorization headers
- HttpDispatcher: Request sending and response classification
- WebhookOrchestrator: Select, render, send, record and alert per event
- cron_expr: Cron expressions for scheduled runs
"""

from storehook.webhooks.cron import Schedule, cron_expr, cron_schedule_expr
from storehook.webhooks.dispatcher import HttpDispatcher, classify_response, is_success
from storehook.webhooks.enrichment import (
    CatalogLookup,
    ContextEnricher,
    CustomerInfo,
    ProductInfo,
    StaticCatalog,
)
from storehook.webhooks.items import (
    Address,
    GenericItem,
    InvoiceItem,
    ItemKind,
    LineItem,
    OrderItem,
    QuoteItem,
    ShipmentItem,
    Track,
    parse_item,
)
from storehook.webhooks.models import (
    Authentication,
    DispatchOutcome,
    HistoryRecord,
    HistoryStatus,
    Hook,
    HookHeader,
    HookType,
)
from storehook.webhooks.notifier import LoggingNotifier, Notifier
from storehook.webhooks.orchestrator import (
    WebhookOrchestrator,
    get_webhook_orchestrator,
    set_webhook_orchestrator,
    webhook_orchestrator_is_set,
)
from storehook.webhooks.repository import (
    HistoryStore,
    HookRepository,
    InMemoryHistoryStore,
    InMemoryHookRepository,
)
from storehook.webhooks.security import DigestParams, basic_auth_header, build_auth_header
from storehook.webhooks.selector import HookSelector
from storehook.webhooks.sqlite_store import SQLiteHistoryStore, SQLiteHookRepository
from storehook.webhooks.templates import FilterSet, TemplateRenderer
from storehook.webhooks.transport import HttpxTransport, Transport

__all__ = [
    # Models
    "Authentication",
    "DispatchOutcome",
    "HistoryRecord",
    "HistoryStatus",
    "Hook",
    "HookHeader",
    "HookType",
    # Items
    "Address",
    "GenericItem",
    "InvoiceItem",
    "ItemKind",
    "LineItem",
    "OrderItem",
    "QuoteItem",
    "ShipmentItem",
    "Track",
    "parse_item",
    # Enrichment
    "CatalogLookup",
    "ContextEnricher",
    "CustomerInfo",
    "ProductInfo",
    "StaticCatalog",
    # Rendering
    "FilterSet",
    "TemplateRenderer",
    # Authentication
    "DigestParams",
    "basic_auth_header",
    "build_auth_header",
    # Sending
    "HttpDispatcher",
    "HttpxTransport",
    "Transport",
    "classify_response",
    "is_success",
    # Storage
    "HistoryStore",
    "HookRepository",
    "InMemoryHistoryStore",
    "InMemoryHookRepository",
    "SQLiteHistoryStore",
    "SQLiteHookRepository",
    # Selection and orchestration
    "HookSelector",
    "LoggingNotifier",
    "Notifier",
    "WebhookOrchestrator",
    "get_webhook_orchestrator",
    "set_webhook_orchestrator",
    "webhook_orchestrator_is_set",
    # Cron
    "Schedule",
    "cron_expr",
    "cron_schedule_expr",
]
