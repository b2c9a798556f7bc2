"""Hook configuration and delivery history models.

Hooks are read-only to the engine; history records are created once per
hook invocation and never mutated afterwards.
"""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storehook.config import ALL_STORES


class HookType(str, Enum):
    """Domain events a hook can be attached to."""

    # Sales
    ORDER = "order"
    ORDER_COMMENT = "order_comment"
    INVOICE = "invoice"
    SHIPMENT = "shipment"
    CREDIT_MEMO = "creditmemo"

    # Cart
    QUOTE = "quote"
    ABANDONED_CART = "abandoned_cart"

    # Customer
    NEW_CUSTOMER = "new_customer"
    UPDATE_CUSTOMER = "update_customer"
    DELETE_CUSTOMER = "delete_customer"
    CUSTOMER_LOGIN = "customer_login"

    # Catalog
    NEW_PRODUCT = "new_product"
    UPDATE_PRODUCT = "update_product"
    DELETE_PRODUCT = "delete_product"

    SUBSCRIBER = "subscriber"


class Authentication(str, Enum):
    """Authorization schemes for outbound requests."""

    NONE = "none"
    BASIC = "basic"
    DIGEST = "digest"


class HistoryStatus(str, Enum):
    """Outcome of a hook invocation."""

    SUCCESS = "success"
    ERROR = "error"


class HookHeader(BaseModel):
    """A single custom request header."""

    name: str
    value: str = ""


class Hook(BaseModel):
    """A configured rule mapping an event to an outbound HTTP call."""

    id: str = Field(
        default_factory=lambda: f"hook_{uuid.uuid4().hex[:12]}",
        description="Unique hook identifier",
    )
    name: str = Field(..., description="Hook name shown in alerts")
    hook_type: HookType = Field(..., description="Event the hook listens to")
    status: bool = Field(default=True, description="Whether the hook is enabled")
    store_ids: list[int] = Field(
        default_factory=lambda: [ALL_STORES],
        description="Stores the hook applies to (0 = all stores)",
    )
    priority: int = Field(default=0, description="Lower runs first")

    # Request templates
    payload_url: str = Field(..., description="URL template")
    body: str = Field(default="", description="Body template")
    method: str = Field(default="GET", description="HTTP verb")
    content_type: str | None = Field(default=None, description="Content-Type header")
    headers: list[HookHeader] | str = Field(
        default_factory=list,
        description="Custom headers, structured or JSON-encoded",
    )

    # Authentication
    authentication: Authentication = Field(default=Authentication.NONE)
    username: str = ""
    password: str = ""

    # Static digest parameters
    realm: str = ""
    nonce: str = ""
    algorithm: str = "MD5"
    qop: str = "auth"
    nonce_count: str = "00000001"
    client_nonce: str = ""
    opaque: str = ""

    order_status: str = Field(
        default="",
        description="Comma-separated order statuses (order hooks only)",
    )

    @field_validator("store_ids", mode="before")
    @classmethod
    def _parse_store_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [int(part) for part in value.split(",") if part.strip()]
        if isinstance(value, int):
            return [value]
        return value

    @field_validator("method", mode="before")
    @classmethod
    def _default_method(cls, value: Any) -> Any:
        return value or "GET"

    @property
    def order_statuses(self) -> list[str]:
        """The configured order statuses as a list, without blank entries."""
        return [s for s in self.order_status.split(",") if s]

    def applies_to_store(self, store_id: int) -> bool:
        """Check whether the hook is scoped to a store.

        Args:
            store_id: Store identifier of the triggering item.

        Returns:
            True if the hook covers all stores or this one.
        """
        return ALL_STORES in self.store_ids or store_id in self.store_ids

    def accepts_order_status(self, status: str | None) -> bool:
        """Check whether an order status passes this hook's filter.

        Only order hooks filter by status; the match is exact. An empty or
        missing status never matches.
        """
        if self.hook_type is not HookType.ORDER:
            return True
        return status in self.order_statuses


class DispatchOutcome(BaseModel):
    """Result of a single HTTP send."""

    model_config = ConfigDict(frozen=True)

    success: bool
    response: str = ""
    message: str = ""


class HistoryRecord(BaseModel):
    """Audit entry for one hook invocation attempt."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: f"hist_{uuid.uuid4().hex[:12]}",
        description="Unique history identifier",
    )

    # Hook snapshot at invocation time
    hook_id: str
    hook_name: str
    store_ids: list[int] = Field(default_factory=list)
    hook_type: HookType
    priority: int = 0

    # What was sent and what came back
    payload_url: str = ""
    body: str = ""
    response: str = ""
    status: HistoryStatus
    message: str | None = None

    replay_of: str | None = Field(
        default=None,
        description="History record this one was replayed from",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the invocation happened",
    )

    @classmethod
    def from_outcome(
        cls,
        hook: Hook,
        *,
        payload_url: str,
        body: str,
        outcome: DispatchOutcome,
        replay_of: str | None = None,
    ) -> HistoryRecord:
        """Build a complete record from a hook snapshot and a send outcome.

        Args:
            hook: Hook that was invoked.
            payload_url: Rendered URL.
            body: Rendered body.
            outcome: Result of the send.
            replay_of: Source record id when this is a replay.

        Returns:
            The history record, ready to persist.
        """
        status = HistoryStatus.SUCCESS if outcome.success else HistoryStatus.ERROR
        return cls(
            hook_id=hook.id,
            hook_name=hook.name,
            store_ids=list(hook.store_ids),
            hook_type=hook.hook_type,
            priority=hook.priority,
            payload_url=payload_url,
            body=body,
            response=outcome.response,
            status=status,
            message=None if outcome.success else outcome.message,
            replay_of=replay_of,
        )


def decode_headers(headers: list[HookHeader] | list[dict[str, Any]] | str | None) -> list[HookHeader]:
    """Normalize hook headers from a structured list or a JSON string.

    Args:
        headers: Header pairs, dicts with name/value keys, or their JSON encoding.

    Returns:
        List of HookHeader in configured order.
    """
    if not headers:
        return []
    if isinstance(headers, str):
        headers = json.loads(headers)
        if isinstance(headers, dict):
            headers = list(headers.values())
    return [
        h if isinstance(h, HookHeader) else HookHeader.model_validate(h)
        for h in headers  # type: ignore[union-attr]
    ]
