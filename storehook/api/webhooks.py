"""Webhook history API endpoints.

Provides read access to the delivery history and a replay action that
resends a recorded request.
"""

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from storehook.errors import HookNotFoundError
from storehook.webhooks.models import HistoryRecord, HistoryStatus, HookType
from storehook.webhooks.orchestrator import get_webhook_orchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


# ============================================================================
# Response Models
# ============================================================================


class HistoryResponse(BaseModel):
    """History record details response."""

    id: str
    hook_id: str
    hook_name: str
    hook_type: HookType
    store_ids: list[int]
    priority: int
    payload_url: str
    body: str
    response: str
    status: HistoryStatus
    message: str | None
    replay_of: str | None
    created_at: str

    @classmethod
    def from_record(cls, record: HistoryRecord) -> "HistoryResponse":
        """Create response from HistoryRecord model."""
        return cls(
            id=record.id,
            hook_id=record.hook_id,
            hook_name=record.hook_name,
            hook_type=record.hook_type,
            store_ids=record.store_ids,
            priority=record.priority,
            payload_url=record.payload_url,
            body=record.body,
            response=record.response,
            status=record.status,
            message=record.message,
            replay_of=record.replay_of,
            created_at=record.created_at.isoformat(),
        )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/history",
    response_model=list[HistoryResponse],
)
async def list_history(
    hook_id: str | None = None,
    status: HistoryStatus | None = None,
    limit: int = 50,
) -> list[HistoryResponse]:
    """List hook invocations, newest first.

    Optionally filter by hook or outcome.
    """
    orchestrator = get_webhook_orchestrator()
    records = await orchestrator.history.list(hook_id=hook_id, status=status, limit=limit)
    return [HistoryResponse.from_record(r) for r in records]


@router.get(
    "/history/{history_id}",
    response_model=HistoryResponse,
    responses={
        404: {"description": "History record not found"},
    },
)
async def get_history(history_id: str) -> HistoryResponse:
    """Get one history record by ID."""
    orchestrator = get_webhook_orchestrator()
    record = await orchestrator.history.get(history_id)

    if not record:
        raise HTTPException(status_code=404, detail=f"History record {history_id} not found")

    return HistoryResponse.from_record(record)


@router.post(
    "/history/{history_id}/replay",
    response_model=HistoryResponse,
    responses={
        404: {"description": "History record or hook not found"},
    },
)
async def replay_history(history_id: str) -> HistoryResponse:
    """Resend a recorded request.

    Uses the recorded URL and body with the hook's current credentials and
    headers, and returns the new history record.
    """
    orchestrator = get_webhook_orchestrator()
    logger.info("history_replay_requested", history_id=history_id)

    try:
        record = await orchestrator.replay(history_id)
    except HookNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e

    return HistoryResponse.from_record(record)
