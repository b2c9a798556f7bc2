"""Storage interfaces for hooks and delivery history.

HookRepository serves hook definitions; HistoryStore is an append-only log
of HistoryRecord entries. The in-memory implementations here back tests
and single-process deployments; see sqlite_store for a persistent one.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import structlog

from storehook.webhooks.models import HistoryRecord, HistoryStatus, Hook, HookType

logger = structlog.get_logger(__name__)


class HookRepository(Protocol):
    """Read access to configured hooks."""

    async def list_by_type(self, hook_type: HookType) -> list[Hook]: ...

    async def get(self, hook_id: str) -> Hook | None: ...


class HistoryStore(Protocol):
    """Append-only history of hook invocations."""

    async def add(self, record: HistoryRecord) -> None: ...

    async def get(self, history_id: str) -> HistoryRecord | None: ...

    async def list(
        self,
        *,
        hook_id: str | None = None,
        status: HistoryStatus | None = None,
        limit: int = 50,
    ) -> list[HistoryRecord]: ...


class InMemoryHookRepository:
    """Hooks kept in a dict, in insertion order."""

    def __init__(self, hooks: list[Hook] | None = None) -> None:
        self._hooks: dict[str, Hook] = {}
        self._lock = asyncio.Lock()
        self._logger = logger.bind(component="hook_repository")
        for hook in hooks or []:
            self._hooks[hook.id] = hook

    async def add(self, hook: Hook) -> Hook:
        """Add or replace a hook.

        Args:
            hook: Hook to store.

        Returns:
            The stored hook.
        """
        async with self._lock:
            self._hooks[hook.id] = hook
        self._logger.info("hook_saved", hook_id=hook.id, hook_type=hook.hook_type.value)
        return hook

    async def remove(self, hook_id: str) -> bool:
        """Delete a hook.

        Returns:
            True if deleted, False if not found.
        """
        async with self._lock:
            if hook_id not in self._hooks:
                return False
            del self._hooks[hook_id]
        self._logger.info("hook_deleted", hook_id=hook_id)
        return True

    async def list_by_type(self, hook_type: HookType) -> list[Hook]:
        async with self._lock:
            return [h for h in self._hooks.values() if h.hook_type == hook_type]

    async def get(self, hook_id: str) -> Hook | None:
        async with self._lock:
            return self._hooks.get(hook_id)


class InMemoryHistoryStore:
    """History records kept in a list, newest last."""

    def __init__(self) -> None:
        self._records: list[HistoryRecord] = []
        self._lock = asyncio.Lock()

    async def add(self, record: HistoryRecord) -> None:
        async with self._lock:
            self._records.append(record)

    async def get(self, history_id: str) -> HistoryRecord | None:
        async with self._lock:
            return next((r for r in self._records if r.id == history_id), None)

    async def list(
        self,
        *,
        hook_id: str | None = None,
        status: HistoryStatus | None = None,
        limit: int = 50,
    ) -> list[HistoryRecord]:
        """List records, newest first.

        Args:
            hook_id: Only records for this hook.
            status: Only records with this status.
            limit: Maximum results.

        Returns:
            Matching records.
        """
        async with self._lock:
            records = list(reversed(self._records))

        if hook_id:
            records = [r for r in records if r.hook_id == hook_id]
        if status:
            records = [r for r in records if r.status == status]

        return records[:limit]

    def __len__(self) -> int:
        return len(self._records)
