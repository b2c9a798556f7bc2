"""SQLite-backed hook repository and history store.

Hooks and history records are stored as JSON documents with a few indexed
columns for filtering. Each history write is committed on its own.
"""

import os
from pathlib import Path

import aiosqlite
import structlog

from storehook.config import settings
from storehook.webhooks.models import HistoryRecord, HistoryStatus, Hook, HookType

logger = structlog.get_logger(__name__)


class _SQLiteStore:
    """Connection handling shared by the SQLite stores."""

    _component = "sqlite_store"

    def __init__(self, db_path: str | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file.
                    Defaults to WEBHOOK_DB_PATH setting.
        """
        self._db_path = db_path or os.environ.get("WEBHOOK_DB_PATH", settings.WEBHOOK_DB_PATH)
        self._connection: aiosqlite.Connection | None = None
        self._logger = logger.bind(component=self._component)

    async def initialize(self) -> None:
        """Open the database and create tables."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._create_tables()
        self._logger.info("store_initialized", db_path=self._db_path)

    async def _create_tables(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError(f"{type(self).__name__} is not initialized")
        return self._connection


class SQLiteHookRepository(_SQLiteStore):
    """Hook definitions persisted in SQLite.

    Example:
        repo = SQLiteHookRepository("./data/webhooks.db")
        await repo.initialize()
        await repo.add(hook)
        hooks = await repo.list_by_type(HookType.ORDER)
    """

    _component = "sqlite_hook_repository"

    async def _create_tables(self) -> None:
        conn = self._conn()
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS hooks (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                hook_type TEXT NOT NULL,
                data TEXT NOT NULL
            )
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_hooks_type ON hooks(hook_type)
        """)
        await conn.commit()

    async def add(self, hook: Hook) -> Hook:
        """Insert or replace a hook, keeping its original position."""
        conn = self._conn()
        await conn.execute(
            """
            INSERT INTO hooks (id, hook_type, data) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET hook_type = excluded.hook_type, data = excluded.data
            """,
            (hook.id, hook.hook_type.value, hook.model_dump_json()),
        )
        await conn.commit()
        self._logger.info("hook_saved", hook_id=hook.id, hook_type=hook.hook_type.value)
        return hook

    async def remove(self, hook_id: str) -> bool:
        conn = self._conn()
        cursor = await conn.execute("DELETE FROM hooks WHERE id = ?", (hook_id,))
        await conn.commit()
        return cursor.rowcount > 0

    async def list_by_type(self, hook_type: HookType) -> list[Hook]:
        conn = self._conn()
        async with conn.execute(
            "SELECT data FROM hooks WHERE hook_type = ? ORDER BY seq",
            (hook_type.value,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [Hook.model_validate_json(row["data"]) for row in rows]

    async def get(self, hook_id: str) -> Hook | None:
        conn = self._conn()
        async with conn.execute("SELECT data FROM hooks WHERE id = ?", (hook_id,)) as cursor:
            row = await cursor.fetchone()
        return Hook.model_validate_json(row["data"]) if row else None


class SQLiteHistoryStore(_SQLiteStore):
    """Append-only history log persisted in SQLite."""

    _component = "sqlite_history_store"

    async def _create_tables(self) -> None:
        conn = self._conn()
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS history (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                hook_id TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL,
                data TEXT NOT NULL
            )
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_hook_id ON history(hook_id)
        """)
        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_status ON history(status)
        """)
        await conn.commit()

    async def add(self, record: HistoryRecord) -> None:
        conn = self._conn()
        await conn.execute(
            "INSERT INTO history (id, hook_id, status, created_at, data) VALUES (?, ?, ?, ?, ?)",
            (
                record.id,
                record.hook_id,
                record.status.value,
                record.created_at.isoformat(),
                record.model_dump_json(),
            ),
        )
        await conn.commit()
        self._logger.debug("history_saved", history_id=record.id, hook_id=record.hook_id)

    async def get(self, history_id: str) -> HistoryRecord | None:
        conn = self._conn()
        async with conn.execute("SELECT data FROM history WHERE id = ?", (history_id,)) as cursor:
            row = await cursor.fetchone()
        return HistoryRecord.model_validate_json(row["data"]) if row else None

    async def list(
        self,
        *,
        hook_id: str | None = None,
        status: HistoryStatus | None = None,
        limit: int = 50,
    ) -> list[HistoryRecord]:
        """List records, newest first."""
        conn = self._conn()
        query = "SELECT data FROM history WHERE 1 = 1"
        params: list[str | int] = []

        if hook_id:
            query += " AND hook_id = ?"
            params.append(hook_id)
        if status:
            query += " AND status = ?"
            params.append(status.value)

        query += " ORDER BY seq DESC LIMIT ?"
        params.append(limit)

        async with conn.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [HistoryRecord.model_validate_json(row["data"]) for row in rows]
