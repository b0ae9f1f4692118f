"""
License record persistence.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, TypeVar

from tasklic.common.exceptions import StorageError
from tasklic.common.models import LicenseRecord

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS licenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    application_id TEXT NOT NULL,
    client_id TEXT NOT NULL,
    license_key TEXT NOT NULL,
    subscription_type TEXT NOT NULL,
    valid_till TEXT NOT NULL,
    mutual_key TEXT NOT NULL,
    checksum TEXT NOT NULL,
    subscription_data TEXT NOT NULL,
    base_url TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    last_validated TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_licenses_client
    ON licenses (client_id, is_active, created_at);
"""

COLUMNS = (
    "application_id",
    "client_id",
    "license_key",
    "subscription_type",
    "valid_till",
    "mutual_key",
    "checksum",
    "subscription_data",
    "base_url",
    "is_active",
    "last_validated",
    "created_at",
)


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class SQLiteCredentialStore:
    """Stores license records in SQLite, one active record per client/app pair."""

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            # Transactions are opened explicitly
            self._conn = sqlite3.connect(
                self.db_path, check_same_thread=False, isolation_level=None
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as err:
            msg = f"Could not open license store at {self.db_path}: {err}"
            raise StorageError(msg) from err

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _run(self, func: Callable[[sqlite3.Connection], T]) -> T:
        with self._lock:
            try:
                return func(self._conn)
            except sqlite3.Error as err:
                msg = f"License store error: {err}"
                raise StorageError(msg) from err

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> LicenseRecord:
        data: dict[str, Any] = dict(row)
        data["is_active"] = bool(data["is_active"])
        return LicenseRecord.model_validate(data)

    # Sync operations, executed in a worker thread

    def _replace(self, conn: sqlite3.Connection, record: LicenseRecord) -> LicenseRecord:
        created_at = datetime.now(timezone.utc)
        stored = record.model_copy(
            update={"is_active": True, "created_at": created_at, "id": None}
        )
        values = stored.model_dump()
        values["is_active"] = int(values["is_active"])
        for column in ("valid_till", "last_validated", "created_at"):
            values[column] = _timestamp(values[column])

        conn.execute("BEGIN IMMEDIATE")
        try:
            conn.execute(
                "DELETE FROM licenses WHERE application_id = ? AND client_id = ?",
                (record.application_id, record.client_id),
            )
            cursor = conn.execute(
                f"INSERT INTO licenses ({', '.join(COLUMNS)}) "  # noqa: S608
                f"VALUES ({', '.join('?' for _ in COLUMNS)})",
                [values[column] for column in COLUMNS],
            )
            conn.execute("COMMIT")
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        return stored.model_copy(update={"id": cursor.lastrowid})

    @classmethod
    def _get_active(
        cls, conn: sqlite3.Connection, client_id: str
    ) -> LicenseRecord | None:
        row = conn.execute(
            "SELECT * FROM licenses WHERE client_id = ? AND is_active = 1 "
            "ORDER BY created_at DESC, id DESC LIMIT 1",
            (client_id,),
        ).fetchone()
        return cls._row_to_record(row) if row else None

    @staticmethod
    def _mark_validated(
        conn: sqlite3.Connection, record_id: int, when: datetime
    ) -> None:
        conn.execute(
            "UPDATE licenses SET last_validated = ? WHERE id = ?",
            (_timestamp(when), record_id),
        )

    @classmethod
    def _list_records(
        cls, conn: sqlite3.Connection, application_id: str, client_id: str
    ) -> list[LicenseRecord]:
        rows = conn.execute(
            "SELECT * FROM licenses WHERE application_id = ? AND client_id = ? "
            "ORDER BY id",
            (application_id, client_id),
        ).fetchall()
        return [cls._row_to_record(row) for row in rows]

    # Async interface

    async def replace(self, record: LicenseRecord) -> LicenseRecord:
        """Atomically swap every record for the pair with ``record``."""
        return await asyncio.to_thread(
            self._run, lambda conn: self._replace(conn, record)
        )

    async def get_active(self, client_id: str) -> LicenseRecord | None:
        """Most recently created active record for the client, any application."""
        return await asyncio.to_thread(
            self._run, lambda conn: self._get_active(conn, client_id)
        )

    async def mark_validated(self, record_id: int, when: datetime) -> None:
        await asyncio.to_thread(
            self._run, lambda conn: self._mark_validated(conn, record_id, when)
        )

    async def list_records(
        self, application_id: str, client_id: str
    ) -> list[LicenseRecord]:
        return await asyncio.to_thread(
            self._run,
            lambda conn: self._list_records(conn, application_id, client_id),
        )
