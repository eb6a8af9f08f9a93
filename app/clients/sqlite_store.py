"""SQLite-backed key-value records for session data and short-lived cache entries."""

from __future__ import annotations

import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Optional


class SQLiteStore:
    """Simple key-value store using a normalized table keyed by (pk, sk).

    Records may carry an expiry; expired rows read as missing and are pruned
    on the next write.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    pk TEXT NOT NULL,
                    sk TEXT NOT NULL,
                    data TEXT NOT NULL,
                    expires_at REAL,
                    PRIMARY KEY (pk, sk)
                )
                """
            )

    def put_item(
        self,
        *,
        partition_key: str,
        sort_key: str,
        value: Any,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        if not partition_key or not sort_key:
            raise ValueError("Records require both a partition key and a sort key")

        expires_at = time.time() + ttl_seconds if ttl_seconds is not None else None
        data_json = json.dumps(value)
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM kv_records WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (time.time(),),
            )
            conn.execute(
                """
                INSERT INTO kv_records (pk, sk, data, expires_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(pk, sk) DO UPDATE SET
                    data = excluded.data,
                    expires_at = excluded.expires_at
                """,
                (partition_key, sort_key, data_json, expires_at),
            )

    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data, expires_at FROM kv_records WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            ).fetchone()
        if not row:
            return None
        if row["expires_at"] is not None and row["expires_at"] <= time.time():
            return None
        return json.loads(row["data"])

    def delete_item(self, *, partition_key: str, sort_key: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM kv_records WHERE pk = ? AND sk = ?",
                (partition_key, sort_key),
            )


__all__ = ["SQLiteStore"]
