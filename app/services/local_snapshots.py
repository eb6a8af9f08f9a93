"""Serve the last fetched snapshots without contacting Xero."""

from __future__ import annotations

import json
from typing import Any

from app.clients.blob_storage import LocalBlobStorage
from app.services.accounting_gateway import ACCOUNTS_SNAPSHOT_PATH, VENDORS_SNAPSHOT_PATH


class SnapshotNotFoundError(Exception):
    """Raised when no snapshot has been stored yet."""


class LocalSnapshotService:
    def __init__(self, blob_storage: LocalBlobStorage) -> None:
        self._blobs = blob_storage

    def read_vendors(self) -> Any:
        return self._read(VENDORS_SNAPSHOT_PATH)

    def read_accounts(self) -> Any:
        return self._read(ACCOUNTS_SNAPSHOT_PATH)

    def _read(self, path: str) -> Any:
        raw = self._blobs.get(path)
        if raw is None:
            raise SnapshotNotFoundError("No local data found")
        return json.loads(raw)


__all__ = ["LocalSnapshotService", "SnapshotNotFoundError"]
