"""Ephemeral key-value handles used during the OAuth handshake."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from app.clients.sqlite_store import SQLiteStore


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...

    def forget(self, key: str) -> None: ...


class SessionStore:
    """Server-side data for one browser session, keyed by its session id."""

    def __init__(
        self, store: SQLiteStore, session_id: str, lifetime_seconds: float = 7200
    ) -> None:
        self._store = store
        self._session_id = session_id
        self._lifetime = lifetime_seconds

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def _partition(self) -> str:
        return f"session#{self._session_id}"

    def get(self, key: str) -> Optional[Any]:
        return self._store.get_item(partition_key=self._partition, sort_key=key)

    def put(self, key: str, value: Any) -> None:
        self._store.put_item(
            partition_key=self._partition,
            sort_key=key,
            value=value,
            ttl_seconds=self._lifetime,
        )

    def forget(self, key: str) -> None:
        self._store.delete_item(partition_key=self._partition, sort_key=key)


class CacheStore:
    """Shared cache whose entries expire after a TTL."""

    _PARTITION = "cache"

    def __init__(self, store: SQLiteStore, default_ttl_seconds: float = 300) -> None:
        self._store = store
        self._default_ttl = default_ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        return self._store.get_item(partition_key=self._PARTITION, sort_key=key)

    def put(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        self._store.put_item(
            partition_key=self._PARTITION, sort_key=key, value=value, ttl_seconds=ttl
        )

    def forget(self, key: str) -> None:
        self._store.delete_item(partition_key=self._PARTITION, sort_key=key)


__all__ = ["CacheStore", "KeyValueStore", "SessionStore"]
