"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated, Optional
from uuid import uuid4

from fastapi import Depends, Request

from app.clients import (
    LocalBlobStorage,
    SQLiteStore,
    XeroAccountingClient,
    XeroOAuthClient,
)
from app.core.config import get_settings
from app.services import (
    AccountingGatewayService,
    CacheStore,
    LocalSnapshotService,
    SessionStore,
    TokenCipherService,
    XeroOAuthFlowService,
    XeroTokenService,
    build_token_cipher,
)

SESSION_ID_KEY = "session_id"


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide the SQLite table backing sessions and the cache."""
    settings = _settings()
    return SQLiteStore(settings.storage.database_path)


@lru_cache()
def get_blob_storage() -> LocalBlobStorage:
    """Provide blob storage rooted at the configured directory."""
    settings = _settings()
    return LocalBlobStorage(settings.storage.root)


@lru_cache()
def get_cache_store() -> CacheStore:
    """Provide the short-TTL cache."""
    settings = _settings()
    return CacheStore(
        get_sqlite_store(), default_ttl_seconds=settings.oauth.state_ttl_seconds
    )


def get_session_store(
    request: Request,
    store: Annotated[SQLiteStore, Depends(get_sqlite_store)],
) -> SessionStore:
    """Bind the server-side session to the id carried in the signed cookie."""
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = uuid4().hex
        request.session[SESSION_ID_KEY] = session_id
    return SessionStore(
        store, session_id, lifetime_seconds=_settings().storage.session_lifetime_seconds
    )


@lru_cache()
def get_xero_oauth_client() -> XeroOAuthClient:
    """Create a singleton Xero OAuth client."""
    settings = _settings()
    return XeroOAuthClient(settings.xero)


@lru_cache()
def get_xero_accounting_client() -> XeroAccountingClient:
    return XeroAccountingClient()


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide the token file cipher when encryption is configured."""
    settings = _settings()
    return build_token_cipher(settings.security.token_encryption_secret)


@lru_cache()
def get_xero_token_service() -> XeroTokenService:
    """Provide helper for storing and resolving Xero tokens."""
    return XeroTokenService(
        blob_storage=get_blob_storage(),
        token_cipher=get_token_cipher_service(),
    )


@lru_cache()
def get_xero_oauth_flow_service() -> XeroOAuthFlowService:
    settings = _settings()
    return XeroOAuthFlowService(
        oauth_client=get_xero_oauth_client(),
        cache=get_cache_store(),
        token_service=get_xero_token_service(),
        state_ttl_seconds=settings.oauth.state_ttl_seconds,
    )


@lru_cache()
def get_accounting_gateway_service() -> AccountingGatewayService:
    return AccountingGatewayService(
        token_service=get_xero_token_service(),
        accounting_client=get_xero_accounting_client(),
        blob_storage=get_blob_storage(),
    )


@lru_cache()
def get_local_snapshot_service() -> LocalSnapshotService:
    return LocalSnapshotService(get_blob_storage())


__all__ = [
    "get_accounting_gateway_service",
    "get_blob_storage",
    "get_cache_store",
    "get_local_snapshot_service",
    "get_session_store",
    "get_sqlite_store",
    "get_token_cipher_service",
    "get_xero_accounting_client",
    "get_xero_oauth_client",
    "get_xero_oauth_flow_service",
    "get_xero_token_service",
]
