"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_accounting_gateway_service,
    get_blob_storage,
    get_cache_store,
    get_local_snapshot_service,
    get_session_store,
    get_sqlite_store,
    get_token_cipher_service,
    get_xero_accounting_client,
    get_xero_oauth_client,
    get_xero_oauth_flow_service,
    get_xero_token_service,
)
from .config import get_app_settings

__all__ = [
    "get_accounting_gateway_service",
    "get_app_settings",
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
