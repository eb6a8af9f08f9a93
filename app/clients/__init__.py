"""Expose constructed client wrappers."""

from .blob_storage import LocalBlobStorage
from .sqlite_store import SQLiteStore
from .xero_accounting import UpstreamAPIError, XeroAccountingClient
from .xero_auth import ProviderExchangeError, XeroOAuthClient

__all__ = [
    "LocalBlobStorage",
    "ProviderExchangeError",
    "SQLiteStore",
    "UpstreamAPIError",
    "XeroAccountingClient",
    "XeroOAuthClient",
]
