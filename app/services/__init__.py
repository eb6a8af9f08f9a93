"""Service layer exports."""

from .accounting_gateway import AccountingGatewayService
from .local_snapshots import LocalSnapshotService, SnapshotNotFoundError
from .state_stores import CacheStore, SessionStore
from .token_cipher import TokenCipherService, build_token_cipher
from .xero_oauth_flow import (
    AuthorizationDeniedError,
    InvalidStateError,
    XeroOAuthFlowService,
)
from .xero_tokens import TokenExpiredOrMissingError, XeroTokenService

__all__ = [
    "AccountingGatewayService",
    "AuthorizationDeniedError",
    "CacheStore",
    "InvalidStateError",
    "LocalSnapshotService",
    "SessionStore",
    "SnapshotNotFoundError",
    "TokenCipherService",
    "TokenExpiredOrMissingError",
    "XeroOAuthFlowService",
    "XeroTokenService",
    "build_token_cipher",
]
