"""Public schema exports."""

from .auth import OAuthCallbackResult, OAuthStateDiagnostics
from .xero import (
    AccountRecord,
    GatewayResult,
    PayableBalance,
    VendorBalances,
    VendorRecord,
    build_snapshot,
)

__all__ = [
    "AccountRecord",
    "GatewayResult",
    "OAuthCallbackResult",
    "OAuthStateDiagnostics",
    "PayableBalance",
    "VendorBalances",
    "VendorRecord",
    "build_snapshot",
]
