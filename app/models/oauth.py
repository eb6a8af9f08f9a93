"""
Domain models for OAuth token persistence.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class TokenBundle(BaseModel):
    """Credential set stored after a successful Xero authorization."""

    access_token: str
    refresh_token: Optional[str] = None
    expires: int = Field(..., description="Expiry of the access token as a unix timestamp.")
    tenant_id: str = Field(..., description="Xero organisation the token operates against.")
    id_token: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return self.expires <= current.timestamp()


__all__ = ["TokenBundle"]
