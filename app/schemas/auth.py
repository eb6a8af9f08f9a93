"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class OAuthStateDiagnostics(BaseModel):
    """The three values compared when a callback state is rejected."""

    received: Optional[str] = Field(None, description="State echoed back by Xero.")
    stored: Optional[str] = Field(None, description="State held in the session.")
    cached: Optional[str] = Field(None, description="State held in the cache.")


class OAuthCallbackResult(BaseModel):
    """Body returned when the callback completes."""

    message: str


__all__ = ["OAuthCallbackResult", "OAuthStateDiagnostics"]
