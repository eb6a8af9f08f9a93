"""
Xero authorization-code flow with one-time CSRF state.

The state is written to the session and to the cache before the browser is
sent to Xero. A callback is accepted when its state matches either copy, and
every copy is discarded whatever the outcome, so a state value can never be
replayed.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from app.clients.xero_auth import ProviderExchangeError, XeroOAuthClient
from app.models.oauth import TokenBundle
from app.schemas.auth import OAuthStateDiagnostics
from app.services.state_stores import CacheStore, SessionStore
from app.services.xero_tokens import XeroTokenService

logger = logging.getLogger(__name__)


class InvalidStateError(Exception):
    """Raised when the callback state matches neither stored copy."""

    def __init__(self, diagnostics: OAuthStateDiagnostics) -> None:
        super().__init__("Invalid state")
        self.diagnostics = diagnostics


class AuthorizationDeniedError(Exception):
    """Raised when Xero returns to the callback without an authorization code."""


class XeroOAuthFlowService:
    """Drives authorize -> callback -> token exchange -> tenant lookup."""

    SESSION_STATE_KEY = "oauth2state"
    CACHE_KEY_PREFIX = "oauth2state_"

    def __init__(
        self,
        oauth_client: XeroOAuthClient,
        cache: CacheStore,
        token_service: XeroTokenService,
        state_ttl_seconds: int = 300,
    ) -> None:
        self._oauth = oauth_client
        self._cache = cache
        self._tokens = token_service
        self._state_ttl = state_ttl_seconds

    @classmethod
    def _cache_key(cls, state: str) -> str:
        return f"{cls.CACHE_KEY_PREFIX}{state}"

    def begin_authorization(self, session: SessionStore) -> str:
        """Issue a fresh state and return the Xero consent URL."""
        state = secrets.token_hex(16)
        cache_key = self._cache_key(state)

        session.put(self.SESSION_STATE_KEY, state)
        self._cache.put(cache_key, state, ttl_seconds=self._state_ttl)

        logger.info(
            "Xero OAuth state generated and stored (state=%s session_id=%s cache_key=%s)",
            state,
            session.session_id,
            cache_key,
        )
        return self._oauth.build_authorization_url(state=state)

    async def complete_authorization(
        self,
        session: SessionStore,
        received_state: Optional[str],
        code: Optional[str],
        error: Optional[str] = None,
    ) -> TokenBundle:
        """Verify the callback state, exchange the code and persist the tokens."""
        stored_state = session.get(self.SESSION_STATE_KEY)
        cached_state = (
            self._cache.get(self._cache_key(received_state)) if received_state else None
        )

        logger.info(
            "Xero OAuth callback received (received=%s stored=%s cached=%s session_id=%s)",
            received_state,
            stored_state,
            cached_state,
            session.session_id,
        )

        self._discard_state(session, received_state, stored_state)

        if not received_state or received_state not in (stored_state, cached_state):
            logger.error(
                "Xero OAuth state mismatch (received=%s stored=%s cached=%s session_id=%s)",
                received_state,
                stored_state,
                cached_state,
                session.session_id,
            )
            raise InvalidStateError(
                OAuthStateDiagnostics(
                    received=received_state, stored=stored_state, cached=cached_state
                )
            )

        if error or not code:
            raise AuthorizationDeniedError(
                f"Xero authorization was not granted: {error}"
                if error
                else "Missing authorization code."
            )

        issued_at = datetime.now(timezone.utc)
        token_payload = await self._oauth.exchange_authorization_code(code)
        access_token = token_payload["access_token"]

        connections = await self._oauth.get_connections(access_token)
        if not connections:
            raise ProviderExchangeError(
                "No Xero organisation is connected to this authorization."
            )
        tenant_id = connections[0].get("tenantId")
        if not tenant_id:
            raise ProviderExchangeError("Xero connection is missing a tenant id.")

        bundle = TokenBundle(
            access_token=access_token,
            refresh_token=token_payload.get("refresh_token"),
            expires=int(issued_at.timestamp()) + int(token_payload["expires_in"]),
            tenant_id=tenant_id,
            id_token=token_payload.get("id_token"),
        )
        self._tokens.save(bundle, session)
        return bundle

    def _discard_state(
        self,
        session: SessionStore,
        received_state: Optional[str],
        stored_state: Optional[str],
    ) -> None:
        session.forget(self.SESSION_STATE_KEY)
        for candidate in {received_state, stored_state}:
            if candidate:
                self._cache.forget(self._cache_key(candidate))


__all__ = [
    "AuthorizationDeniedError",
    "InvalidStateError",
    "XeroOAuthFlowService",
]
