"""
Helpers for persisting and resolving the Xero OAuth token bundle.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from app.clients.blob_storage import LocalBlobStorage
from app.models.oauth import TokenBundle
from app.services.state_stores import KeyValueStore
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class TokenExpiredOrMissingError(Exception):
    """Raised when a gated call finds no token, or only an expired one."""


class XeroTokenService:
    """Keeps the token bundle in the session and in blob storage."""

    SESSION_KEY = "xero_token"
    TOKEN_PATH = "xero/tokens/token.json"

    def __init__(
        self,
        blob_storage: LocalBlobStorage,
        token_cipher: Optional[TokenCipherService] = None,
    ) -> None:
        self._blobs = blob_storage
        self._cipher = token_cipher

    def save(self, bundle: TokenBundle, session: KeyValueStore) -> None:
        """Store the bundle for this session and for later requests."""
        document = bundle.model_dump()
        session.put(self.SESSION_KEY, document)

        serialized = json.dumps(document)
        if self._cipher is not None:
            serialized = self._cipher.encrypt(serialized)
        self._blobs.put(self.TOKEN_PATH, serialized)
        logger.info("Xero token stored for tenant %s", bundle.tenant_id)

    def load(self, session: Optional[KeyValueStore] = None) -> Optional[TokenBundle]:
        """Return the stored bundle, preferring the session copy.

        The session copy is only trusted while the token file exists, so a
        disconnect from any session invalidates every session's copy.
        """
        if session is not None:
            document = session.get(self.SESSION_KEY)
            if document and not self._blobs.exists(self.TOKEN_PATH):
                logger.info("Discarding session token copy; token file is gone")
                session.forget(self.SESSION_KEY)
                return None
            if document:
                try:
                    return TokenBundle.model_validate(document)
                except ValidationError:
                    logger.warning("Discarding malformed session token copy")
                    session.forget(self.SESSION_KEY)

        raw = self._blobs.get(self.TOKEN_PATH)
        if raw is None:
            return None
        try:
            if self._cipher is not None:
                raw = self._cipher.decrypt(raw)
            return TokenBundle.model_validate_json(raw)
        except (ValueError, ValidationError):
            logger.warning("Stored Xero token at %s could not be read", self.TOKEN_PATH)
            return None

    def resolve_active_token(self, session: Optional[KeyValueStore] = None) -> TokenBundle:
        """Return a non-expired bundle. Never refreshes; expiry needs a new OAuth flow."""
        bundle = self.load(session)
        if bundle is None:
            raise TokenExpiredOrMissingError(
                "No Xero token found. Please authenticate first."
            )
        if bundle.is_expired():
            raise TokenExpiredOrMissingError(
                "Xero token has expired. Please re-authenticate."
            )
        return bundle

    def delete(self, session: Optional[KeyValueStore] = None) -> bool:
        """Remove every stored copy; returns whether a token file existed."""
        if session is not None:
            session.forget(self.SESSION_KEY)
        existed = self._blobs.delete(self.TOKEN_PATH)
        if existed:
            logger.info("Xero token removed")
        return existed


__all__ = ["TokenExpiredOrMissingError", "XeroTokenService"]
