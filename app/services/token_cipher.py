"""Symmetric encryption for the Xero token file kept in blob storage."""

from __future__ import annotations

import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


class TokenCipherService:
    """Encrypt and decrypt token documents using a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext; raises ``ValueError`` for foreign or corrupt input."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.strip().encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError("Stored token is not valid ciphertext for this secret.") from exc
        return plaintext.decode("utf-8")


def build_token_cipher(secret: Optional[str]) -> Optional[TokenCipherService]:
    """Encryption is opt-in; without a secret the token file stays plain JSON."""
    if not secret:
        return None
    return TokenCipherService(secret=secret)


__all__ = ["TokenCipherService", "build_token_cipher"]
