from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
import time

import pytest

from app.clients.blob_storage import LocalBlobStorage
from app.clients.sqlite_store import SQLiteStore
from app.models.oauth import TokenBundle
from app.services.state_stores import SessionStore
from app.services.token_cipher import TokenCipherService
from app.services.xero_tokens import TokenExpiredOrMissingError, XeroTokenService


def _bundle(*, expires_in: int = 1800, tenant_id: str = "tenant-1") -> TokenBundle:
    return TokenBundle(
        access_token="access-token",
        refresh_token="refresh-token",
        expires=int(time.time()) + expires_in,
        tenant_id=tenant_id,
        id_token="id-token",
    )


@pytest.fixture()
def blobs(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(str(tmp_path / "storage"))


@pytest.fixture()
def session(tmp_path) -> SessionStore:
    return SessionStore(SQLiteStore(str(tmp_path / "state.db")), "session-1")


def test_resolve_prefers_session_copy(blobs, session) -> None:
    service = XeroTokenService(blob_storage=blobs)
    service.save(_bundle(tenant_id="blob-tenant"), session)
    session.put(XeroTokenService.SESSION_KEY, _bundle(tenant_id="session-tenant").model_dump())

    assert service.resolve_active_token(session).tenant_id == "session-tenant"


def test_resolve_falls_back_to_blob_copy(blobs, session) -> None:
    service = XeroTokenService(blob_storage=blobs)
    blobs.put(XeroTokenService.TOKEN_PATH, json.dumps(_bundle().model_dump()))

    bundle = service.resolve_active_token(session)

    assert bundle.access_token == "access-token"
    assert bundle.tenant_id == "tenant-1"


def test_resolve_fails_without_any_token(blobs, session) -> None:
    service = XeroTokenService(blob_storage=blobs)

    with pytest.raises(TokenExpiredOrMissingError):
        service.resolve_active_token(session)


def test_resolve_fails_when_expired_even_if_both_copies_exist(blobs, session) -> None:
    service = XeroTokenService(blob_storage=blobs)
    service.save(_bundle(expires_in=-5), session)

    assert blobs.exists(XeroTokenService.TOKEN_PATH)
    assert session.get(XeroTokenService.SESSION_KEY) is not None
    with pytest.raises(TokenExpiredOrMissingError, match="expired"):
        service.resolve_active_token(session)


def test_token_expiring_now_is_expired() -> None:
    bundle = TokenBundle(access_token="a", expires=int(time.time()), tenant_id="t")

    assert bundle.is_expired()


def test_malformed_blob_is_treated_as_missing(blobs) -> None:
    service = XeroTokenService(blob_storage=blobs)
    blobs.put(XeroTokenService.TOKEN_PATH, json.dumps({"test": "data"}))

    assert service.load() is None
    with pytest.raises(TokenExpiredOrMissingError):
        service.resolve_active_token()


def test_encrypted_blob_round_trips_through_cipher(blobs, session) -> None:
    cipher = TokenCipherService(secret="file-secret")
    service = XeroTokenService(blob_storage=blobs, token_cipher=cipher)
    service.save(_bundle(), session)

    raw = blobs.get(XeroTokenService.TOKEN_PATH)
    assert "access-token" not in raw

    session.forget(XeroTokenService.SESSION_KEY)
    assert service.resolve_active_token(session).refresh_token == "refresh-token"


def test_delete_is_idempotent(blobs, session) -> None:
    service = XeroTokenService(blob_storage=blobs)
    service.save(_bundle(), session)

    assert service.delete(session) is True
    assert not blobs.exists(XeroTokenService.TOKEN_PATH)
    assert session.get(XeroTokenService.SESSION_KEY) is None
    assert service.delete(session) is False


def test_session_copy_is_dropped_once_token_file_is_removed(blobs, tmp_path) -> None:
    sqlite = SQLiteStore(str(tmp_path / "shared.db"))
    connected = SessionStore(sqlite, "connected")
    other = SessionStore(sqlite, "other")
    service = XeroTokenService(blob_storage=blobs)
    service.save(_bundle(), connected)

    assert service.delete(other) is True

    with pytest.raises(TokenExpiredOrMissingError, match="No Xero token"):
        service.resolve_active_token(connected)
    assert connected.get(XeroTokenService.SESSION_KEY) is None
