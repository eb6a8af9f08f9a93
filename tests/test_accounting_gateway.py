from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
import time
from datetime import datetime

import pytest

from app.clients.blob_storage import LocalBlobStorage
from app.clients.xero_accounting import UpstreamAPIError
from app.models.oauth import TokenBundle
from app.services.accounting_gateway import (
    ACCOUNTS_SNAPSHOT_PATH,
    VENDORS_SNAPSHOT_PATH,
    AccountingGatewayService,
)
from app.services.local_snapshots import LocalSnapshotService
from app.services.xero_tokens import XeroTokenService

CONTACTS = [
    {
        "ContactID": "c-1",
        "Name": "Paper Supplies Ltd",
        "ContactStatus": "ACTIVE",
        "IsSupplier": True,
        "Balances": {"AccountsPayable": {"Outstanding": 120.5, "Overdue": 20.0}},
    },
    {
        "ContactID": "c-2",
        "Name": "Retail Customer",
        "ContactStatus": "ACTIVE",
        "IsSupplier": False,
        "IsCustomer": True,
    },
    {
        "ContactID": "c-3",
        "Name": "Cleaning Services",
        "ContactStatus": "ARCHIVED",
        "IsSupplier": True,
    },
]

ACCOUNTS = [
    {"AccountID": "a-1", "Code": "400", "Name": "Advertising", "Type": "EXPENSE",
     "Status": "ACTIVE", "Description": "Marketing spend"},
    {"AccountID": "a-2", "Code": "200", "Name": "Sales", "Type": "REVENUE",
     "Status": "ACTIVE"},
    {"AccountID": "a-3", "Code": "404", "Name": "Bank Fees", "Type": "EXPENSE",
     "Status": "ACTIVE"},
]


class FakeAccountingClient:
    def __init__(self) -> None:
        self.contacts = list(CONTACTS)
        self.accounts = list(ACCOUNTS)
        self.error: Exception | None = None
        self.calls: list[tuple[str, str, str]] = []

    async def list_contacts(self, *, access_token: str, tenant_id: str) -> list[dict]:
        self.calls.append(("contacts", access_token, tenant_id))
        if self.error:
            raise self.error
        return self.contacts

    async def list_accounts(self, *, access_token: str, tenant_id: str) -> list[dict]:
        self.calls.append(("accounts", access_token, tenant_id))
        if self.error:
            raise self.error
        return self.accounts


@pytest.fixture()
def blobs(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(str(tmp_path / "storage"))


@pytest.fixture()
def token_service(blobs) -> XeroTokenService:
    service = XeroTokenService(blob_storage=blobs)
    bundle = TokenBundle(
        access_token="access-token",
        refresh_token="refresh-token",
        expires=int(time.time()) + 600,
        tenant_id="tenant-1",
    )
    blobs.put(XeroTokenService.TOKEN_PATH, bundle.model_dump_json())
    return service


@pytest.fixture()
def client() -> FakeAccountingClient:
    return FakeAccountingClient()


@pytest.fixture()
def gateway(token_service, client, blobs) -> AccountingGatewayService:
    return AccountingGatewayService(
        token_service=token_service, accounting_client=client, blob_storage=blobs
    )


@pytest.mark.anyio
async def test_fetch_vendors_keeps_suppliers_in_order(gateway, client, blobs) -> None:
    result = await gateway.fetch_vendors()

    assert result.success is True
    assert [vendor["id"] for vendor in result.data] == ["c-1", "c-3"]
    assert result.data[0] == {
        "id": "c-1",
        "name": "Paper Supplies Ltd",
        "status": "ACTIVE",
        "isSupplier": True,
        "balances": {"accountsPayable": {"outstanding": 120.5, "overDue": 20.0}},
    }
    assert result.data[1]["balances"] == {
        "accountsPayable": {"outstanding": 0.0, "overDue": 0.0}
    }
    assert client.calls == [("contacts", "access-token", "tenant-1")]
    assert result.file_path.endswith("vendors.json")


@pytest.mark.anyio
async def test_fetch_vendors_writes_snapshot(gateway, blobs) -> None:
    result = await gateway.fetch_vendors()

    snapshot = json.loads(blobs.get(VENDORS_SNAPSHOT_PATH))
    assert snapshot["vendors"] == result.data
    datetime.fromisoformat(snapshot["last_updated"])


@pytest.mark.anyio
async def test_fetch_accounts_keeps_expense_accounts(gateway, client, blobs) -> None:
    result = await gateway.fetch_accounts()

    assert result.success is True
    assert [account["code"] for account in result.data] == ["400", "404"]
    assert result.data[0] == {
        "id": "a-1",
        "code": "400",
        "name": "Advertising",
        "type": "EXPENSE",
        "status": "ACTIVE",
        "description": "Marketing spend",
    }
    snapshot = json.loads(blobs.get(ACCOUNTS_SNAPSHOT_PATH))
    assert snapshot["accounts"] == result.data


@pytest.mark.anyio
async def test_repeated_fetch_overwrites_snapshot(gateway, client, blobs) -> None:
    await gateway.fetch_vendors()
    client.contacts = [CONTACTS[2]]

    await gateway.fetch_vendors()

    snapshot = LocalSnapshotService(blobs).read_vendors()
    assert [vendor["id"] for vendor in snapshot["vendors"]] == ["c-3"]


@pytest.mark.anyio
async def test_upstream_failure_returns_error_result(gateway, client, blobs) -> None:
    client.error = UpstreamAPIError("Xero Contacts request failed with status 403: Forbidden")

    result = await gateway.fetch_vendors()

    assert result.success is False
    assert "403" in result.error
    assert result.to_body() == {"success": False, "error": result.error}
    assert not blobs.exists(VENDORS_SNAPSHOT_PATH)


@pytest.mark.anyio
async def test_missing_token_returns_error_without_calling_xero(client, blobs) -> None:
    gateway = AccountingGatewayService(
        token_service=XeroTokenService(blob_storage=blobs),
        accounting_client=client,
        blob_storage=blobs,
    )

    result = await gateway.fetch_accounts()

    assert result.success is False
    assert "authenticate" in result.error
    assert client.calls == []


@pytest.mark.anyio
async def test_failed_fetch_leaves_previous_snapshot(gateway, client, blobs) -> None:
    await gateway.fetch_accounts()
    before = blobs.get(ACCOUNTS_SNAPSHOT_PATH)
    client.error = RuntimeError("connection reset")

    result = await gateway.fetch_accounts()

    assert result.success is False
    assert blobs.get(ACCOUNTS_SNAPSHOT_PATH) == before
