"""Token-gated reads of Xero vendors and expense accounts."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from app.clients.blob_storage import LocalBlobStorage
from app.clients.xero_accounting import XeroAccountingClient
from app.schemas.xero import AccountRecord, GatewayResult, VendorRecord, build_snapshot
from app.services.state_stores import KeyValueStore
from app.services.xero_tokens import XeroTokenService

logger = logging.getLogger(__name__)

VENDORS_SNAPSHOT_PATH = "xero/data/vendors.json"
ACCOUNTS_SNAPSHOT_PATH = "xero/data/accounts.json"


def project_vendors(contacts: List[Dict[str, Any]]) -> List[VendorRecord]:
    """Suppliers only, in upstream order."""
    vendors = [VendorRecord.from_xero(contact) for contact in contacts]
    return [vendor for vendor in vendors if vendor.is_supplier]


def project_expense_accounts(accounts: List[Dict[str, Any]]) -> List[AccountRecord]:
    records = [AccountRecord.from_xero(account) for account in accounts]
    return [record for record in records if record.type == "EXPENSE"]


class AccountingGatewayService:
    """Calls the Accounting API with the active token and snapshots the result.

    Failures never propagate: they are logged and returned as an unsuccessful
    ``GatewayResult``.
    """

    def __init__(
        self,
        token_service: XeroTokenService,
        accounting_client: XeroAccountingClient,
        blob_storage: LocalBlobStorage,
    ) -> None:
        self._tokens = token_service
        self._client = accounting_client
        self._blobs = blob_storage

    async def fetch_vendors(self, session: Optional[KeyValueStore] = None) -> GatewayResult:
        return await self._fetch(
            session,
            kind="vendors",
            snapshot_path=VENDORS_SNAPSHOT_PATH,
            load=self._client.list_contacts,
            project=project_vendors,
        )

    async def fetch_accounts(self, session: Optional[KeyValueStore] = None) -> GatewayResult:
        return await self._fetch(
            session,
            kind="accounts",
            snapshot_path=ACCOUNTS_SNAPSHOT_PATH,
            load=self._client.list_accounts,
            project=project_expense_accounts,
        )

    async def _fetch(
        self,
        session: Optional[KeyValueStore],
        *,
        kind: str,
        snapshot_path: str,
        load: Callable[..., Any],
        project: Callable[[List[Dict[str, Any]]], List[BaseModel]],
    ) -> GatewayResult:
        try:
            token = self._tokens.resolve_active_token(session)
            upstream = await load(access_token=token.access_token, tenant_id=token.tenant_id)
            records = project(upstream)
            snapshot = build_snapshot(kind, records)
            stored_at = self._blobs.put(snapshot_path, json.dumps(snapshot, indent=2))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Failed to fetch Xero %s: %s", kind, exc)
            return GatewayResult(success=False, error=str(exc))

        logger.info("Fetched %d Xero %s into %s", len(records), kind, stored_at)
        return GatewayResult(success=True, data=snapshot[kind], file_path=str(stored_at))


__all__ = [
    "ACCOUNTS_SNAPSHOT_PATH",
    "AccountingGatewayService",
    "VENDORS_SNAPSHOT_PATH",
    "project_expense_accounts",
    "project_vendors",
]
