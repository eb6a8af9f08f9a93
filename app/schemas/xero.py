"""
Pydantic models for the vendor and account projections served to the client.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PayableBalance(BaseModel):
    """Accounts-payable position of a supplier."""

    model_config = ConfigDict(populate_by_name=True)

    outstanding: float = 0.0
    over_due: float = Field(0.0, alias="overDue")


class VendorBalances(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    accounts_payable: PayableBalance = Field(
        default_factory=PayableBalance, alias="accountsPayable"
    )


class VendorRecord(BaseModel):
    """Supplier projection of a Xero contact."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    is_supplier: bool = Field(False, alias="isSupplier")
    balances: VendorBalances = Field(default_factory=VendorBalances)

    @classmethod
    def from_xero(cls, contact: Dict[str, Any]) -> "VendorRecord":
        payable = (contact.get("Balances") or {}).get("AccountsPayable") or {}
        return cls(
            id=contact.get("ContactID"),
            name=contact.get("Name"),
            status=contact.get("ContactStatus"),
            is_supplier=bool(contact.get("IsSupplier", False)),
            balances=VendorBalances(
                accounts_payable=PayableBalance(
                    outstanding=payable.get("Outstanding") or 0,
                    over_due=payable.get("Overdue") or 0,
                )
            ),
        )


class AccountRecord(BaseModel):
    """Chart-of-accounts entry."""

    id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_xero(cls, account: Dict[str, Any]) -> "AccountRecord":
        return cls(
            id=account.get("AccountID"),
            code=account.get("Code"),
            name=account.get("Name"),
            type=account.get("Type"),
            status=account.get("Status"),
            description=account.get("Description"),
        )


def build_snapshot(kind: str, records: List[BaseModel]) -> Dict[str, Any]:
    """Assemble the stored snapshot document for ``kind`` ("vendors"/"accounts")."""
    return {
        "last_updated": datetime.now(timezone.utc).isoformat(),
        kind: [record.model_dump(by_alias=True) for record in records],
    }


class GatewayResult(BaseModel):
    """Outcome of a token-gated fetch; the route layer picks the status code."""

    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    file_path: Optional[str] = None
    error: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data or [], "file_path": self.file_path}
        return {"success": False, "error": self.error}


__all__ = [
    "AccountRecord",
    "GatewayResult",
    "PayableBalance",
    "VendorBalances",
    "VendorRecord",
    "build_snapshot",
]
