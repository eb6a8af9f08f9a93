"""Xero Accounting API client wrapper."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx


class UpstreamAPIError(Exception):
    """Raised when the Accounting API call fails or returns an error status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class XeroAccountingClient:
    """Read-only access to the contacts and chart of accounts of a tenant."""

    BASE_URL = "https://api.xero.com/api.xro/2.0"

    async def list_contacts(self, *, access_token: str, tenant_id: str) -> List[Dict[str, Any]]:
        payload = await self._get("Contacts", access_token=access_token, tenant_id=tenant_id)
        return payload.get("Contacts") or []

    async def list_accounts(self, *, access_token: str, tenant_id: str) -> List[Dict[str, Any]]:
        payload = await self._get("Accounts", access_token=access_token, tenant_id=tenant_id)
        return payload.get("Accounts") or []

    async def _get(self, resource: str, *, access_token: str, tenant_id: str) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Xero-tenant-id": tenant_id,
            "Accept": "application/json",
        }
        url = f"{self.BASE_URL}/{resource}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamAPIError(
                f"Xero {resource} request failed with status "
                f"{exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamAPIError(f"Xero {resource} request failed: {exc}") from exc
        return response.json()


__all__ = ["UpstreamAPIError", "XeroAccountingClient"]
