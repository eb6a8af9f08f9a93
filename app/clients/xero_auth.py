"""
Xero OAuth utilities.

These helpers build the consent URL, exchange authorization codes and look up
the organisations (tenants) an access token is connected to.
"""

from __future__ import annotations

from typing import Any, Dict, List
from urllib.parse import urlencode

import httpx

from fastapi import status

from app.core.config import XeroSettings


class ProviderExchangeError(Exception):
    """Raised when the token endpoint or identity lookup fails."""


class XeroOAuthClient:
    """Build Xero authorization URLs and exchange authorization codes."""

    AUTHORIZE_URL = "https://login.xero.com/identity/connect/authorize"
    TOKEN_URL = "https://identity.xero.com/connect/token"
    CONNECTIONS_URL = "https://api.xero.com/connections"

    def __init__(self, xero_settings: XeroSettings) -> None:
        self._xero = xero_settings

    def build_authorization_url(self, state: str) -> str:
        """Construct the Xero OAuth consent URL."""
        params = {
            "response_type": "code",
            "client_id": self._xero.client_id,
            "redirect_uri": str(self._xero.redirect_uri),
            "scope": self._xero.scopes,
            "state": state,
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Returns the raw token payload (``access_token``, ``refresh_token``,
        ``expires_in`` and, for OpenID scopes, ``id_token``).
        """
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": str(self._xero.redirect_uri),
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data=payload,
                    auth=(self._xero.client_id, self._xero.client_secret),
                )
        except httpx.HTTPError as exc:
            raise ProviderExchangeError(f"Token request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise ProviderExchangeError(_error_message(response))

        token_payload = _json_body(response)
        if not isinstance(token_payload, dict):
            raise ProviderExchangeError("Unexpected token payload returned from Xero.")
        if not token_payload.get("access_token") or not token_payload.get("expires_in"):
            raise ProviderExchangeError("Incomplete token payload returned from Xero.")
        try:
            token_payload["expires_in"] = int(token_payload["expires_in"])
        except (TypeError, ValueError) as exc:
            raise ProviderExchangeError("Xero returned a non-numeric expires_in.") from exc
        return token_payload

    async def get_connections(self, access_token: str) -> List[Dict[str, Any]]:
        """Return the tenant connections authorised for ``access_token``."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.CONNECTIONS_URL, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderExchangeError(f"Connections request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise ProviderExchangeError(_error_message(response))
        connections = _json_body(response)
        if not isinstance(connections, list) or not all(
            isinstance(connection, dict) for connection in connections
        ):
            raise ProviderExchangeError("Unexpected connections payload returned from Xero.")
        return connections


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderExchangeError("Xero returned a response that is not JSON.") from exc


def _error_message(response: httpx.Response) -> str:
    """Prefer the OAuth ``error``/``error_description`` fields over raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        description = body.get("error_description") or body.get("Detail")
        error = body.get("error") or body.get("Title")
        if error and description:
            return f"{error}: {description}"
        if error or description:
            return str(error or description)
    return response.text


__all__ = ["ProviderExchangeError", "XeroOAuthClient"]
