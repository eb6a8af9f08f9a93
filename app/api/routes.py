"""
FastAPI routes for the Xero integration.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from app.clients.xero_auth import ProviderExchangeError
from app.dependencies import (
    get_accounting_gateway_service,
    get_app_settings,
    get_local_snapshot_service,
    get_session_store,
    get_xero_oauth_flow_service,
    get_xero_token_service,
)
from app.schemas import GatewayResult, OAuthCallbackResult
from app.services import (
    AuthorizationDeniedError,
    InvalidStateError,
    SnapshotNotFoundError,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _gateway_response(result: GatewayResult) -> JSONResponse:
    status_code = HTTPStatus.OK if result.success else HTTPStatus.INTERNAL_SERVER_ERROR
    return JSONResponse(content=result.to_body(), status_code=status_code)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/xero/auth/authorize")
async def start_xero_authorization(
    flow: Annotated[Any, Depends(get_xero_oauth_flow_service)],
    session: Annotated[Any, Depends(get_session_store)],
) -> RedirectResponse:
    """Issue a one-time state and send the browser to the Xero consent screen."""
    authorization_url = flow.begin_authorization(session)
    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/xero/auth/callback")
async def handle_xero_callback(
    request: Request,
    flow: Annotated[Any, Depends(get_xero_oauth_flow_service)],
    session: Annotated[Any, Depends(get_session_store)],
    settings: Annotated[Any, Depends(get_app_settings)],
    state: str | None = Query(default=None, description="OAuth state token."),
    code: str | None = Query(default=None, description="Authorization code from Xero."),
    error: str | None = Query(default=None, description="Error reported by Xero."),
    redirect: bool = Query(
        default=False,
        description="When true, redirect browser clients instead of returning JSON.",
    ),
):
    """Verify the state, exchange the code and store the resulting tokens."""
    frontend = settings.frontend_base_url
    browser_redirect = bool(frontend) and (redirect or _wants_html(request))

    try:
        await flow.complete_authorization(session, state, code, error=error)
    except InvalidStateError as exc:
        return JSONResponse(
            content={"error": "Invalid state", "details": exc.diagnostics.model_dump()},
            status_code=HTTPStatus.UNAUTHORIZED,
        )
    except AuthorizationDeniedError as exc:
        if browser_redirect:
            target = httpx.URL(str(frontend)).copy_merge_params({"errorMessage": str(exc)})
            return RedirectResponse(url=str(target), status_code=HTTPStatus.TEMPORARY_REDIRECT)
        return JSONResponse(content={"error": str(exc)}, status_code=HTTPStatus.BAD_REQUEST)
    except ProviderExchangeError as exc:
        logger.error("Xero OAuth callback failed: %s", exc)
        return JSONResponse(
            content={"error": str(exc)}, status_code=HTTPStatus.INTERNAL_SERVER_ERROR
        )

    if browser_redirect:
        return RedirectResponse(url=str(frontend), status_code=HTTPStatus.TEMPORARY_REDIRECT)

    result = OAuthCallbackResult(message="Successfully authenticated with Xero")
    return JSONResponse(content=result.model_dump())


@router.api_route("/xero/auth/disconnect", methods=["GET", "POST"])
async def disconnect_xero(
    token_service: Annotated[Any, Depends(get_xero_token_service)],
    session: Annotated[Any, Depends(get_session_store)],
) -> dict:
    """Forget the stored tokens. Succeeds whether or not a token existed."""
    token_service.delete(session)
    return {"success": True, "message": "Successfully disconnected from Xero"}


@router.get("/xero/vendors")
async def get_vendors(
    gateway: Annotated[Any, Depends(get_accounting_gateway_service)],
    session: Annotated[Any, Depends(get_session_store)],
) -> JSONResponse:
    """Fetch suppliers from Xero and refresh the local vendor snapshot."""
    return _gateway_response(await gateway.fetch_vendors(session))


@router.get("/xero/accounts")
async def get_accounts(
    gateway: Annotated[Any, Depends(get_accounting_gateway_service)],
    session: Annotated[Any, Depends(get_session_store)],
) -> JSONResponse:
    """Fetch expense accounts from Xero and refresh the local account snapshot."""
    return _gateway_response(await gateway.fetch_accounts(session))


@router.get("/xero/local/vendors")
async def get_local_vendors(
    snapshots: Annotated[Any, Depends(get_local_snapshot_service)],
) -> JSONResponse:
    try:
        return JSONResponse(content=snapshots.read_vendors())
    except SnapshotNotFoundError as exc:
        return JSONResponse(content={"error": str(exc)}, status_code=HTTPStatus.NOT_FOUND)


@router.get("/xero/local/accounts")
async def get_local_accounts(
    snapshots: Annotated[Any, Depends(get_local_snapshot_service)],
) -> JSONResponse:
    try:
        return JSONResponse(content=snapshots.read_accounts())
    except SnapshotNotFoundError as exc:
        return JSONResponse(content={"error": str(exc)}, status_code=HTTPStatus.NOT_FOUND)


__all__ = ["router"]
