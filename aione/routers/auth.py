"""Authentication and history endpoints backed by Supabase."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from aione.dependencies import Services, get_services
from aione.errors import AuthFailure, BackendNotConfigured
from aione.models.auth import (
    AuthSession,
    Credentials,
    HistoryRecord,
    HistoryRequest,
    ModuleTag,
    SignOutRequest,
    UserInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

_bearer = HTTPBearer(auto_error=False)


def _access_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing bearer token.")
    return credentials.credentials


def _not_configured(exc: BackendNotConfigured) -> HTTPException:
    return HTTPException(status_code=503, detail=str(exc))


@router.post("/auth/signup", response_model=AuthSession, summary="Create an account")
async def sign_up(body: Credentials, services: Services = Depends(get_services)) -> AuthSession:
    try:
        return services.auth.sign_up(body.email, body.password)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/auth/signin", response_model=AuthSession, summary="Sign in with e-mail and password")
async def sign_in(body: Credentials, services: Services = Depends(get_services)) -> AuthSession:
    try:
        return services.auth.sign_in(body.email, body.password)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.get("/auth/session", response_model=UserInfo, summary="Current user for a bearer token")
async def session(
    token: str = Depends(_access_token),
    services: Services = Depends(get_services),
) -> UserInfo:
    try:
        return services.auth.get_user(token)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.post("/auth/signout", status_code=204, summary="Sign out a session")
async def sign_out(body: SignOutRequest, services: Services = Depends(get_services)) -> None:
    try:
        services.auth.sign_out(body.access_token, body.refresh_token)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.get("/history", response_model=List[HistoryRecord], summary="List the user's history")
async def list_history(
    module: Optional[ModuleTag] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    token: str = Depends(_access_token),
    services: Services = Depends(get_services),
) -> List[HistoryRecord]:
    try:
        return services.auth.list_history(token, module=module, limit=limit)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=401, detail=str(exc))


@router.post("/history", response_model=HistoryRecord, status_code=201, summary="Record a history entry")
async def add_history(
    body: HistoryRequest,
    token: str = Depends(_access_token),
    services: Services = Depends(get_services),
) -> HistoryRecord:
    try:
        return services.auth.add_history(token, body.module, body.action, body.details)
    except BackendNotConfigured as exc:
        raise _not_configured(exc)
    except AuthFailure as exc:
        raise HTTPException(status_code=401, detail=str(exc))
