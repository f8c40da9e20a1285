from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import ORJSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from adlaunch.auth.dependencies import AuthContext, get_current_user
from adlaunch.config import settings
from adlaunch.db.deps import get_session
from adlaunch.db.enums import PlatformEnum
from adlaunch.platforms.base import OAuthProviderClient
from adlaunch.platforms.registry import get_oauth_client
from adlaunch.schemas.connections import AuthErrorResponse
from adlaunch.services.oauth import begin_authorization, handle_oauth_callback, state_cookie_name

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/error", response_model=AuthErrorResponse)
def auth_error(error: str = "Unknown error", description: Optional[str] = None) -> AuthErrorResponse:
    return AuthErrorResponse(error=error, description=description or None)


@router.get("/{platform}/connect")
def connect_platform(
    platform: PlatformEnum,
    organization_id: str = Query(..., alias="organizationId", min_length=1),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
    client: OAuthProviderClient = Depends(get_oauth_client),
) -> ORJSONResponse:
    start = begin_authorization(
        session,
        platform=platform,
        organization_id=organization_id,
        user_id=auth.user_id,
        client=client,
    )
    response = ORJSONResponse({"authorizationUrl": start.authorization_url})
    response.set_cookie(
        start.cookie_name,
        start.state,
        max_age=settings.OAUTH_STATE_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    return response


@router.get("/{platform}/callback")
async def oauth_callback(
    platform: PlatformEnum,
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    error_description: Optional[str] = None,
    session: Session = Depends(get_session),
    client: OAuthProviderClient = Depends(get_oauth_client),
) -> RedirectResponse:
    cookie_name = state_cookie_name(platform)
    redirect_url = await handle_oauth_callback(
        session,
        platform=platform,
        code=code,
        state=state,
        error=error,
        error_description=error_description,
        stored_state=request.cookies.get(cookie_name),
        client=client,
    )
    response = RedirectResponse(url=redirect_url, status_code=302)
    response.delete_cookie(cookie_name)
    return response
