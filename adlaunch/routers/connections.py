from __future__ import annotations

from typing import Optional, cast

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from adlaunch.auth.dependencies import AuthContext, get_current_user, get_optional_user
from adlaunch.db.deps import get_session
from adlaunch.db.enums import PlatformEnum
from adlaunch.platforms.base import OAuthProviderClient
from adlaunch.platforms.facebook import FacebookOAuthClient
from adlaunch.platforms.registry import OAuthClientRegistry, get_oauth_client, get_oauth_registry
from adlaunch.schemas.connections import ConnectionStatusOut, DisconnectResponse, FacebookUserInfoOut
from adlaunch.services.connections import disconnect_platform, list_connections, require_connection
from adlaunch.services.invalidation import PathRevalidator, get_revalidator

router = APIRouter(prefix="/organizations/{organization_id}/connections", tags=["connections"])


@router.get("", response_model=list[ConnectionStatusOut])
def get_connections(
    organization_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list[ConnectionStatusOut]:
    return [
        ConnectionStatusOut(
            platform=status.platform.value,
            connected=status.connected,
            connectedAt=status.connected_at,
            externalAccountId=status.external_account_id,
        )
        for status in list_connections(session, organization_id=organization_id, user_id=auth.user_id)
    ]


@router.post("/{platform}/disconnect", response_model=DisconnectResponse)
async def disconnect(
    organization_id: str,
    platform: PlatformEnum,
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
    client: OAuthProviderClient = Depends(get_oauth_client),
    invalidator: PathRevalidator = Depends(get_revalidator),
) -> DisconnectResponse:
    result = await disconnect_platform(
        session,
        platform=platform,
        organization_id=organization_id,
        user=auth,
        client=client,
        invalidator=invalidator,
    )
    return DisconnectResponse(success=result.success, error=result.error)


def get_facebook_client(registry: OAuthClientRegistry = Depends(get_oauth_registry)) -> FacebookOAuthClient:
    return cast(FacebookOAuthClient, registry.get(PlatformEnum.facebook))


@router.get("/facebook/account", response_model=FacebookUserInfoOut)
async def get_facebook_account(
    organization_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
    client: FacebookOAuthClient = Depends(get_facebook_client),
) -> FacebookUserInfoOut:
    connection = require_connection(
        session,
        user_id=auth.user_id,
        organization_id=organization_id,
        platform=PlatformEnum.facebook,
    )
    info = await client.fetch_user_info(connection.access_token)
    return FacebookUserInfoOut(id=info.id, name=info.name, email=info.email, profilePicture=info.profile_picture)
