from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from adlaunch.auth.dependencies import AuthContext
from adlaunch.db.enums import PlatformEnum
from adlaunch.db.models import PlatformConnection
from adlaunch.db.repositories import ConnectionsRepository
from adlaunch.errors import AdLaunchError, NotFoundError, UnauthenticatedError
from adlaunch.platforms.base import OAuthProviderClient, TokenSet
from adlaunch.services.invalidation import PathRevalidator

logger = logging.getLogger("connections.manager")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class DisconnectResult:
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class ConnectionStatus:
    platform: PlatformEnum
    connected: bool
    connected_at: Optional[datetime] = None
    external_account_id: Optional[str] = None


def dashboard_path(organization_id: str) -> str:
    return f"/home/{organization_id}"


async def _revoke_best_effort(client: OAuthProviderClient, connection: PlatformConnection) -> None:
    if client.revokes_refresh_token:
        token = connection.refresh_token or connection.access_token
    else:
        token = connection.access_token or connection.refresh_token
    platform = client.platform.display_name
    if not token:
        logger.warning("No token available for revocation", extra={"platform": platform})
        return
    try:
        await client.revoke_token(token)
    except AdLaunchError as exc:
        # The local record is removed either way.
        logger.warning(
            "%s token revocation may have failed",
            platform,
            extra={"connection_id": connection.id, "error": str(exc)},
        )
        return
    logger.info("%s token revoked successfully", platform, extra={"connection_id": connection.id})


async def disconnect_platform(
    session: Session,
    *,
    platform: PlatformEnum,
    organization_id: str,
    user: Optional[AuthContext],
    client: OAuthProviderClient,
    invalidator: PathRevalidator,
) -> DisconnectResult:
    """Revoke the stored token with the provider and delete the local connection.

    Revocation is best effort. Once this returns success no credential for
    (user, organization, platform) remains locally, whatever the provider said.
    """
    platform = PlatformEnum(platform)
    try:
        if user is None:
            raise UnauthenticatedError()

        repo = ConnectionsRepository(session)
        connection = repo.find(user_id=user.user_id, organization_id=organization_id, platform=platform)
        if connection is None:
            raise NotFoundError(f"{platform.display_name} connection not found")

        await _revoke_best_effort(client, connection)

        try:
            repo.delete(connection.id)
        except SQLAlchemyError as exc:
            session.rollback()
            raise AdLaunchError(f"Error deleting {platform.display_name} connection: {exc}") from exc

        invalidator.revalidate_path(dashboard_path(organization_id))
        logger.info(
            "Disconnected platform",
            extra={"platform": platform.value, "organization_id": organization_id, "user_id": user.user_id},
        )
        return DisconnectResult(success=True)
    except AdLaunchError as exc:
        logger.warning(
            "Error disconnecting %s",
            platform.display_name,
            extra={"organization_id": organization_id, "error": str(exc)},
        )
        return DisconnectResult(success=False, error=str(exc), code=exc.code)
    except Exception:
        logger.exception("Error disconnecting %s", platform.display_name, extra={"organization_id": organization_id})
        return DisconnectResult(success=False, error=UNEXPECTED_ERROR_MESSAGE, code=AdLaunchError.code)


def store_connection(
    session: Session,
    *,
    platform: PlatformEnum,
    organization_id: str,
    user_id: str,
    tokens: TokenSet,
) -> PlatformConnection:
    record = ConnectionsRepository(session).upsert(
        user_id=user_id,
        organization_id=organization_id,
        platform=PlatformEnum(platform),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        scopes=tokens.scopes,
        external_account_id=tokens.external_account_id,
        expires_at=tokens.expires_at,
    )
    logger.info(
        "Stored platform connection",
        extra={"platform": record.platform.value, "organization_id": organization_id, "user_id": user_id},
    )
    return record


def list_connections(session: Session, *, organization_id: str, user_id: str) -> list[ConnectionStatus]:
    """One status entry per supported platform, connected or not."""
    records = {
        record.platform: record
        for record in ConnectionsRepository(session).list_for_organization(
            user_id=user_id, organization_id=organization_id
        )
    }
    statuses: list[ConnectionStatus] = []
    for platform in PlatformEnum:
        record = records.get(platform)
        statuses.append(
            ConnectionStatus(
                platform=platform,
                connected=record is not None,
                connected_at=record.created_at if record else None,
                external_account_id=record.external_account_id if record else None,
            )
        )
    return statuses


def require_connection(
    session: Session, *, user_id: str, organization_id: str, platform: PlatformEnum
) -> PlatformConnection:
    connection = ConnectionsRepository(session).find(
        user_id=user_id, organization_id=organization_id, platform=platform
    )
    if connection is None or not connection.access_token:
        raise NotFoundError(f"{PlatformEnum(platform).display_name} connection not found")
    return connection
