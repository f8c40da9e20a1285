from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from sqlalchemy.orm import Session

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.db.repositories import OAuthStatesRepository
from adlaunch.errors import AdLaunchError, ValidationFailedError
from adlaunch.platforms.base import OAuthProviderClient
from adlaunch.services.connections import dashboard_path, store_connection

logger = logging.getLogger("oauth.callback")

# State format: <nonce>__<organizationId>
STATE_DELIMITER = "__"

INVALID_STATE = "Invalid state parameter"
INVALID_STATE_FORMAT = "Invalid state parameter format"
MISSING_PARAMETERS = "Missing required parameters"
EXCHANGE_FAILED = "Failed to exchange token"


@dataclass(frozen=True)
class AuthorizationStart:
    authorization_url: str
    state: str
    cookie_name: str


def state_cookie_name(platform: PlatformEnum) -> str:
    return f"{PlatformEnum(platform).value}_csrf_state"


def build_state(organization_id: str) -> str:
    if not organization_id or STATE_DELIMITER in organization_id:
        raise ValidationFailedError("Organization id cannot be encoded into OAuth state")
    return f"{uuid.uuid4().hex}{STATE_DELIMITER}{organization_id}"


def parse_state(state: str) -> Optional[str]:
    """Return the organization id carried by ``state``, or None when malformed."""
    parts = state.split(STATE_DELIMITER)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[1]


def _quote(value: str) -> str:
    return quote(value, safe="")


def error_redirect(error: str, description: Optional[str] = None) -> str:
    url = f"{settings.app_base_url}/auth/error?error={_quote(error)}"
    if description is not None:
        url += f"&description={_quote(description)}"
    return url


def success_redirect(platform: PlatformEnum, organization_id: str) -> str:
    return (
        f"{settings.app_base_url}{dashboard_path(_quote(organization_id))}"
        f"?{PlatformEnum(platform).value}=connected&success=1"
    )


def begin_authorization(
    session: Session,
    *,
    platform: PlatformEnum,
    organization_id: str,
    user_id: str,
    client: OAuthProviderClient,
) -> AuthorizationStart:
    platform = PlatformEnum(platform)
    state = build_state(organization_id)
    authorization_url = client.authorization_url(state)
    states = OAuthStatesRepository(session)
    states.delete_expired()
    states.create(
        state=state,
        platform=platform,
        organization_id=organization_id,
        user_id=user_id,
    )
    logger.info(
        "Starting OAuth authorization",
        extra={"platform": platform.value, "organization_id": organization_id, "user_id": user_id},
    )
    return AuthorizationStart(
        authorization_url=authorization_url,
        state=state,
        cookie_name=state_cookie_name(platform),
    )


async def handle_oauth_callback(
    session: Session,
    *,
    platform: PlatformEnum,
    code: Optional[str],
    state: Optional[str],
    error: Optional[str],
    error_description: Optional[str],
    stored_state: Optional[str],
    client: OAuthProviderClient,
) -> str:
    """Validate a provider callback, store the tokens and return the redirect URL.

    Every outcome is a redirect: the dashboard on success, ``/auth/error`` with
    a reason otherwise.
    """
    platform = PlatformEnum(platform)
    try:
        logger.info(
            "OAuth callback received",
            extra={
                "platform": platform.value,
                "code_present": bool(code),
                "state": state,
                "provider_error": error,
            },
        )
        if error:
            logger.error(
                "%s auth error",
                platform.display_name,
                extra={"provider_error": error, "description": error_description},
            )
            return error_redirect(error, error_description or "")

        if not stored_state or stored_state != state:
            logger.error("OAuth state mismatch", extra={"platform": platform.value})
            return error_redirect(INVALID_STATE)

        if not code or not state:
            logger.error("Authorization code or state missing from callback", extra={"platform": platform.value})
            return error_redirect(MISSING_PARAMETERS)

        organization_id = parse_state(state)
        if organization_id is None:
            logger.error("Invalid state format, missing organization id", extra={"platform": platform.value})
            return error_redirect(INVALID_STATE_FORMAT)

        pending = OAuthStatesRepository(session).pop(state=state, platform=platform)
        if pending is None or pending.organization_id != organization_id:
            logger.error("Unknown or already used OAuth state", extra={"platform": platform.value})
            return error_redirect(INVALID_STATE)

        try:
            tokens = await client.exchange_code(code)
        except AdLaunchError as exc:
            logger.warning(
                "%s token exchange failed",
                platform.display_name,
                extra={"organization_id": organization_id, "error": str(exc)},
            )
            return error_redirect(str(exc) or EXCHANGE_FAILED)

        store_connection(
            session,
            platform=platform,
            organization_id=organization_id,
            user_id=pending.user_id,
            tokens=tokens,
        )
        return success_redirect(platform, organization_id)
    except Exception:
        logger.exception("Error in %s callback handler", platform.display_name)
        return error_redirect(f"Unexpected error processing {platform.display_name} callback")
