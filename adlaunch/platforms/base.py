from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.errors import AdLaunchError, ExternalCallFailedError


class PlatformConfigError(AdLaunchError):
    code = "platform_not_configured"

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=503)


@dataclass(frozen=True)
class TokenSet:
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scopes: Optional[str] = None
    external_account_id: Optional[str] = None

    @property
    def expires_at(self) -> Optional[datetime]:
        if not self.expires_in:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=int(self.expires_in))


def require_setting(value: Optional[str], name: str) -> str:
    if not value:
        raise PlatformConfigError(f"{name} is required to use this ad platform.")
    return value


class PlatformHttpClient:
    """Shared async HTTP plumbing for ad platform APIs."""

    provider_name = "Platform"

    def __init__(
        self,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.PLATFORM_REQUEST_TIMEOUT_SECONDS

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    json=json,
                    headers=headers,
                )
        except httpx.RequestError as exc:
            raise ExternalCallFailedError(f"Network error while calling {self.provider_name}: {exc}") from exc

        if response.status_code >= 400:
            error_payload: Any
            try:
                error_payload = response.json()
            except ValueError:
                error_payload = {"text": response.text}
            raise ExternalCallFailedError(
                f"{self.provider_name} API call failed ({response.status_code}).",
                provider_status=response.status_code,
                error_payload=error_payload,
            )
        return response

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._send(method, url, **kwargs)
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalCallFailedError(f"{self.provider_name} API returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise ExternalCallFailedError(f"{self.provider_name} API response must be a JSON object")
        return body


class OAuthProviderClient(PlatformHttpClient, ABC):
    """OAuth operations every supported ad platform exposes."""

    platform: PlatformEnum
    # Token kind the revoke endpoint accepts; the other one is the fallback.
    revokes_refresh_token = False

    @property
    def provider_name(self) -> str:  # type: ignore[override]
        return self.platform.display_name

    @property
    def redirect_uri(self) -> str:
        return f"{settings.api_base_url}/auth/{self.platform.value}/callback"

    @abstractmethod
    def authorization_url(self, state: str) -> str:
        """Provider consent URL carrying ``state`` back to our callback."""

    @abstractmethod
    async def exchange_code(self, code: str) -> TokenSet:
        """Trade an authorization code for tokens."""

    @abstractmethod
    async def revoke_token(self, token: str) -> None:
        """Invalidate ``token`` at the provider. Raises ``ExternalCallFailedError``."""

    @staticmethod
    def _token_set_from(body: dict[str, Any], provider: str) -> TokenSet:
        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ExternalCallFailedError(f"{provider} token exchange response is missing access_token")
        refresh_token = body.get("refresh_token")
        scope = body.get("scope")
        try:
            expires_in = int(body["expires_in"]) if body.get("expires_in") is not None else None
        except (TypeError, ValueError):
            expires_in = None
        return TokenSet(
            access_token=access_token,
            refresh_token=refresh_token if isinstance(refresh_token, str) and refresh_token else None,
            expires_in=expires_in,
            scopes=scope if isinstance(scope, str) else None,
        )
