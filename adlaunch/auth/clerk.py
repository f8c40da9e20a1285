from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx
from jose import jwk, jwt
from jose.exceptions import JWSError, JWTError
from jose.utils import base64url_decode

from adlaunch.config import settings
from adlaunch.errors import AdLaunchError, UnauthenticatedError

logger = logging.getLogger("auth.clerk")


class _JWKSCache:
    def __init__(self) -> None:
        self.jwks: Optional[Dict[str, Any]] = None
        self.cached_at: float = 0.0
        self.ttl_seconds: int = 300

    def get(self) -> Optional[Dict[str, Any]]:
        if self.jwks and (time.time() - self.cached_at) < self.ttl_seconds:
            return self.jwks
        return None

    def set(self, jwks: Optional[Dict[str, Any]]) -> None:
        self.jwks = jwks
        self.cached_at = time.time()


_cache = _JWKSCache()


def _fetch_jwks() -> Dict[str, Any]:
    cached = _cache.get()
    if cached:
        return cached
    if not settings.CLERK_JWKS_URL:
        raise AdLaunchError("CLERK_JWKS_URL is required to verify bearer tokens.", status_code=503)
    try:
        resp = httpx.get(settings.CLERK_JWKS_URL, timeout=10)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as exc:
        logger.exception("JWKS fetch failed", extra={"jwks_url": settings.CLERK_JWKS_URL})
        raise AdLaunchError("Unable to fetch Clerk JWKS", status_code=503) from exc
    _cache.set(data)
    return data


def _find_key(jwks: Dict[str, Any], kid: str) -> Optional[Dict[str, Any]]:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


def _get_public_key(token: str) -> Dict[str, Any]:
    try:
        headers = jwt.get_unverified_header(token)
    except JWTError as exc:
        logger.warning("Invalid token header", exc_info=exc)
        raise UnauthenticatedError("Invalid token") from exc
    kid = headers.get("kid")
    if not kid:
        raise UnauthenticatedError("Missing kid in token")
    key = _find_key(_fetch_jwks(), kid)
    if key is None:
        # Keys may have rotated; refetch once.
        _cache.set(None)
        key = _find_key(_fetch_jwks(), kid)
    if key is None:
        logger.warning("Signing key not found", extra={"kid": kid})
        raise UnauthenticatedError("Signing key not found")
    return key


def verify_clerk_token(token: str) -> Dict[str, Any]:
    try:
        public_key = _get_public_key(token)
        key = jwk.construct(public_key)

        message, encoded_sig = token.rsplit(".", 1)
        decoded_sig = base64url_decode(encoded_sig.encode())
        if not key.verify(message.encode(), decoded_sig):
            raise UnauthenticatedError("Invalid token signature")

        claims = jwt.decode(
            token,
            key=key.to_pem().decode(),
            algorithms=[public_key.get("alg", "RS256")],
            audience=settings.CLERK_AUDIENCE,
            issuer=settings.CLERK_JWT_ISSUER,
        )
    except (JWTError, JWSError, ValueError) as exc:
        logger.warning("Token verification failed", exc_info=exc)
        raise UnauthenticatedError("Invalid token") from exc
    logger.debug("Verified Clerk token", extra={"kid": public_key.get("kid"), "sub": claims.get("sub")})
    return claims
