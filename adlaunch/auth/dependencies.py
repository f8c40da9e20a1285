from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from adlaunch.auth.clerk import verify_clerk_token
from adlaunch.errors import UnauthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    user_id: str


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthContext]:
    if credentials is None or not credentials.credentials:
        return None
    claims = verify_clerk_token(credentials.credentials)
    user_id = claims.get("sub")
    if not user_id:
        raise UnauthenticatedError("Invalid token claims")
    return AuthContext(user_id=user_id)


def get_current_user(user: Optional[AuthContext] = Depends(get_optional_user)) -> AuthContext:
    if user is None:
        raise UnauthenticatedError("Missing bearer token")
    return user
