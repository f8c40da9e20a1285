from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ConnectionStatusOut(BaseModel):
    platform: str
    connected: bool
    connectedAt: Optional[datetime] = None
    externalAccountId: Optional[str] = None


class DisconnectResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class AuthErrorResponse(BaseModel):
    error: str
    description: Optional[str] = None


class FacebookUserInfoOut(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    profilePicture: Optional[str] = None
