from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from adlaunch.db.enums import PlatformEnum
from adlaunch.db.models import PlatformConnection, utcnow


class ConnectionsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find(
        self, *, user_id: str, organization_id: str, platform: PlatformEnum
    ) -> Optional[PlatformConnection]:
        stmt = select(PlatformConnection).where(
            PlatformConnection.user_id == user_id,
            PlatformConnection.organization_id == organization_id,
            PlatformConnection.platform == platform,
        )
        return self.session.scalars(stmt).first()

    def list_for_organization(self, *, user_id: str, organization_id: str) -> list[PlatformConnection]:
        stmt = (
            select(PlatformConnection)
            .where(
                PlatformConnection.user_id == user_id,
                PlatformConnection.organization_id == organization_id,
            )
            .order_by(PlatformConnection.platform)
        )
        return list(self.session.scalars(stmt).all())

    def upsert(
        self,
        *,
        user_id: str,
        organization_id: str,
        platform: PlatformEnum,
        access_token: Optional[str],
        refresh_token: Optional[str],
        scopes: Optional[str] = None,
        external_account_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> PlatformConnection:
        record = self.find(user_id=user_id, organization_id=organization_id, platform=platform)
        if record is None:
            record = PlatformConnection(
                user_id=user_id,
                organization_id=organization_id,
                platform=platform,
            )
            self.session.add(record)
        record.access_token = access_token
        # Providers omit the refresh token on re-consent; keep the one we have.
        if refresh_token:
            record.refresh_token = refresh_token
        record.scopes = scopes
        record.external_account_id = external_account_id
        record.expires_at = expires_at
        record.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, connection_id: str) -> bool:
        result = self.session.execute(delete(PlatformConnection).where(PlatformConnection.id == connection_id))
        self.session.commit()
        return bool(result.rowcount)
