from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from adlaunch.config import settings
from adlaunch.db.enums import PlatformEnum
from adlaunch.db.models import OAuthState, utcnow


@dataclass(frozen=True)
class PendingOAuthState:
    state: str
    platform: PlatformEnum
    organization_id: str
    user_id: str


def _state_max_age() -> timedelta:
    return timedelta(seconds=settings.OAUTH_STATE_COOKIE_MAX_AGE_SECONDS)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class OAuthStatesRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, *, state: str, platform: PlatformEnum, organization_id: str, user_id: str) -> PendingOAuthState:
        record = OAuthState(
            state=state,
            platform=platform,
            organization_id=organization_id,
            user_id=user_id,
        )
        self.session.add(record)
        self.session.commit()
        return PendingOAuthState(
            state=state,
            platform=platform,
            organization_id=organization_id,
            user_id=user_id,
        )

    def pop(
        self,
        *,
        state: str,
        platform: PlatformEnum,
        now: Optional[datetime] = None,
    ) -> Optional[PendingOAuthState]:
        """Fetch and delete a pending state so it can only be used once.

        States older than the state cookie's max age are deleted and treated
        as unknown.
        """
        record = self.session.get(OAuthState, state)
        if record is None:
            return None
        pending = PendingOAuthState(
            state=record.state,
            platform=record.platform,
            organization_id=record.organization_id,
            user_id=record.user_id,
        )
        expired = _as_utc(record.created_at) < (now or utcnow()) - _state_max_age()
        self.session.delete(record)
        self.session.commit()
        if expired or pending.platform != platform:
            return None
        return pending

    def delete_expired(self, *, now: Optional[datetime] = None) -> int:
        """Remove states from abandoned authorizations; returns the row count."""
        cutoff = (now or utcnow()) - _state_max_age()
        result = self.session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        self.session.commit()
        return result.rowcount or 0
