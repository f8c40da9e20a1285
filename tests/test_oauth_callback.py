from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Optional

import pytest

from adlaunch.db.enums import PlatformEnum
from adlaunch.db.models import OAuthState, utcnow
from adlaunch.db.repositories import ConnectionsRepository, OAuthStatesRepository
from adlaunch.errors import ExternalCallFailedError, ValidationFailedError
from adlaunch.platforms.base import OAuthProviderClient, TokenSet
from adlaunch.services.oauth import (
    begin_authorization,
    build_state,
    handle_oauth_callback,
    parse_state,
    state_cookie_name,
)

APP = "http://localhost:3000"
ORG_ID = "org789"
USER_ID = "user_test"


class StubTikTokClient(OAuthProviderClient):
    platform = PlatformEnum.tiktok

    def __init__(self, *, fail_with: Optional[Exception] = None) -> None:
        super().__init__()
        self.fail_with = fail_with
        self.exchanged: list[str] = []

    def authorization_url(self, state: str) -> str:
        return f"https://provider.test/auth?state={state}"

    async def exchange_code(self, code: str) -> TokenSet:
        self.exchanged.append(code)
        if self.fail_with is not None:
            raise self.fail_with
        return TokenSet(access_token="tt-access", external_account_id="adv-1")

    async def revoke_token(self, token: str) -> None:
        return None


def _pending(db_session, state: str, organization_id: str = ORG_ID) -> None:
    OAuthStatesRepository(db_session).create(
        state=state,
        platform=PlatformEnum.tiktok,
        organization_id=organization_id,
        user_id=USER_ID,
    )


def _callback(db_session, client, *, code="auth-code", state=None, stored_state=None, error=None, description=None):
    return asyncio.run(
        handle_oauth_callback(
            db_session,
            platform=PlatformEnum.tiktok,
            code=code,
            state=state,
            error=error,
            error_description=description,
            stored_state=stored_state,
            client=client,
        )
    )


def test_valid_state_proceeds_to_token_exchange(db_session):
    _pending(db_session, "abc123__org789")
    client = StubTikTokClient()

    url = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")

    assert client.exchanged == ["auth-code"]
    assert url == f"{APP}/home/org789?tiktok=connected&success=1"
    record = ConnectionsRepository(db_session).find(
        user_id=USER_ID, organization_id=ORG_ID, platform=PlatformEnum.tiktok
    )
    assert record is not None
    assert record.access_token == "tt-access"
    assert record.external_account_id == "adv-1"


def test_state_without_delimiter_is_malformed(db_session):
    client = StubTikTokClient()

    url = _callback(db_session, client, state="abc123", stored_state="abc123")

    assert url == f"{APP}/auth/error?error=Invalid%20state%20parameter%20format"
    assert client.exchanged == []


def test_provider_error_is_forwarded(db_session):
    url = _callback(
        db_session,
        StubTikTokClient(),
        code=None,
        state="abc123__org789",
        stored_state="abc123__org789",
        error="access_denied",
        description="User denied access",
    )

    assert url == f"{APP}/auth/error?error=access_denied&description=User%20denied%20access"


@pytest.mark.parametrize("stored_state", [None, "other__org789"])
def test_cookie_mismatch_is_rejected(db_session, stored_state):
    _pending(db_session, "abc123__org789")
    client = StubTikTokClient()

    url = _callback(db_session, client, state="abc123__org789", stored_state=stored_state)

    assert url == f"{APP}/auth/error?error=Invalid%20state%20parameter"
    assert client.exchanged == []


def test_missing_code_is_rejected(db_session):
    url = _callback(db_session, StubTikTokClient(), code=None, state="abc123__org789", stored_state="abc123__org789")

    assert url == f"{APP}/auth/error?error=Missing%20required%20parameters"


def test_state_can_only_be_used_once(db_session):
    _pending(db_session, "abc123__org789")
    client = StubTikTokClient()

    first = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")
    second = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")

    assert first.endswith("?tiktok=connected&success=1")
    assert second == f"{APP}/auth/error?error=Invalid%20state%20parameter"
    assert client.exchanged == ["auth-code"]


def test_exchange_failure_carries_reason(db_session):
    _pending(db_session, "abc123__org789")
    client = StubTikTokClient(fail_with=ExternalCallFailedError("Authorization code expired"))

    url = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")

    assert url == f"{APP}/auth/error?error=Authorization%20code%20expired"


def test_unexpected_error_redirects_with_generic_message(db_session):
    _pending(db_session, "abc123__org789")
    client = StubTikTokClient(fail_with=RuntimeError("boom"))

    url = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")

    assert url == f"{APP}/auth/error?error=Unexpected%20error%20processing%20TikTok%20callback"


def test_begin_authorization_persists_pending_state(db_session):
    start = begin_authorization(
        db_session,
        platform=PlatformEnum.tiktok,
        organization_id=ORG_ID,
        user_id=USER_ID,
        client=StubTikTokClient(),
    )

    assert start.cookie_name == "tiktok_csrf_state"
    assert start.state.endswith("__org789")
    assert start.authorization_url == f"https://provider.test/auth?state={start.state}"
    pending = OAuthStatesRepository(db_session).pop(state=start.state, platform=PlatformEnum.tiktok)
    assert pending is not None
    assert pending.user_id == USER_ID


def test_state_helpers():
    assert parse_state("abc123__org789") == "org789"
    assert parse_state("abc123") is None
    assert parse_state("a__b__c") is None
    assert parse_state("__org789") is None
    assert state_cookie_name(PlatformEnum.linkedin) == "linkedin_csrf_state"
    with pytest.raises(ValidationFailedError):
        build_state("bad__org")


def _age_state(db_session, state: str, age: timedelta) -> None:
    record = db_session.get(OAuthState, state)
    record.created_at = utcnow() - age
    db_session.commit()


def test_expired_state_is_rejected(db_session):
    _pending(db_session, "abc123__org789")
    _age_state(db_session, "abc123__org789", timedelta(hours=1))
    client = StubTikTokClient()

    url = _callback(db_session, client, state="abc123__org789", stored_state="abc123__org789")

    assert url == f"{APP}/auth/error?error=Invalid%20state%20parameter"
    assert client.exchanged == []
    assert db_session.get(OAuthState, "abc123__org789") is None


def test_abandoned_states_are_purged(db_session):
    _pending(db_session, "old__org789")
    _pending(db_session, "fresh__org789")
    _age_state(db_session, "old__org789", timedelta(hours=1))

    removed = OAuthStatesRepository(db_session).delete_expired()

    assert removed == 1
    assert db_session.get(OAuthState, "old__org789") is None
    assert db_session.get(OAuthState, "fresh__org789") is not None
