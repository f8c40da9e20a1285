from __future__ import annotations

import asyncio
import json

import httpx
from sqlalchemy.exc import SQLAlchemyError

from adlaunch.auth.dependencies import AuthContext
from adlaunch.db.enums import PlatformEnum
from adlaunch.db.repositories import ConnectionsRepository
from adlaunch.platforms.base import TokenSet
from adlaunch.platforms.google import GOOGLE_REVOKE_URL, GoogleOAuthClient
from adlaunch.platforms.tiktok import TikTokOAuthClient
from adlaunch.services.connections import disconnect_platform, list_connections, store_connection
from adlaunch.services.invalidation import PathRevalidator

ORG_ID = "org789"
USER = AuthContext(user_id="user_test")


def _seed(db_session, *, refresh_token="refresh-token", access_token="access-token"):
    return ConnectionsRepository(db_session).upsert(
        user_id=USER.user_id,
        organization_id=ORG_ID,
        platform=PlatformEnum.google,
        access_token=access_token,
        refresh_token=refresh_token,
    )


def _google_client(status_code: int, sink: list[httpx.Request]) -> GoogleOAuthClient:
    def handler(request: httpx.Request) -> httpx.Response:
        sink.append(request)
        return httpx.Response(status_code, text="" if status_code < 400 else "backend error")

    return GoogleOAuthClient(transport=httpx.MockTransport(handler))


def _disconnect(db_session, client, revalidator, user=USER):
    return asyncio.run(
        disconnect_platform(
            db_session,
            platform=PlatformEnum.google,
            organization_id=ORG_ID,
            user=user,
            client=client,
            invalidator=revalidator,
        )
    )


def test_disconnect_revokes_refresh_token_and_deletes_record(db_session):
    _seed(db_session)
    requests: list[httpx.Request] = []
    revalidator = PathRevalidator()

    result = _disconnect(db_session, _google_client(200, requests), revalidator)

    assert result.success is True
    assert result.error is None
    assert len(requests) == 1
    assert str(requests[0].url) == GOOGLE_REVOKE_URL
    assert requests[0].content == b"token=refresh-token"
    assert revalidator.revalidated == [f"/home/{ORG_ID}"]
    repo = ConnectionsRepository(db_session)
    assert repo.find(user_id=USER.user_id, organization_id=ORG_ID, platform=PlatformEnum.google) is None


def test_disconnect_falls_back_to_access_token(db_session):
    _seed(db_session, refresh_token=None)
    requests: list[httpx.Request] = []

    _disconnect(db_session, _google_client(200, requests), PathRevalidator())

    assert requests[0].content == b"token=access-token"


def test_revocation_server_error_still_deletes_record(db_session):
    _seed(db_session)
    revalidator = PathRevalidator()

    result = _disconnect(db_session, _google_client(500, []), revalidator)

    assert result.success is True
    assert revalidator.revalidated == [f"/home/{ORG_ID}"]
    repo = ConnectionsRepository(db_session)
    assert repo.find(user_id=USER.user_id, organization_id=ORG_ID, platform=PlatformEnum.google) is None


def test_revocation_network_error_still_deletes_record(db_session):
    _seed(db_session)

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = GoogleOAuthClient(transport=httpx.MockTransport(handler))

    result = _disconnect(db_session, client, PathRevalidator())

    assert result.success is True


def test_second_disconnect_reports_not_found(db_session):
    _seed(db_session)
    revalidator = PathRevalidator()

    first = _disconnect(db_session, _google_client(200, []), revalidator)
    second = _disconnect(db_session, _google_client(200, []), revalidator)

    assert first.success is True
    assert second.success is False
    assert second.error == "Google connection not found"
    assert second.code == "not_found"
    assert revalidator.revalidated == [f"/home/{ORG_ID}"]


def test_disconnect_requires_user(db_session):
    _seed(db_session)
    requests: list[httpx.Request] = []

    result = _disconnect(db_session, _google_client(200, requests), PathRevalidator(), user=None)

    assert result.success is False
    assert result.error == "User not authenticated"
    assert requests == []


def test_delete_failure_is_escalated(db_session, monkeypatch):
    _seed(db_session)
    revalidator = PathRevalidator()

    def failing_delete(self, connection_id):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(ConnectionsRepository, "delete", failing_delete)

    result = _disconnect(db_session, _google_client(200, []), revalidator)

    assert result.success is False
    assert result.error.startswith("Error deleting Google connection:")
    assert revalidator.revalidated == []


def test_store_connection_keeps_one_record_per_platform(db_session):
    store_connection(
        db_session,
        platform=PlatformEnum.linkedin,
        organization_id=ORG_ID,
        user_id=USER.user_id,
        tokens=TokenSet(access_token="first", refresh_token="refresh-1", expires_in=3600),
    )
    record = store_connection(
        db_session,
        platform=PlatformEnum.linkedin,
        organization_id=ORG_ID,
        user_id=USER.user_id,
        tokens=TokenSet(access_token="second"),
    )

    records = ConnectionsRepository(db_session).list_for_organization(user_id=USER.user_id, organization_id=ORG_ID)
    assert len(records) == 1
    assert record.access_token == "second"
    assert record.refresh_token == "refresh-1"


def test_list_connections_reports_every_platform(db_session):
    _seed(db_session)

    statuses = {status.platform: status for status in list_connections(db_session, organization_id=ORG_ID, user_id=USER.user_id)}

    assert set(statuses) == set(PlatformEnum)
    assert statuses[PlatformEnum.google].connected is True
    assert statuses[PlatformEnum.tiktok].connected is False


def test_providers_revoking_access_tokens_are_sent_the_access_token(db_session):
    ConnectionsRepository(db_session).upsert(
        user_id=USER.user_id,
        organization_id=ORG_ID,
        platform=PlatformEnum.tiktok,
        access_token="access-token",
        refresh_token="refresh-token",
    )
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"code": 0, "message": "OK"})

    result = asyncio.run(
        disconnect_platform(
            db_session,
            platform=PlatformEnum.tiktok,
            organization_id=ORG_ID,
            user=USER,
            client=TikTokOAuthClient(transport=httpx.MockTransport(handler)),
            invalidator=PathRevalidator(),
        )
    )

    assert result.success is True
    assert json.loads(requests[0].content)["access_token"] == "access-token"
