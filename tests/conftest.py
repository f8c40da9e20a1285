import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_adlaunch.db")
os.environ.setdefault("APP_BASE_URL", "http://localhost:3000")
os.environ.setdefault("API_BASE_URL", "http://localhost:8000")
os.environ.setdefault("DEFAULT_CURRENCY", "USD")
os.environ.setdefault("GOOGLE_CLIENT_ID", "google-client")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "google-secret")
os.environ.setdefault("FACEBOOK_APP_ID", "facebook-app")
os.environ.setdefault("FACEBOOK_APP_SECRET", "facebook-secret")
os.environ.setdefault("LINKEDIN_CLIENT_ID", "linkedin-client")
os.environ.setdefault("LINKEDIN_CLIENT_SECRET", "linkedin-secret")
os.environ.setdefault("TIKTOK_APP_ID", "tiktok-app")
os.environ.setdefault("TIKTOK_APP_SECRET", "tiktok-secret")

from fastapi.testclient import TestClient  # noqa: E402

from adlaunch.auth.dependencies import AuthContext, get_current_user, get_optional_user  # noqa: E402
from adlaunch.db.base import Base, SessionLocal, engine  # noqa: E402
from adlaunch.db import models  # noqa: E402,F401
from adlaunch.db.deps import get_session  # noqa: E402
from adlaunch.main import app  # noqa: E402
from adlaunch.services.invalidation import PathRevalidator, get_revalidator  # noqa: E402

TEST_USER_ID = "user_test"
TEST_ORG_ID = "org789"


@pytest.fixture()
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def auth_context() -> AuthContext:
    return AuthContext(user_id=TEST_USER_ID)


@pytest.fixture()
def revalidator() -> PathRevalidator:
    return PathRevalidator()


@pytest.fixture()
def override_dependencies(db_session, auth_context, revalidator):
    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    def get_user_override():
        return auth_context

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_current_user] = get_user_override
    app.dependency_overrides[get_optional_user] = get_user_override
    app.dependency_overrides[get_revalidator] = lambda: revalidator
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def api_client(override_dependencies):
    with TestClient(app) as client:
        yield client
