from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    APP_BASE_URL: str = "http://localhost:3000"
    API_BASE_URL: str = "http://localhost:8000"
    DATABASE_URL: str = "sqlite:///./adlaunch.db"
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    CLERK_JWT_ISSUER: str | None = None
    CLERK_JWKS_URL: str | None = None
    CLERK_AUDIENCE: list[str] = ["backend"]

    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_OAUTH_SCOPES: str = "https://www.googleapis.com/auth/adwords"

    FACEBOOK_APP_ID: str | None = None
    FACEBOOK_APP_SECRET: str | None = None
    FACEBOOK_OAUTH_SCOPES: str = "ads_management,ads_read,business_management"
    META_GRAPH_API_VERSION: str = "v21.0"
    META_GRAPH_API_BASE_URL: str = "https://graph.facebook.com"

    LINKEDIN_CLIENT_ID: str | None = None
    LINKEDIN_CLIENT_SECRET: str | None = None
    LINKEDIN_OAUTH_SCOPES: str = "r_ads,rw_ads,r_basicprofile"
    LINKEDIN_API_VERSION: str = "202509"

    TIKTOK_APP_ID: str | None = None
    TIKTOK_APP_SECRET: str | None = None
    TIKTOK_API_VERSION: str = "v1.3"

    PLATFORM_REQUEST_TIMEOUT_SECONDS: float = 20.0
    OAUTH_STATE_COOKIE_MAX_AGE_SECONDS: int = 600

    DEFAULT_CURRENCY: str = "USD"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("CLERK_AUDIENCE", mode="before")
    @classmethod
    def split_audience(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [aud.strip() for aud in value.split(",") if aud.strip()]
        return value

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def validate_currency(cls, value: str) -> str:
        cleaned = value.strip().upper()
        if len(cleaned) != 3 or not cleaned.isalpha():
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter ISO 4217 code")
        return cleaned

    @property
    def app_base_url(self) -> str:
        return self.APP_BASE_URL.rstrip("/")

    @property
    def api_base_url(self) -> str:
        return self.API_BASE_URL.rstrip("/")

    @property
    def secure_cookies(self) -> bool:
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
