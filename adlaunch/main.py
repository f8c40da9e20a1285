import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from adlaunch.config import settings
from adlaunch.db.base import init_db, session_scope
from adlaunch.db.repositories import OAuthStatesRepository
from adlaunch.errors import AdLaunchError
from adlaunch.routers import connections, linkedin, oauth

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    init_db()
    with session_scope() as session:
        removed = OAuthStatesRepository(session).delete_expired()
    if removed:
        logger.info("Removed expired OAuth states", extra={"count": removed})
    yield


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    app = FastAPI(
        title="AdLaunch API",
        default_response_class=ORJSONResponse,
        lifespan=_app_lifespan,
    )

    allow_origins = sorted(set(settings.BACKEND_CORS_ORIGINS))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AdLaunchError)
    async def adlaunch_error_handler(_request: Request, exc: AdLaunchError) -> ORJSONResponse:
        if exc.status_code >= 500:
            logger.warning("Request failed", extra={"code": exc.code, "error": str(exc)})
        return ORJSONResponse(status_code=exc.status_code, content={"detail": str(exc), "code": exc.code})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(oauth.router)
    app.include_router(connections.router)
    app.include_router(linkedin.router)

    return app


app = create_app()
