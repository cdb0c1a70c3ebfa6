"""
vault_login.api.app

FastAPI app factory for the login service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory, report
  catalog).
- Map store failures to a uniform 503 response.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from vault_login import __version__
from vault_login.api.routers.health import router as health_router
from vault_login.api.routers.login import router as login_router
from vault_login.db.errors import StoreError
from vault_login.db.init_db import init_db
from vault_login.db.session import create_engine, create_sessionmaker
from vault_login.observability.logging import configure_logging, get_logger
from vault_login.observability.middleware import RequestContextMiddleware
from vault_login.services.reports import JsonReportCatalog
from vault_login.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, sso_enabled=settings.sso_enabled)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.report_catalog = JsonReportCatalog.from_file(settings.reports_file)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Vault Login Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(login_router)

    @app.exception_handler(StoreError)
    async def _store_error(_: Request, exc: StoreError) -> JSONResponse:
        log.error("store.unavailable", error=str(exc))
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Store unavailable"}
        )

    return app


# --- Module Notes -----------------------------------------------------------
# Login/logout never reach the 503 handler: the service converts store failures into
# FAILURE outcomes. Only read paths such as /v1/system-settings can surface it.
