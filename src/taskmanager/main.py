"""Entry point for the task management FastAPI application."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db.seed import seed_database
from .db.session import async_session_maker, init_db
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .schemas.system import RootResponse
from .views import router as views_router

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    prefix = raw_prefix.strip()
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    prefix = prefix.rstrip("/")
    return "" if prefix == "/" else prefix


def create_app(settings: Settings | None = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = settings or get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = f"{router_prefix}/openapi.json" if router_prefix else "/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Task tracking API with role-based access control and server-rendered pages.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
    )

    application.state.settings = settings

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_max_age,
        https_only=settings.session_https_only,
        same_site=settings.session_same_site,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    application.include_router(views_router)
    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)

    @application.get(
        f"{router_prefix}/metadata",
        response_model=RootResponse,
        tags=["system"],
        summary="Service metadata",
    )
    async def read_api_metadata(current_settings: SettingsDependency) -> RootResponse:
        """Expose minimal service metadata for API clients."""

        return RootResponse(
            name=current_settings.project_name,
            environment=current_settings.environment,
            version=current_settings.version,
            api_prefix=current_settings.api_prefix,
        )

    register_exception_handlers(application)

    @application.on_event("startup")
    async def _prepare_database() -> None:
        if settings.create_schema_on_startup:
            await init_db()
        if settings.seed_on_startup:
            async with async_session_maker() as session:
                await seed_database(session)
        logger.info(
            "Application started",
            extra={"environment": settings.environment, "api_prefix": router_prefix or "/"},
        )

    return application


app = create_app()


def run() -> None:
    """Convenience entry point for the ``taskmanager`` console script."""

    settings: Settings = get_settings()
    uvicorn.run(
        "taskmanager.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    run()
