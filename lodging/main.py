from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lodging.api.v1.router import router as api_v1_router
from lodging.config.logging import setup_logging
from lodging.config.settings import settings
from lodging.core.exceptions import BaseAppException
from lodging.core.logging import get_logger
from lodging.core.middleware import register_middlewares
from lodging.db.init_db import init_db

logger = get_logger(__name__)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Render domain exceptions that escape the service layer."""
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    app.add_exception_handler(BaseAppException, app_exception_handler)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    @app.on_event("startup")
    async def on_startup() -> None:
        setup_logging()
        # Production schemas are managed by migrations
        if not settings.is_production():
            init_db()

    return app


app = create_app()
