"""Covera API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from covera import __version__
from covera.core.config import settings
from covera.core.exceptions import register_exception_handlers
from covera.db.base import init_db
from covera.routers.v1 import contracts, documents, notifications, reports, vendors
from covera.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

_V1_ROUTERS = (
    vendors.router,
    contracts.router,
    documents.router,
    notifications.router,
    reports.router,
)

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpcore", "httpx", "openai", "pdfminer", "pdfplumber")


def _configure_logging() -> None:
    level = settings.log_level.upper() if settings.log_level else (
        "DEBUG" if settings.app_env == "development" else "INFO"
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    if not settings.ai_enabled:
        logger.warning("OPENAI_API_KEY is not set; document extraction is disabled")
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    for router in _V1_ROUTERS:
        app.include_router(router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            version=__version__,
            ai_enabled=settings.ai_enabled,
        )

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on ``APP_PORT``; reloads in development."""
    import uvicorn

    uvicorn.run(
        "covera.main:app",
        host="0.0.0.0",
        port=settings.app_port,
        reload=settings.app_env == "development",
    )


if __name__ == "__main__":
    run()
