"""Partners Hub API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from partners_hub.core.config import settings
from partners_hub.core.exceptions import register_exception_handlers
from partners_hub.db.base import engine
from partners_hub.middleware.audit import AuditMiddleware
from partners_hub.schemas.common import HealthResponse

# Service-role routes (/api/*)
from partners_hub.routers.auth import router as auth_router
from partners_hub.routers.feedback import router as feedback_router
from partners_hub.routers.notifications import router as notifications_router
from partners_hub.routers.users import router as users_router

# v1 routers
from partners_hub.routers.v1.companies import router as companies_v1_router
from partners_hub.routers.v1.notes import router as notes_v1_router
from partners_hub.routers.v1.orders import router as orders_v1_router
from partners_hub.routers.v1.products import catalog_router as catalog_v1_router
from partners_hub.routers.v1.products import router as products_v1_router


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", settings.app_name, settings.app_env)
    yield
    await engine.dispose()
    logger.info("Shut down %s", settings.app_name)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
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

    # --- Audit middleware ---
    if settings.audit_enabled:
        app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Service-role routes (/api/users, /api/auth, /api/orders/send-*, /api/feedback) ---
    app.include_router(users_router)
    app.include_router(auth_router)
    app.include_router(notifications_router)
    app.include_router(feedback_router)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(companies_v1_router, prefix="/api/v1")
    app.include_router(products_v1_router, prefix="/api/v1")
    app.include_router(catalog_v1_router, prefix="/api/v1")
    app.include_router(orders_v1_router, prefix="/api/v1")
    app.include_router(notes_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
