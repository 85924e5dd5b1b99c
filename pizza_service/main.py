"""
FastAPI Application Entry Point

Pizza Service - franchise, store, menu and order management with
session-token authentication. Orders are fulfilled by an external order
factory (mocked in development).

Endpoints:
    - /api/auth: register, login, logout
    - /api/user: profiles and user listing
    - /api/franchise: franchises and their stores
    - /api/order: menu and orders
    - GET /health: System health check
"""

import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from pizza_service import crud
from pizza_service.api import api_router
from pizza_service.api.deps import DB, OrderFactory
from pizza_service.core.config import get_settings, setup_logging
from pizza_service.core.errors import ServiceError
from pizza_service.core.sessions import SessionStore
from pizza_service.database import async_session_maker, engine, init_db
from pizza_service.schemas import HealthResponse
from pizza_service.services.factory import get_order_factory_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🍕 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    async with async_session_maker() as db:
        purged = await SessionStore(db).purge_expired()
        logger.info(f"✅ Session store ready ({purged} expired session(s) purged)")
        await crud.ensure_default_admin(db, settings)

    factory = get_order_factory_service()
    logger.info(f"✅ Order Factory: {factory.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Multi-tenant food ordering: diners, franchises and stores, "
        "a global menu, and orders fulfilled by the order factory."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {
        "message": f"welcome to {settings.app_name}",
        "version": settings.app_version,
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(db: DB, factory: OrderFactory) -> HealthResponse:
    """Verify the database and the order factory are reachable."""

    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    factory_status = "healthy" if await factory.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, factory_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        order_factory=factory_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map the service error taxonomy to status code and ``{message}`` body."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "message": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pizza_service.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
