"""
FastAPI Main Application
TimeTracker Pro API Service
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import structlog
from contextlib import asynccontextmanager

from timetracker.core.config import settings
from timetracker.core.database import AsyncSessionLocal, check_database_health, close_database, init_database
from timetracker.core.exceptions import register_exception_handlers
from timetracker.core.logging import setup_logging
from timetracker.api.v1.router import api_router
from timetracker.middleware.logging import LoggingMiddleware
from timetracker.middleware.security import SecurityHeadersMiddleware
from timetracker.services.bootstrap_admin import ensure_bootstrap_admin_exists

setup_logging()
logger = structlog.get_logger()

VERSION = "1.0.0"
SERVICE_NAME = "timetracker-api"
DEV_FRONTEND_ORIGINS = ("http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:5173")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting TimeTracker Pro API Service",
        version=VERSION,
        environment=settings.ENVIRONMENT,
        timezone=settings.APP_TIMEZONE,
        role_testing=settings.ROLE_TESTING_ENABLED,
    )
    await init_database()
    async with AsyncSessionLocal() as session:
        await ensure_bootstrap_admin_exists(session)

    yield

    logger.info("Shutting down TimeTracker Pro API Service")
    await close_database()


def cors_origins() -> list:
    origins = list(settings.CORS_ORIGINS)
    if settings.ENVIRONMENT == "development":
        origins.extend(o for o in DEV_FRONTEND_ORIGINS if o not in origins)
    return origins


def create_app() -> FastAPI:
    docs_enabled = not settings.is_production
    application = FastAPI(
        title="TimeTracker Pro API",
        description="Time tracking with role-based access control",
        version=VERSION,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    # Middleware added last runs first: trusted hosts, request logging, headers, CORS
    origins = cors_origins()
    logger.info("Configuring CORS", origins=origins)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
        max_age=600,
    )
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(LoggingMiddleware)
    if settings.is_production:
        application.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.ALLOWED_HOSTS)

    register_exception_handlers(application)
    application.include_router(api_router, prefix="/api/v1")
    return application


app = create_app()


@app.get("/health")
async def health_check():
    """Liveness check for containers and load balancers"""
    healthy = await check_database_health()
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "service": SERVICE_NAME,
        "version": VERSION,
        "timestamp": time.time(),
        "database": "connected" if healthy else "unavailable",
    }
    return body if healthy else JSONResponse(status_code=503, content=body)


@app.get("/")
async def root():
    return {
        "message": "TimeTracker Pro API Service",
        "version": VERSION,
        "docs": "/docs" if app.docs_url else "disabled",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "timetracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
