"""
sms_inspector/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers API routes and exception handlers
- No business logic should be written here
- Manages application lifecycle (startup/shutdown)
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import time

from sms_inspector.core.config import settings, validate_settings
from sms_inspector.core.errors import add_exception_handlers
from sms_inspector.core.logging import setup_logging, get_logger
from sms_inspector.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from sms_inspector.db.indexes import create_indexes
from sms_inspector.db.seed import seed_database
from sms_inspector.api import admin, auth, numbers, site, sms, users

APP_VERSION = "2.0.0"

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("🚀 Starting SMS Inspector...")

    try:
        logger.info("Validating configuration...")
        validate_settings()
        logger.info("✅ Configuration validated")

        logger.info("Connecting to MongoDB...")
        await connect_to_mongo()
        logger.info("✅ MongoDB connected")

        logger.info("Creating database indexes...")
        await create_indexes()
        logger.info("✅ Database indexes created")

        logger.info("Seeding default data...")
        await seed_database()
        logger.info("✅ Default data in place")

        logger.info("🎉 SMS Inspector started successfully!")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Debug Mode: {settings.DEBUG}")

    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("🛑 Shutting down SMS Inspector...")

    try:
        await close_mongo_connection()
        logger.info("✅ MongoDB connection closed")
        logger.info("👋 SMS Inspector shut down successfully")

    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


app = FastAPI(
    title="SMS Inspector",
    description="Dashboard backend for Premiumy SMS delivery records",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,  # Disable docs in production
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to all responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Premiumy exports can be slow; flag anything unusual
    if process_time > 5.0:
        logger.warning(
            f"Slow request detected: {request.method} {request.url.path}",
            extra={"action": "slow_request"}
        )

    return response


add_exception_handlers(app)

app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["Auth"])
app.include_router(users.router, prefix=settings.API_PREFIX, tags=["Profile"])
app.include_router(sms.router, prefix=settings.API_PREFIX, tags=["SMS"])
app.include_router(numbers.router, prefix=settings.API_PREFIX, tags=["Numbers"])
app.include_router(admin.router, prefix=settings.API_PREFIX, tags=["Admin"])
app.include_router(site.router, prefix=settings.API_PREFIX, tags=["Site"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - basic info."""
    return {
        "name": "SMS Inspector API",
        "version": APP_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    Checks database connectivity.
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "checks": {}
    }

    db_healthy = await check_database_health()
    health_status["checks"]["database"] = "healthy" if db_healthy else "unhealthy"
    if not db_healthy:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(content=health_status, status_code=status_code)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    """
    Readiness probe - indicates if app is ready to receive traffic.
    """
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    """
    Liveness probe - indicates if app is alive.
    """
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sms_inspector.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
