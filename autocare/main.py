"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from autocare.config import get_settings
from autocare.database import SessionLocal, init_db
from autocare.exceptions import register_exception_handlers
from autocare.logging_config import (
    CORRELATION_ID_HEADER,
    configure_logging,
    new_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from autocare.routers import auth, customers, service_packages, vehicles
from autocare.services.auth_service import seed_demo_users

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Handles startup and shutdown events.
    """
    # Startup
    configure_logging(settings.log_level)
    logger.info("Starting %s %s", settings.app_name, settings.app_version)
    await init_db()
    if settings.seed_demo_users:
        async with SessionLocal() as session:
            await seed_demo_users(session)
    logger.info("API available at: %s", settings.api_v1_prefix)

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## AutoCare API

    Customers, their vehicles and the service packages they subscribe to.

    ### Features:
    * **Optimistic locking**: every update carries the version it was based on
    * **Vehicle search**: filter by owner, VIN, make, model and year range
    * **Subscriptions**: customers join and leave active service packages
    * **Secure**: JWT bearer tokens; reads for every role, writes for admins
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_ID_HEADER],
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Bind a correlation id to the request and echo it on the response."""
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or new_correlation_id()
    request.state.correlation_id = correlation_id
    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)
    response.headers[CORRELATION_ID_HEADER] = correlation_id
    return response


register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix=settings.api_v1_prefix)
app.include_router(customers.router, prefix=settings.api_v1_prefix)
app.include_router(vehicles.router, prefix=settings.api_v1_prefix)
app.include_router(service_packages.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "autocare.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
