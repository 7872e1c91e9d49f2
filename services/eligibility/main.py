"""
Eligibility Service - Main Application
======================================

FastAPI application for eligibility proofs and their verification.

Version: 0.1.0
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ghosthire.config import settings
from ghosthire.ledger import get_ledger_client
from ghosthire.logging import get_logger, setup_logging
from ghosthire.models import ErrorResponse, HealthResponse
from ghosthire.zk import get_proving_backend
from services.eligibility.routes import privacy, proofs, regions, verification


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="eligibility",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "eligibility_service_starting",
        environment=settings.environment.value,
        port=settings.ports.eligibility,
        proving_backend=settings.proving.backend.value,
        verification_mode=settings.verification.mode.value,
    )

    # Startup
    ledger = get_ledger_client()
    try:
        if ledger is not None:
            await ledger.connect()
            logger.info("ledger_connected", mode=ledger.mode.value)
        else:
            logger.warning("ledger_disabled")
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("eligibility_service_shutting_down")
    if ledger is not None:
        await ledger.disconnect()


# Create FastAPI application
app = FastAPI(
    title="GhostHire Eligibility Service",
    description="Privacy-preserving eligibility proofs for job applications",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """
    Service health check.

    Returns health status of the service and its dependencies.
    """
    components: dict[str, dict[str, Any]] = {}

    # Check ledger
    ledger = get_ledger_client()
    if ledger is None:
        components["ledger"] = {"status": "disabled"}
    else:
        components["ledger"] = await ledger.health_check()

    # Check proving backend; fallback proofs keep the service usable
    backend = get_proving_backend()
    if backend is None:
        components["proving"] = {"status": "disabled"}
    else:
        components["proving"] = {
            "status": "healthy" if backend.artifacts_available() else "degraded",
            "backend": backend.name,
        }

    health = HealthResponse(
        service="eligibility",
        version="0.1.0",
        components=components,
    )
    if not health.is_healthy:
        health.status = "degraded"

    return health


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "GhostHire Eligibility Service",
        "version": "0.1.0",
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    proofs.router,
    prefix="/api/v1/proofs",
    tags=["Eligibility Proofs"],
)

app.include_router(
    verification.router,
    prefix="/api/v1/verify",
    tags=["Verification"],
)

app.include_router(
    regions.router,
    prefix="/api/v1/regions",
    tags=["Regions"],
)

app.include_router(
    privacy.router,
    prefix="/api/v1/privacy",
    tags=["Privacy"],
)


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Any, exc: HTTPException) -> Any:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail), status_code=exc.status_code).model_dump(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Any, exc: Exception) -> Any:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ).model_dump(),
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.eligibility.main:app",
        host="0.0.0.0",
        port=settings.ports.eligibility,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
