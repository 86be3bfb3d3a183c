"""
FastAPI application hosting the Nexon login strategy.

This module wires dependencies and configures the application.
The strategy lives in nexon_auth/core, outbound calls in
nexon_auth/infrastructure.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from nexon_auth.logging_config import setup_global_logging

setup_global_logging()

# Now import other modules (they will use the configured logging)
from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from nexon_auth.core.exceptions import (  # noqa: E402
    ConfigurationError,
    NexonAuthError,
    UpstreamCallError,
)
from nexon_auth.oauth import router as nexon_router  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configuration is loaded lazily on the first login request, so startup
    only logs.
    """
    logger.info("Application starting up...")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="Nexon Login",
    description="Authenticates users against Nexon accounts",
    version="1.0.0",
    lifespan=lifespan,
)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """
    Handle a misconfigured strategy.

    Returns 503 Service Unavailable; the login cannot work until the
    NEXON_* settings are fixed.
    """
    logger.error(f"Nexon strategy misconfigured: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "error",
            "message": "Nexon login is not configured",
        },
    )


@app.exception_handler(NexonAuthError)
async def nexon_auth_error_handler(request: Request, exc: NexonAuthError):
    """
    Handle login errors raised outside the strategy's own outcome reporting.

    Upstream failures map to 502 Bad Gateway, everything else to 500.
    """
    logger.error(f"Nexon login error: {exc}", exc_info=True)
    upstream = isinstance(exc, UpstreamCallError)
    return JSONResponse(
        status_code=(
            status.HTTP_502_BAD_GATEWAY
            if upstream
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content={"status": "error", "message": str(exc)},
    )


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "nexon-auth",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(nexon_router.router)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
