"""FastAPI application for the jobguard trust and moderation service.

Provides REST API endpoints wrapping the jobguard package for:
- Contact verification by one-time passcode (email and phone)
- Community flagging of job postings
- Admin moderation decisions and employer approval
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobguard import __version__
from jobguard.errors import (
    ConflictError,
    InvalidError,
    JobguardError,
    NotFoundError,
)
from web.backend.app.routers import admin, jobs, users, verification

logger = structlog.get_logger()

app = FastAPI(
    title="Jobguard API",
    description=(
        "REST API for contact verification and job moderation. "
        "Provides endpoints for one-time passcodes, job flagging, "
        "admin moderation decisions, and employer approval."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(verification.router)
app.include_router(jobs.router)
app.include_router(admin.router)
app.include_router(users.router)


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


def status_for(exc: JobguardError) -> int:
    """Map a domain error family to its HTTP status code."""
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InvalidError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ConflictError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(JobguardError)
async def jobguard_error_handler(request: Request, exc: JobguardError) -> JSONResponse:
    code = status_for(exc)
    logger.info("request.rejected", path=request.url.path, error=exc.code, status=code)
    return JSONResponse(status_code=code, content={"detail": exc.message, "code": exc.code})


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "Jobguard API",
        "version": __version__,
        "description": "Contact verification and job moderation REST API",
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
