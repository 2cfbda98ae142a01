#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for the abbreviation manager.

Thin orchestration shell: app creation, middleware, router includes,
startup/shutdown events.

Usage:
    uvicorn api.main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from pathlib import Path
import time
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from config.logging_config import get_logger
from config.settings import settings
from core.abbrev import __version__
from core.abbrev.service import get_abbrev_service

from api.abbrev_router import router as abbrev_router

logger = get_logger(__name__)

start_time = time.time()

# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Abbreviation Manager API",
    description="Manage, store, load and transfer term abbreviations of proofs",
    version=__version__,
)

# CORS middleware: origins from settings (env var) or dev defaults
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

app.add_middleware(SecurityHeadersMiddleware)

# =============================================================================
# Include Routers
# =============================================================================

app.include_router(abbrev_router)

# =============================================================================
# Startup / Shutdown Events
# =============================================================================

@app.on_event("startup")
async def startup_default_proof():
    """Create and select a proof session if one is configured."""
    if not settings.default_proof_name:
        return
    service = get_abbrev_service()
    proof = service.create_proof(settings.default_proof_name)
    service.select_proof(proof.id)
    logger.info(f"Default proof ready: {proof.name} ({proof.id})")


@app.on_event("shutdown")
async def shutdown_close_proofs():
    """Release abbreviation maps of all open proofs."""
    service = get_abbrev_service()
    for proof in service.list_proofs():
        service.discard_proof(proof.id)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": time.time(),
        "uptime_seconds": round(time.time() - start_time, 1),
    }
