"""FastAPI application exposing the weekly digest trigger."""

import logging

from fastapi import FastAPI

from .. import __version__
from .routes import api
from .cors import CORSHeadersMiddleware

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="reservation-digest",
    description="Weekly e-mail of next week's venue reservations",
    version=__version__,
)

# Pre-flight handling and CORS headers on every response
app.add_middleware(CORSHeadersMiddleware)

# Include routers
app.include_router(api.router, tags=["digest"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "reservation-digest"}
