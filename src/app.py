"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.logging_config import setup_logging
from config import (
    CORS_ALLOWED_ORIGINS,
    API_HOST,
    API_PORT,
    SEED_DEMO_DATA,
)
from core.database import SessionLocal
from api.routes import auth, schools, qr_codes, enrollments, stats
from utils.demo_seed import seed_demo_data

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Initialize FastAPI application
app = FastAPI(
    title="SchoolHub API",
    description="Backend API for the SchoolHub school-management dashboards.",
    version=API_VERSION,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(schools.router)
app.include_router(qr_codes.router)
app.include_router(enrollments.router)
app.include_router(stats.router)


@app.on_event("startup")
def startup_tasks() -> None:
    """Seed demo accounts when SEED_DEMO_DATA is enabled."""
    if not SEED_DEMO_DATA:
        return
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": "SchoolHub API",
        "version": API_VERSION,
        "description": "Backend API for the SchoolHub school-management dashboards.",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting SchoolHub API on http://%s:%s (docs at /docs)", API_HOST, API_PORT)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
