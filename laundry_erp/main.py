"""
Laundry ERP Backend - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

from laundry_erp.api.router import api_router
from laundry_erp.core.config import settings
from laundry_erp.core.errors import (
    http_exception_handler,
    domain_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from laundry_erp.core.exceptions import DomainError
from laundry_erp.core.logging import setup_logging
from laundry_erp.db.init_db import create_tables, seed_commission_rates
from laundry_erp.db.session import SessionLocal, engine

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    parsed = urlparse(url)
    if parsed.scheme.startswith("sqlite"):
        return url
    if parsed.password:
        netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
        if parsed.port:
            netloc += f":{parsed.port}"
        return urlunparse(parsed._replace(netloc=netloc))
    return url


# Create FastAPI app
app = FastAPI(
    title="Laundry ERP Backend",
    description="Attendance, production, commission and payroll for a laundry chain",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_init_db() -> None:
    """Create missing tables and make sure every process has a commission rate row."""
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    create_tables(engine)
    db = SessionLocal()
    try:
        seed_commission_rates(db)
    finally:
        db.close()
