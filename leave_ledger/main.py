"""
Leave Ledger - annual leave accrual and balance service
"""
import logging
from contextlib import asynccontextmanager
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from leave_ledger.api.router import api_router
from leave_ledger.core.config import settings
from leave_ledger.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    storage_exception_handler,
    generic_exception_handler,
)
from leave_ledger.core.logging import setup_logging
from leave_ledger.services.holiday_calendar import get_holiday_calendar

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log DATABASE_URL and warm the holiday calendar once per process."""
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    calendar = get_holiday_calendar()
    logger.info("Holiday calendar ready; movable holidays configured for %s", calendar.configured_years)
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Leave Ledger",
    description="Annual leave accrual, paid/unpaid split and balance ledger",
    version=settings.VERSION or "1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")

