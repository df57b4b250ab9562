"""
Health and version endpoints
"""
from fastapi import APIRouter

from leave_ledger.core.config import settings
from leave_ledger.core.constants import SERVICE_NAME

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
    }


@router.get("/version")
async def version():
    return {
        "service": SERVICE_NAME,
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
    }
