"""
Version and metadata endpoint
"""
from fastapi import APIRouter
from laundry_erp.core.config import settings

router = APIRouter()


@router.get("/version")
async def get_version():
    """
    Get application version and metadata

    Returns:
        Service name, version, environment and the configured local UTC offset
    """
    return {
        "service": "laundry-erp-backend",
        "version": settings.VERSION or "1.0.0",
        "env": settings.APP_ENV,
        "utc_offset_hours": settings.LOCAL_UTC_OFFSET_HOURS,
    }
