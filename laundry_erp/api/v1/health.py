"""
Health check endpoint
"""
from fastapi import APIRouter
from laundry_erp.core.config import settings
from laundry_erp.utils.timezone import today_local

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint

    Returns service status and the business date on the local calendar.
    """
    return {
        "status": "ok",
        "service": "laundry-erp-backend",
        "local_date": today_local(),
        "timezone": settings.LOCAL_TZ_LABEL,
    }
