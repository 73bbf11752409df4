from fastapi import APIRouter, Depends

from ....core.config import Settings
from ..deps import get_app_settings

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "app_name": settings.APP_NAME,
        "ai_configured": settings.has_api_key,
    }
