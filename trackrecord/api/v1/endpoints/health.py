"""Health check endpoint for load balancers and monitoring."""

from fastapi import APIRouter, Depends

from trackrecord.api.deps import get_settings
from trackrecord.core.config import Settings

router = APIRouter()


@router.get("")
async def healthcheck(settings: Settings = Depends(get_settings)):
    """Liveness only; does not touch the database."""
    return {
        "status": "available",
        "system_info": {
            "environment": settings.environment,
            "version": settings.version,
        },
    }
