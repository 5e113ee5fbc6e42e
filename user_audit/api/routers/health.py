# user_audit/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from user_audit.config.settings import AppSettings, get_settings

router = APIRouter()


@router.get("/health")
async def health(request: Request, settings: Annotated[AppSettings, Depends(get_settings)]):
    """Health check with correlation ID from request state."""
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
    }
