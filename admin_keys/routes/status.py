"""Health check and status endpoints."""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from admin_keys.auth.dependencies import get_settings
from admin_keys.config import Settings

router = APIRouter(tags=["Health"])


@router.get("/status")
async def get_status(
    request: Request, settings: Settings = Depends(get_settings)
) -> JSONResponse:
    """
    Health check endpoint for monitoring and load balancers.

    Returns basic service status without touching the store.

    Returns:
        JSONResponse with status, version, and uptime_seconds
    """
    uptime_seconds = int(time.time() - request.app.state.started_at)

    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "version": settings.api_version,
            "uptime_seconds": uptime_seconds,
        },
    )
