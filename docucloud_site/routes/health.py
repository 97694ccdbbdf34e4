"""Health check routes."""

from datetime import datetime

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": request.app.state.settings.environment,
    }
