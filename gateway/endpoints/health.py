"""
Health check and status endpoints.
"""
import time
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint listing mounted and failed providers"""
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "providers": sorted(registry.providers) if registry else [],
        "failed_providers": dict(registry.failures) if registry else {},
    }


@router.get("/healthz")
async def healthz_check():
    """Alternative health check endpoint (Kubernetes style)"""
    return {"status": "ok", "timestamp": time.time()}
