"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from typing import Dict

from fastapi import APIRouter

from scanfuse.scanner.backends import backend_availability


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def check_backends(self) -> Dict[str, str]:
        """Report which decode backend bindings are installed."""
        return {
            backend_id: "available" if available else "missing"
            for backend_id, available in backend_availability().items()
        }

    def get_health(self) -> dict:
        """Get full health status."""
        backends = self.check_backends()
        available = [b for b, status in backends.items() if status == "available"]

        if len(available) == len(backends):
            overall = "healthy"
        elif available:
            overall = "degraded"
        else:
            overall = "unhealthy"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "backends": backends,
            },
        }


@router.get("")
async def health_check():
    """
    Health check endpoint.

    Returns API status and the availability of each decode backend.
    """
    controller = HealthController()
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
