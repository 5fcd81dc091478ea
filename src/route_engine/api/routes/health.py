"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_valhalla_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.valhalla_client import check_health as valhalla_health_check
    return valhalla_health_check


@router.get("/health/valhalla", status_code=status.HTTP_200_OK)
def health_valhalla() -> dict:
    """Check Valhalla service health."""
    valhalla_health_check = _get_valhalla_health_check()
    return {"service": "valhalla", "healthy": valhalla_health_check()}
