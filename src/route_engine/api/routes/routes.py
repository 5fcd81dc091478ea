"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import RouteRequest, RouteResponse
from ...services.routing.service import calculate_route

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


@router.post("/calculate", response_model=RouteResponse, status_code=status.HTTP_200_OK)
def calculate(payload: RouteRequest) -> RouteResponse:
    try:
        return calculate_route(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error calculating route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate route: {str(exc)}",
        ) from exc
