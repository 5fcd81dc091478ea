"""Routing orchestration service."""

from __future__ import annotations

import logging
from typing import Sequence

from ...config import settings
from ...models.domain import Point, RouteResult
from ...persistence.filesystem import FileStorage
from ...schemas.routing import (
    FallbackSegmentModel,
    LegModel,
    RouteRequest,
    RouteResponse,
    StopModel,
)
from ..geospatial import is_valid_coordinate, point_in_area, service_area_polygon
from .aggregator import RouteAggregator
from .errors import StopValidationError
from .estimates import eta_with_installation, straight_line_route
from .options import RoutingOptions
from .valhalla_client import ValhallaClient

logger = logging.getLogger(__name__)


def build_stop_list(origin: StopModel, stops: Sequence[StopModel]) -> list[Point]:
    """Convert request stops into points with the origin at index 0."""
    points = [Point(latitude=origin.latitude, longitude=origin.longitude, label=origin.label or "Origin")]
    points.extend(Point(latitude=stop.latitude, longitude=stop.longitude, label=stop.label) for stop in stops)
    return points


def validate_stops(points: Sequence[Point]) -> list[int]:
    """Reject unroutable coordinates; return indices outside the service area.

    Raises:
        StopValidationError: A point has NaN or out-of-range coordinates
    """
    errors = [
        f"Location {index}: invalid coordinates ({point.latitude}, {point.longitude})"
        for index, point in enumerate(points)
        if not is_valid_coordinate(point.latitude, point.longitude)
    ]
    if errors:
        raise StopValidationError(f"Invalid locations: {'; '.join(errors)}")

    area = service_area_polygon(settings.service_area_bounds)
    outside = [index for index, point in enumerate(points) if not point_in_area(point.latitude, point.longitude, area)]
    for index in outside:
        point = points[index]
        logger.warning(f"Location {index}: outside service area ({point.latitude}, {point.longitude})")
    return outside


def _build_options(payload: RouteRequest) -> RoutingOptions:
    overrides = payload.options.model_dump() if payload.options else {}
    return RoutingOptions.from_settings(**overrides).validate()


def calculate_route(payload: RouteRequest) -> RouteResponse:
    points = build_stop_list(payload.origin, payload.stops)
    outside = validate_stops(points)
    options = _build_options(payload)

    if payload.road_routing:
        aggregator = RouteAggregator(ValhallaClient(options=options), options=options)
        result = aggregator.aggregate(points)
    else:
        logger.info(f"Road routing disabled; connecting {len(points)} locations with straight lines")
        result = straight_line_route(points, max_waypoints=options.max_waypoints)

    output_path = None
    if payload.persist:
        output_path = _persist_result(result, payload.run_label)

    return _to_response(result, outside, output_path)


def _persist_result(result: RouteResult, run_label: str | None) -> str:
    run_dir = FileStorage().save_route_result(result, run_label)
    logger.info(f"Route result saved to {run_dir}")
    return str(run_dir)


def _to_response(result: RouteResult, outside: list[int], output_path: str | None) -> RouteResponse:
    last_stop_index = max(result.stop_count - 1, 0)
    completion = eta_with_installation(
        result.total_duration_seconds,
        last_stop_index,
        install_seconds=settings.install_minutes_per_stop * 60,
        buffer_seconds=settings.buffer_minutes_per_stop * 60,
    )
    return RouteResponse(
        coordinates=[[lat, lng] for lat, lng in result.coordinates],
        total_distance_meters=result.total_distance_meters,
        total_distance_km=result.distance_km,
        total_duration_seconds=result.total_duration_seconds,
        total_duration_hours=result.duration_hours,
        legs=[
            LegModel(
                shape=leg.encoded_shape,
                distance_meters=leg.distance_meters,
                duration_seconds=leg.duration_seconds,
            )
            for leg in result.legs
        ],
        stop_count=result.stop_count,
        chunk_count=result.chunk_count,
        is_multi_leg=result.is_multi_leg,
        is_fallback=result.is_degraded,
        cancelled=result.cancelled,
        fallback_segments=[
            FallbackSegmentModel(
                chunk_index=segment.chunk_index,
                reason=segment.reason,
                point_count=segment.point_count,
                leg_index=segment.leg_index,
            )
            for segment in result.fallback_segments
        ],
        estimated_completion_seconds=completion,
        outside_service_area=outside,
        output_path=output_path,
    )
