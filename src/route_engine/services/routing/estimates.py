"""Routing estimates that do not need the routing backend."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import FallbackSegment, Point, RouteResult
from ..geospatial import haversine_km
from .chunker import expected_chunk_count

STRAIGHT_LINE = "straight_line"


def straight_line_route(stops: Sequence[Point], max_waypoints: int = 10) -> RouteResult:
    """Connect the stops with straight lines and measure them with haversine.

    Duration is unknown without a road network and is reported as 0.
    """
    total_km = 0.0
    for previous, current in zip(stops, stops[1:]):
        total_km += haversine_km(previous.latitude, previous.longitude, current.latitude, current.longitude)

    chunk_count = expected_chunk_count(len(stops), max_waypoints)
    fallbacks = ()
    if stops:
        fallbacks = (FallbackSegment(chunk_index=0, reason=STRAIGHT_LINE, point_count=len(stops)),)
    return RouteResult(
        coordinates=tuple(point.as_tuple() for point in stops),
        total_distance_meters=total_km * 1000.0,
        total_duration_seconds=0.0,
        legs=(),
        stop_count=len(stops),
        chunk_count=chunk_count,
        fallback_segments=fallbacks,
    )


def eta_with_installation(
    route_seconds: float,
    stop_index: int,
    install_seconds: float = 60 * 60,
    buffer_seconds: float = 15 * 60,
) -> float:
    """Arrival estimate for the ``stop_index``-th delivery including on-site work at earlier stops."""
    return route_seconds + stop_index * (install_seconds + buffer_seconds)
