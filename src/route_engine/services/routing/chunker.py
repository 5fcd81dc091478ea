"""Split an origin-anchored stop list into windows a routing request can hold."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Point
from .errors import ConfigurationError
from .options import MIN_WAYPOINTS


def split_stops(stops: Sequence[Point], max_waypoints: int) -> list[list[Point]]:
    """Partition ``stops`` into chunks of at most ``max_waypoints`` points.

    ``stops[0]`` is the origin. Every chunk starts with the origin followed by
    up to ``max_waypoints - 2`` consecutive delivery stops, so each chunk can be
    routed on its own. Lists that already fit are returned as a single chunk.
    """
    if max_waypoints < MIN_WAYPOINTS:
        raise ConfigurationError(
            f"max_waypoints must be at least {MIN_WAYPOINTS} (origin plus two stops), got {max_waypoints}."
        )
    if not stops:
        return []
    if len(stops) <= max_waypoints:
        return [list(stops)]

    origin = stops[0]
    deliveries = stops[1:]
    step = max_waypoints - 2
    return [[origin, *deliveries[i : i + step]] for i in range(0, len(deliveries), step)]


def expected_chunk_count(stop_count: int, max_waypoints: int) -> int:
    """Number of chunks ``split_stops`` produces for ``stop_count`` points."""
    if stop_count == 0:
        return 0
    if stop_count <= max_waypoints:
        return 1
    step = max_waypoints - 2
    return -(-(stop_count - 1) // step)
