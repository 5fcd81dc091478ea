"""Domain models for stops, routed legs and aggregated routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

Coordinate = tuple[float, float]


@dataclass(frozen=True, slots=True)
class Point:
    """A stop location. Equality is by value; the label is informational."""

    latitude: float
    longitude: float
    label: Optional[str] = None

    def as_tuple(self) -> Coordinate:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Leg:
    """Routed segment between two consecutive locations of one request."""

    encoded_shape: str
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class FallbackSegment:
    """Marks a part of the route built from raw stop coordinates.

    ``leg_index`` is None when the whole chunk fell back (remote failure),
    otherwise it names the leg whose shape could not be decoded.
    """

    chunk_index: int
    reason: str
    point_count: int
    leg_index: Optional[int] = None


@dataclass(frozen=True, slots=True)
class RouteResult:
    coordinates: tuple[Coordinate, ...]
    total_distance_meters: float
    total_duration_seconds: float
    legs: tuple[Leg, ...]
    stop_count: int
    chunk_count: int
    fallback_segments: tuple[FallbackSegment, ...] = field(default_factory=tuple)
    cancelled: bool = False

    @property
    def distance_km(self) -> float:
        return self.total_distance_meters / 1000.0

    @property
    def duration_hours(self) -> float:
        return self.total_duration_seconds / 3600.0

    @property
    def is_multi_leg(self) -> bool:
        return self.chunk_count > 1

    @property
    def is_degraded(self) -> bool:
        return bool(self.fallback_segments) or self.cancelled
