"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class StopModel(BaseModel):
    latitude: float
    longitude: float
    label: Optional[str] = None


class RoutingOptionsModel(BaseModel):
    """Per-request overrides; unset fields fall back to the service settings."""

    max_waypoints: Optional[int] = Field(None, description="Locations per routing request, origin included.")
    inter_call_delay_ms: Optional[int] = None
    timeout_ms: Optional[int] = None
    costing_profile: Optional[str] = None
    units: Optional[Literal["kilometers", "miles"]] = None
    language: Optional[str] = None
    shape_match: Optional[str] = Field(None, description="Valhalla shape matching mode, e.g. map_snap or edge_walk.")
    polyline_precision: Optional[int] = Field(None, description="Decimal digits of the returned leg shapes.")


class RouteRequest(BaseModel):
    origin: StopModel = Field(..., description="Fixed starting point (warehouse) prepended to every chunk.")
    stops: List[StopModel] = Field(default_factory=list, description="Deliveries in visiting order.")
    options: Optional[RoutingOptionsModel] = None
    road_routing: bool = Field(
        default=True,
        description="If False, skip the routing service and connect the stops with straight lines.",
    )
    persist: bool = False
    run_label: Optional[str] = Field(default=None, description="Friendly name for persisted outputs.")


class FallbackSegmentModel(BaseModel):
    chunk_index: int
    reason: str
    point_count: int
    leg_index: Optional[int] = None


class LegModel(BaseModel):
    shape: str
    distance_meters: float
    duration_seconds: float


class RouteResponse(BaseModel):
    coordinates: List[List[float]]
    total_distance_meters: float
    total_distance_km: float
    total_duration_seconds: float
    total_duration_hours: float
    legs: List[LegModel]
    stop_count: int
    chunk_count: int
    is_multi_leg: bool
    is_fallback: bool
    cancelled: bool = False
    fallback_segments: List[FallbackSegmentModel]
    estimated_completion_seconds: float
    outside_service_area: List[int] = Field(
        default_factory=list,
        description="Indices (0 = origin) of stops outside the configured service area.",
    )
    output_path: Optional[str] = None
