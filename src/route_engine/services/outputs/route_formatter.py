"""Serializers for aggregated route outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict

from ...models.domain import RouteResult


def route_result_to_json(result: RouteResult) -> dict:
    return {
        "coordinates": [[lat, lng] for lat, lng in result.coordinates],
        "distance": result.total_distance_meters,
        "distanceKm": result.distance_km,
        "time": result.total_duration_seconds,
        "timeHours": result.duration_hours,
        "legs": [
            {
                "shape": leg.encoded_shape,
                "distanceMeters": leg.distance_meters,
                "durationSeconds": leg.duration_seconds,
            }
            for leg in result.legs
        ],
        "locationsCount": result.stop_count,
        "chunkCount": result.chunk_count,
        "isMultiLeg": result.is_multi_leg,
        "isFallback": result.is_degraded,
        "cancelled": result.cancelled,
        "fallbackSegments": [asdict(segment) for segment in result.fallback_segments],
    }


def route_legs_to_csv(result: RouteResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "distance_meters",
        "duration_seconds",
        "cumulative_distance_meters",
        "cumulative_duration_seconds",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    distance = 0.0
    duration = 0.0
    for sequence, leg in enumerate(result.legs, start=1):
        distance += leg.distance_meters
        duration += leg.duration_seconds
        writer.writerow(
            {
                "sequence": sequence,
                "distance_meters": leg.distance_meters,
                "duration_seconds": leg.duration_seconds,
                "cumulative_distance_meters": distance,
                "cumulative_duration_seconds": duration,
            }
        )
    return buffer.getvalue()
