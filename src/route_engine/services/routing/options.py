"""Options controlling one aggregation run."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ...config import settings
from .errors import ConfigurationError

UNIT_TO_METERS = {
    "kilometers": 1000.0,
    "miles": 1609.344,
}

MIN_WAYPOINTS = 3


@dataclass(frozen=True, slots=True)
class RoutingOptions:
    max_waypoints: int = 10
    inter_call_delay_ms: int = 1000
    timeout_ms: int = 30000
    costing_profile: str = "auto"
    units: str = "kilometers"
    language: str = "en"
    shape_match: str = "map_snap"
    polyline_precision: int = 6

    @classmethod
    def from_settings(cls, **overrides: Any) -> "RoutingOptions":
        """Build options from the global settings, applying non-None overrides."""
        base = cls(
            max_waypoints=settings.max_waypoints,
            inter_call_delay_ms=settings.inter_call_delay_ms,
            timeout_ms=settings.timeout_ms,
            costing_profile=settings.costing_profile,
            units=settings.units,
            language=settings.language,
            shape_match=settings.shape_match,
            polyline_precision=settings.polyline_precision,
        )
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(base, **changes)

    @property
    def inter_call_delay_seconds(self) -> float:
        return self.inter_call_delay_ms / 1000.0

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def meters_per_unit(self) -> float:
        return UNIT_TO_METERS[self.units]

    def validate(self) -> "RoutingOptions":
        if self.max_waypoints < MIN_WAYPOINTS:
            raise ConfigurationError(
                f"max_waypoints must be at least {MIN_WAYPOINTS} (origin plus two stops), got {self.max_waypoints}."
            )
        if self.inter_call_delay_ms < 0:
            raise ConfigurationError(f"inter_call_delay_ms cannot be negative, got {self.inter_call_delay_ms}.")
        if self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be positive, got {self.timeout_ms}.")
        if not self.costing_profile or not self.costing_profile.strip():
            raise ConfigurationError("costing_profile must be a non-empty string.")
        if self.units not in UNIT_TO_METERS:
            raise ConfigurationError(
                f"Unsupported units '{self.units}'. Expected one of: {', '.join(sorted(UNIT_TO_METERS))}."
            )
        if not 1 <= self.polyline_precision <= 10:
            raise ConfigurationError(f"polyline_precision must be between 1 and 10, got {self.polyline_precision}.")
        return self
