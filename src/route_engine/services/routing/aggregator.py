"""Chunked route aggregation over a rate-limited routing backend.

The aggregator walks the chunks produced by :func:`split_stops` strictly in
order, waits the configured delay before every request, and stitches the
decoded leg shapes into one coordinate sequence. A chunk whose request fails
contributes its raw stop coordinates instead (a straight-line segment), and a
leg whose shape cannot be decoded contributes its two endpoints. Only
configuration errors abort a run.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from ...models.domain import Coordinate, FallbackSegment, Leg, Point, RouteResult
from .chunker import split_stops
from .errors import DecodeError, RemoteError
from .options import RoutingOptions
from .polyline import decode_polyline
from .valhalla_client import RouteClient

logger = logging.getLogger(__name__)

INSUFFICIENT_POINTS = "insufficient_points"
DECODE_FAILED = "decode_failed"


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class AggregatorState(str, Enum):
    IDLE = "idle"
    CHUNKING = "chunking"
    THROTTLING = "throttling"
    CALLING = "calling"
    DECODING = "decoding"
    MERGING = "merging"
    DONE = "done"


class Throttle:
    """Fixed pause issued before every outbound routing request."""

    def __init__(self, delay_seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def wait(self) -> None:
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)


class _RouteBuilder:
    """Mutable accumulator owned by a single ``aggregate`` call."""

    def __init__(self) -> None:
        self.coordinates: list[Coordinate] = []
        self.legs: list[Leg] = []
        self.fallbacks: list[FallbackSegment] = []
        self.distance_meters = 0.0
        self.duration_seconds = 0.0

    def add_leg(self, leg: Leg, points: Sequence[Coordinate]) -> None:
        self.coordinates.extend(points)
        self.legs.append(leg)
        self.distance_meters += leg.distance_meters
        self.duration_seconds += leg.duration_seconds

    def add_fallback(
        self,
        points: Sequence[Point],
        chunk_index: int,
        reason: str,
        leg_index: Optional[int] = None,
    ) -> None:
        self.coordinates.extend(point.as_tuple() for point in points)
        self.fallbacks.append(
            FallbackSegment(chunk_index=chunk_index, reason=reason, point_count=len(points), leg_index=leg_index)
        )


class RouteAggregator:
    def __init__(
        self,
        client: RouteClient,
        options: RoutingOptions | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.options = options or RoutingOptions.from_settings()
        self.throttle = Throttle(self.options.inter_call_delay_seconds, sleep=sleep)
        self.state = AggregatorState.IDLE

    def _enter(self, state: AggregatorState) -> None:
        self.state = state
        logger.debug(f"Route aggregator -> {state.value}")

    def aggregate(
        self,
        stops: Sequence[Point],
        max_waypoints: int | None = None,
        cancel_token: CancelToken | None = None,
    ) -> RouteResult:
        """Route ``stops`` (origin first) chunk by chunk and merge the results.

        Raises:
            ConfigurationError: ``max_waypoints`` (or the options) are invalid
        """
        self.options.validate()
        limit = max_waypoints if max_waypoints is not None else self.options.max_waypoints

        self._enter(AggregatorState.CHUNKING)
        chunks = split_stops(stops, limit)
        logger.info(f"Split {len(stops)} locations into {len(chunks)} chunks (max {limit} waypoints)")

        builder = _RouteBuilder()
        cancelled = False
        for chunk_index, chunk in enumerate(chunks):
            if cancel_token is not None and cancel_token.is_set():
                logger.warning(
                    f"Route aggregation cancelled before chunk {chunk_index + 1}/{len(chunks)}; "
                    f"returning partial route"
                )
                cancelled = True
                break
            self._route_one(chunk_index, chunk, len(chunks), builder)

        self._enter(AggregatorState.MERGING)
        coordinates = builder.coordinates
        if not coordinates and stops:
            coordinates = [point.as_tuple() for point in stops]

        result = RouteResult(
            coordinates=tuple(coordinates),
            total_distance_meters=builder.distance_meters,
            total_duration_seconds=builder.duration_seconds,
            legs=tuple(builder.legs),
            stop_count=len(stops),
            chunk_count=len(chunks),
            fallback_segments=tuple(builder.fallbacks),
            cancelled=cancelled,
        )
        self._enter(AggregatorState.DONE)

        if result.fallback_segments:
            logger.warning(
                f"Route completed with {len(result.fallback_segments)} fallback segment(s) "
                f"across {result.chunk_count} chunks"
            )
        logger.info(
            f"Route aggregated: {len(result.coordinates)} coordinates, "
            f"{result.distance_km:.2f} km, {result.duration_hours:.2f} h, {result.chunk_count} chunks"
        )
        return result

    def _route_one(self, chunk_index: int, chunk: Sequence[Point], total: int, builder: _RouteBuilder) -> None:
        logger.info(f"Processing chunk {chunk_index + 1}/{total} ({len(chunk)} waypoints)")
        if len(chunk) < 2:
            builder.add_fallback(chunk, chunk_index, INSUFFICIENT_POINTS)
            return

        self._enter(AggregatorState.THROTTLING)
        self.throttle.wait()

        self._enter(AggregatorState.CALLING)
        try:
            legs = self.client.route_chunk(chunk)
        except RemoteError as exc:
            logger.warning(f"Chunk {chunk_index + 1}/{total} routing failed: {exc}")
            builder.add_fallback(chunk, chunk_index, exc.kind.value)
            return

        self._enter(AggregatorState.DECODING)
        precision = self.options.polyline_precision
        for leg_index, leg in enumerate(legs):
            try:
                points = decode_polyline(leg.encoded_shape, precision=precision)
            except DecodeError as exc:
                logger.warning(f"Chunk {chunk_index + 1} leg {leg_index + 1}: failed to decode shape: {exc}")
                endpoints = chunk[leg_index : leg_index + 2]
                builder.add_fallback(endpoints, chunk_index, DECODE_FAILED, leg_index=leg_index)
                continue
            builder.add_leg(leg, points)
