import json
import threading

import httpx
import pytest

from route_engine.models.domain import Leg, Point
from route_engine.services.routing.aggregator import AggregatorState, RouteAggregator
from route_engine.services.routing.errors import ConfigurationError, RemoteError, RemoteErrorKind
from route_engine.services.routing.options import RoutingOptions
from route_engine.services.routing.polyline import decode_polyline, encode_polyline
from route_engine.services.routing.valhalla_client import ValhallaClient

ORIGIN = Point(25.0053, 55.0760, "Warehouse Jebel Ali")


def _stops(count: int) -> list[Point]:
    return [ORIGIN] + [Point(25.0 + i * 0.005, 55.1 + i * 0.004, f"Stop {i}") for i in range(1, count + 1)]


class DummyValhalla:
    """Routes every consecutive pair with a two-point shape; fails chunks listed in ``fail_on``."""

    def __init__(self, fail_on: tuple[int, ...] = (), bad_shapes: tuple[tuple[int, int], ...] = ()) -> None:
        self.fail_on = fail_on
        self.bad_shapes = bad_shapes
        self.calls: list[list[Point]] = []

    def route_chunk(self, chunk):
        call_index = len(self.calls)
        self.calls.append(list(chunk))
        if call_index in self.fail_on:
            raise RemoteError(RemoteErrorKind.TIMEOUT, "timed out")
        legs = []
        for leg_index, (start, end) in enumerate(zip(chunk, chunk[1:])):
            shape = encode_polyline([start.as_tuple(), end.as_tuple()])
            if (call_index, leg_index) in self.bad_shapes:
                shape = shape[:-1] + "_"
            legs.append(Leg(encoded_shape=shape, distance_meters=1000.0, duration_seconds=60.0))
        return legs


def _aggregator(client, sleeps=None, **options) -> RouteAggregator:
    options.setdefault("inter_call_delay_ms", 0)
    sleep = sleeps.append if sleeps is not None else (lambda seconds: None)
    return RouteAggregator(client, options=RoutingOptions(**options), sleep=sleep)


def test_all_chunks_succeed():
    stops = _stops(25)
    client = DummyValhalla()

    result = _aggregator(client).aggregate(stops, max_waypoints=10)

    assert result.chunk_count == 4
    assert len(client.calls) == 4
    assert result.stop_count == 26
    assert len(result.coordinates) > result.stop_count
    # one leg per consecutive pair in each chunk: 8 + 8 + 8 + 1
    assert len(result.legs) == 25
    assert result.total_distance_meters == pytest.approx(25_000.0)
    assert result.total_duration_seconds == pytest.approx(1_500.0)
    assert result.fallback_segments == ()
    assert not result.is_degraded


def test_failed_chunk_falls_back_to_raw_points():
    stops = _stops(16)  # two chunks of origin + 8 stops at max_waypoints=10
    client = DummyValhalla(fail_on=(1,))

    result = _aggregator(client).aggregate(stops, max_waypoints=10)

    assert result.chunk_count == 2
    first_chunk_points = [point for leg in result.legs for point in decode_polyline(leg.encoded_shape)]
    assert result.total_distance_meters == pytest.approx(sum(leg.distance_meters for leg in result.legs))
    assert result.total_distance_meters == pytest.approx(8_000.0)
    assert list(result.coordinates[: len(first_chunk_points)]) == first_chunk_points
    raw_second_chunk = [ORIGIN.as_tuple()] + [point.as_tuple() for point in stops[9:]]
    assert list(result.coordinates[len(first_chunk_points) :]) == raw_second_chunk
    assert len(result.fallback_segments) == 1
    segment = result.fallback_segments[0]
    assert segment.chunk_index == 1
    assert segment.reason == "timeout"
    assert segment.leg_index is None
    assert segment.point_count == 9


def test_every_chunk_failing_still_returns_coordinates():
    stops = _stops(12)
    client = DummyValhalla(fail_on=(0, 1))

    result = _aggregator(client).aggregate(stops, max_waypoints=10)

    assert result.coordinates
    assert result.total_distance_meters == 0.0
    assert result.legs == ()
    assert len(result.fallback_segments) == result.chunk_count == 2


def test_undecodable_leg_falls_back_to_its_endpoints():
    stops = _stops(3)
    client = DummyValhalla(bad_shapes=((0, 1),))

    result = _aggregator(client).aggregate(stops, max_waypoints=10)

    assert len(result.legs) == 2
    assert result.total_distance_meters == pytest.approx(2_000.0)
    assert result.fallback_segments[0].leg_index == 1
    assert result.fallback_segments[0].reason == "decode_failed"
    assert result.coordinates[2:4] == (stops[1].as_tuple(), stops[2].as_tuple())


def test_throttle_waits_before_every_call():
    sleeps: list[float] = []

    _aggregator(DummyValhalla(), sleeps=sleeps, inter_call_delay_ms=1000).aggregate(_stops(25), max_waypoints=10)

    assert sleeps == [1.0, 1.0, 1.0, 1.0]


def test_invalid_max_waypoints_is_fatal():
    client = DummyValhalla()

    with pytest.raises(ConfigurationError):
        _aggregator(client).aggregate(_stops(5), max_waypoints=2)
    assert client.calls == []


def test_cancellation_returns_partial_route():
    stops = _stops(25)
    token = threading.Event()

    class CancellingValhalla(DummyValhalla):
        def route_chunk(self, chunk):
            legs = super().route_chunk(chunk)
            if len(self.calls) == 2:
                token.set()
            return legs

    client = CancellingValhalla()
    result = _aggregator(client).aggregate(stops, max_waypoints=10, cancel_token=token)

    assert result.cancelled
    assert len(client.calls) == 2
    assert result.chunk_count == 4
    assert len(result.legs) == 16


def test_single_point_is_not_sent():
    client = DummyValhalla()
    aggregator = _aggregator(client)

    result = aggregator.aggregate([ORIGIN])

    assert client.calls == []
    assert result.coordinates == (ORIGIN.as_tuple(),)
    assert result.fallback_segments[0].reason == "insufficient_points"
    assert aggregator.state is AggregatorState.DONE


def test_empty_stop_list():
    result = _aggregator(DummyValhalla()).aggregate([])

    assert result.coordinates == ()
    assert result.chunk_count == 0
    assert result.stop_count == 0


def test_aggregate_is_idempotent():
    stops = _stops(20)

    first = _aggregator(DummyValhalla(fail_on=(1,))).aggregate(stops, max_waypoints=6)
    second = _aggregator(DummyValhalla(fail_on=(1,))).aggregate(stops, max_waypoints=6)

    assert first == second


def test_http_failures_from_valhalla_client_fall_back_per_chunk():
    stops = _stops(6)  # origin + 6 stops -> three chunks of origin + 2 at max_waypoints=4
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(500, json={"error": "internal error"})
        if len(calls) == 2:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")
        body = json.loads(request.content)
        path = [(location["lat"], location["lon"]) for location in body["locations"]]
        legs = [
            {"shape": encode_polyline([start, end]), "summary": {"length": 1.2, "time": 90}}
            for start, end in zip(path, path[1:])
        ]
        return httpx.Response(200, json={"trip": {"legs": legs}})

    client = ValhallaClient(
        base_url="http://valhalla.test",
        options=RoutingOptions(inter_call_delay_ms=0),
        transport=httpx.MockTransport(handler),
    )

    result = _aggregator(client).aggregate(stops, max_waypoints=4)

    assert len(calls) == 3
    assert result.chunk_count == 3
    assert [(segment.chunk_index, segment.reason) for segment in result.fallback_segments] == [
        (0, "non_success_status"),
        (1, "malformed_response"),
    ]
    assert len(result.legs) == 2
    assert result.total_distance_meters == pytest.approx(2 * 1200.0)
    assert result.total_duration_seconds == pytest.approx(180.0)
    assert result.coordinates[:3] == tuple(point.as_tuple() for point in [ORIGIN, stops[1], stops[2]])
