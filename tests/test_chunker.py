import pytest

from route_engine.models.domain import Point
from route_engine.services.routing.chunker import expected_chunk_count, split_stops
from route_engine.services.routing.errors import ConfigurationError


def _stops(count: int) -> list[Point]:
    origin = Point(25.0053, 55.0760, "Warehouse")
    return [origin] + [Point(25.0 + i * 0.01, 55.1 + i * 0.01, f"Stop {i}") for i in range(1, count)]


def test_split_short_list_returns_single_chunk():
    stops = _stops(10)

    chunks = split_stops(stops, 10)

    assert chunks == [stops]


def test_split_anchors_every_chunk_at_origin():
    stops = _stops(26)

    chunks = split_stops(stops, 10)

    assert len(chunks) == 4
    assert all(chunk[0] == stops[0] for chunk in chunks)
    assert [len(chunk) for chunk in chunks] == [9, 9, 9, 2]


@pytest.mark.parametrize("count,max_waypoints", [(11, 10), (26, 10), (30, 3), (7, 4), (100, 25)])
def test_split_covers_every_stop_once_in_order(count, max_waypoints):
    stops = _stops(count)

    chunks = split_stops(stops, max_waypoints)

    deliveries = [point for chunk in chunks for point in chunk[1:]]
    assert deliveries == stops[1:]
    assert all(len(chunk) <= max_waypoints for chunk in chunks)
    assert len(chunks) == expected_chunk_count(count, max_waypoints)


def test_split_rejects_too_few_waypoints():
    with pytest.raises(ConfigurationError):
        split_stops(_stops(5), 2)


def test_split_empty_list_has_no_chunks():
    assert split_stops([], 10) == []
    assert expected_chunk_count(0, 10) == 0


def test_split_is_deterministic():
    stops = _stops(40)

    assert split_stops(stops, 7) == split_stops(list(stops), 7)
