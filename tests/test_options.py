import pytest

from route_engine.services.routing.errors import ConfigurationError
from route_engine.services.routing.options import RoutingOptions


def test_defaults_match_settings():
    options = RoutingOptions.from_settings()

    assert options.max_waypoints == 10
    assert options.inter_call_delay_seconds == 1.0
    assert options.timeout_seconds == 30.0
    assert options.costing_profile == "auto"


def test_from_settings_ignores_none_overrides():
    options = RoutingOptions.from_settings(max_waypoints=25, timeout_ms=None)

    assert options.max_waypoints == 25
    assert options.timeout_ms == 30000


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_waypoints": 2},
        {"inter_call_delay_ms": -1},
        {"timeout_ms": 0},
        {"costing_profile": " "},
        {"units": "furlongs"},
        {"polyline_precision": 0},
    ],
)
def test_validate_rejects_bad_options(overrides):
    with pytest.raises(ConfigurationError):
        RoutingOptions(**overrides).validate()
