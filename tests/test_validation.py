import pytest

from cafe_finder.core.errors import InvalidArgument
from cafe_finder.models.dto import FeatureKind, RadiusQuery, ViewportQuery
from cafe_finder.services.validation import (
    SearchLimits,
    build_search_request,
    clamp_limit,
    clamp_radius,
    parse_latitude,
    parse_longitude,
)

GENERAL = SearchLimits(default_radius_m=2000, max_radius_m=10000, default_limit=50, max_limit=50)
FEATURE = SearchLimits(
    default_radius_m=5000, max_radius_m=20000, default_limit=50, max_limit=100, feature_required=True
)


def test_limits_from_settings_match_endpoint_defaults() -> None:
    assert SearchLimits.general() == GENERAL
    assert SearchLimits.feature() == FEATURE


@pytest.mark.parametrize("raw", [None, "", "abc", "nan", "inf", "-inf"])
def test_latitude_must_be_a_finite_number(raw) -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        parse_latitude(raw)
    assert exc_info.value.field == "lat"


@pytest.mark.parametrize("raw", ["90.0001", "-90.5", "200"])
def test_latitude_out_of_range_names_the_field(raw) -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        parse_latitude(raw)
    assert exc_info.value.field == "lat"
    assert "between -90 and 90" in exc_info.value.message


def test_longitude_bounds_are_inclusive() -> None:
    assert parse_longitude("180") == 180.0
    assert parse_longitude("-180") == -180.0
    with pytest.raises(InvalidArgument) as exc_info:
        parse_longitude("180.01")
    assert exc_info.value.field == "lng"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 2000),
        ("", 2000),
        ("abc", 2000),
        ("0", 2000),
        ("-50", 2000),
        ("750", 750),
        ("1500.9", 1500),
        ("10000", 10000),
        ("25000", 10000),
        ("inf", 10000),
        ("1e400", 10000),
        ("-inf", 2000),
        ("nan", 2000),
    ],
)
def test_radius_defaults_and_clamps_on_general_endpoint(raw, expected) -> None:
    assert clamp_radius(raw, GENERAL) == expected


def test_radius_ceiling_is_higher_on_feature_endpoint() -> None:
    assert clamp_radius(None, FEATURE) == 5000
    assert clamp_radius("15000", FEATURE) == 15000
    assert clamp_radius("99999", FEATURE) == 20000


@pytest.mark.parametrize(
    "raw, limits, expected",
    [
        (None, GENERAL, 50),
        ("ten", GENERAL, 50),
        ("10", GENERAL, 10),
        ("80", GENERAL, 50),
        ("80", FEATURE, 80),
        ("500", FEATURE, 100),
        ("-3", FEATURE, 50),
        ("Infinity", FEATURE, 100),
    ],
)
def test_limit_falls_back_and_clamps(raw, limits, expected) -> None:
    assert clamp_limit(raw, limits) == expected


def test_builds_radius_query() -> None:
    request = build_search_request(GENERAL, lat="52.52", lng="13.405", radius="1500", limit="5")
    assert isinstance(request, RadiusQuery)
    assert request.center.lat == 52.52
    assert request.radius_meters == 1500
    assert request.limit == 5
    assert request.feature is None


def test_missing_coordinates_fail_before_anything_else() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(GENERAL, lng="13.4")
    assert exc_info.value.field == "lat"


def test_viewport_takes_precedence_over_point() -> None:
    request = build_search_request(
        GENERAL,
        lat="52.52",
        lng="13.405",
        ne_lat="52.6",
        ne_lng="13.5",
        sw_lat="52.4",
        sw_lng="13.3",
    )
    assert isinstance(request, ViewportQuery)
    assert request.north_east.lat == 52.6
    assert request.south_west.lng == 13.3
    assert request.limit == 50


def test_partial_viewport_is_rejected_even_with_a_point() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(GENERAL, lat="52.52", lng="13.405", ne_lat="52.6", ne_lng="13.5", sw_lat="52.4")
    assert exc_info.value.field == "swLng"


def test_viewport_corner_must_be_numeric() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(GENERAL, ne_lat="north", ne_lng="13.5", sw_lat="52.4", sw_lng="13.3")
    assert exc_info.value.field == "neLat"


def test_inverted_viewport_latitudes_are_rejected() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(GENERAL, ne_lat="52.4", ne_lng="13.5", sw_lat="52.6", sw_lng="13.3")
    assert exc_info.value.field == "swLat"


def test_antimeridian_viewport_is_accepted() -> None:
    request = build_search_request(GENERAL, ne_lat="10", ne_lng="-170", sw_lat="-10", sw_lng="170")
    assert isinstance(request, ViewportQuery)
    assert request.south_west.lng > request.north_east.lng


def test_feature_endpoint_requires_a_feature() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(FEATURE, lat="52.52", lng="13.405")
    assert exc_info.value.field == "feature"


def test_feature_endpoint_rejects_unknown_feature() -> None:
    with pytest.raises(InvalidArgument) as exc_info:
        build_search_request(FEATURE, lat="52.52", lng="13.405", feature="espresso")
    assert exc_info.value.field == "feature"
    assert "wifi, outlets, quiet, time-limit" in exc_info.value.message


def test_general_endpoint_accepts_optional_feature() -> None:
    request = build_search_request(GENERAL, lat="52.52", lng="13.405", feature="quiet")
    assert request.feature is FeatureKind.QUIET
    assert build_search_request(GENERAL, lat="52.52", lng="13.405").feature is None
