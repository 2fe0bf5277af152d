# Turns raw query parameters into a validated SearchRequest.
#
# Coordinates are strict: anything missing, non-finite or out of range is an
# InvalidArgument naming the parameter. Radius and limit are lenient: bad
# values fall back to the endpoint default and large values are clamped.

import math
from dataclasses import dataclass
from typing import Optional, Union

from cafe_finder.core.config import Settings, settings
from cafe_finder.core.errors import InvalidArgument
from cafe_finder.models.dto import GeoPoint, RadiusQuery, SearchRequest, ViewportQuery
from cafe_finder.services.feature_filters import parse_feature

RawValue = Union[str, int, float, None]

@dataclass(frozen=True)
class SearchLimits:
    """Per-endpoint defaults and ceilings for radius and result count."""
    default_radius_m: int
    max_radius_m: int
    default_limit: int
    max_limit: int
    feature_required: bool = False

    @classmethod
    def general(cls, config: Settings = settings) -> "SearchLimits":
        return cls(
            default_radius_m=config.NEARBY_DEFAULT_RADIUS_M,
            max_radius_m=config.NEARBY_MAX_RADIUS_M,
            default_limit=config.NEARBY_DEFAULT_LIMIT,
            max_limit=config.NEARBY_MAX_LIMIT,
        )

    @classmethod
    def feature(cls, config: Settings = settings) -> "SearchLimits":
        return cls(
            default_radius_m=config.FEATURE_DEFAULT_RADIUS_M,
            max_radius_m=config.FEATURE_MAX_RADIUS_M,
            default_limit=config.FEATURE_DEFAULT_LIMIT,
            max_limit=config.FEATURE_MAX_LIMIT,
            feature_required=True,
        )

def _parse_float(raw: RawValue, allow_infinity: bool = False) -> Optional[float]:
    """Returns a finite float (or +inf when allowed), None when missing or malformed."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isfinite(value) or (allow_infinity and value == math.inf):
        return value
    return None

def _parse_bounded(raw: RawValue, field: str, bound: float) -> float:
    value = _parse_float(raw)
    if value is None:
        raise InvalidArgument(field, f"{field} is required and must be a number")
    if value < -bound or value > bound:
        raise InvalidArgument(field, f"{field} must be between -{bound:g} and {bound:g}")
    return value

def parse_latitude(raw: RawValue, field: str = "lat") -> float:
    return _parse_bounded(raw, field, 90)

def parse_longitude(raw: RawValue, field: str = "lng") -> float:
    return _parse_bounded(raw, field, 180)

def clamp_radius(raw: RawValue, limits: SearchLimits) -> int:
    """Absent, malformed or non-positive radius means the default; large radius (even infinite) is clamped."""
    value = _parse_float(raw, allow_infinity=True)
    if value is None or value < 1:
        return limits.default_radius_m
    if value >= limits.max_radius_m:
        return limits.max_radius_m
    return int(value)

def clamp_limit(raw: RawValue, limits: SearchLimits) -> int:
    value = _parse_float(raw, allow_infinity=True)
    if value is None or value < 1:
        return limits.default_limit
    if value >= limits.max_limit:
        return limits.max_limit
    return int(value)

def build_search_request(
    limits: SearchLimits,
    lat: RawValue = None,
    lng: RawValue = None,
    radius: RawValue = None,
    limit: RawValue = None,
    feature: Optional[str] = None,
    ne_lat: RawValue = None,
    ne_lng: RawValue = None,
    sw_lat: RawValue = None,
    sw_lng: RawValue = None,
) -> SearchRequest:
    """
    Validates raw parameters for one endpoint.

    Viewport mode wins whenever any corner parameter is present; in that case
    lat/lng/radius are ignored and all four corners must be valid.

    Raises:
        InvalidArgument: naming the first offending parameter.
    """
    corners = (ne_lat, ne_lng, sw_lat, sw_lng)
    if any(_is_present(value) for value in corners):
        north_east = GeoPoint(lat=parse_latitude(ne_lat, "neLat"), lng=parse_longitude(ne_lng, "neLng"))
        south_west = GeoPoint(lat=parse_latitude(sw_lat, "swLat"), lng=parse_longitude(sw_lng, "swLng"))
        if south_west.lat > north_east.lat:
            raise InvalidArgument("swLat", "swLat must not be greater than neLat")
        return ViewportQuery(
            north_east=north_east,
            south_west=south_west,
            limit=clamp_limit(limit, limits),
            feature=parse_feature(feature, required=limits.feature_required),
        )

    center = GeoPoint(lat=parse_latitude(lat), lng=parse_longitude(lng))
    return RadiusQuery(
        center=center,
        radius_meters=clamp_radius(radius, limits),
        limit=clamp_limit(limit, limits),
        feature=parse_feature(feature, required=limits.feature_required),
    )

def _is_present(raw: RawValue) -> bool:
    if isinstance(raw, str):
        return bool(raw.strip())
    return raw is not None
