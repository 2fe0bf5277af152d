# Coarse rectangular pre-filter pushed down to the record store.
#
# The box may over-fetch; it must never drop a cafe that lies inside the
# requested circle or viewport. Exact inclusion is decided later by the ranker.

import math

from cafe_finder.models.dto import BoundingBox, GeoPoint, RadiusQuery, SearchRequest, ViewportQuery
from cafe_finder.utils.haversine import EARTH_RADIUS_METERS

# Floor for cos(lat) so the longitude delta stays finite near the poles
POLE_COS_FLOOR = 0.1

def _full_longitude(min_lat: float, max_lat: float) -> BoundingBox:
    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=-180.0, max_lng=180.0)

def bounding_box_for_radius(center: GeoPoint, radius_meters: float) -> BoundingBox:
    """
    Derives the box around a (center, radius) circle.

    The latitude span is exact. The longitude span is the larger of the
    cos-floored approximation and the exact spherical-cap half-width. When
    the circle reaches a pole or wraps across the antimeridian the box spans
    every longitude instead.
    """
    angular_distance = radius_meters / EARTH_RADIUS_METERS  # radians
    delta_lat = angular_distance * 180 / math.pi
    cos_lat = max(math.cos(center.lat * math.pi / 180), POLE_COS_FLOOR)
    delta_lng = angular_distance * 180 / (math.pi * cos_lat)

    min_lat = max(-90.0, center.lat - delta_lat)
    max_lat = min(90.0, center.lat + delta_lat)

    if center.lat + delta_lat >= 90 or center.lat - delta_lat <= -90:
        return _full_longitude(min_lat, max_lat)

    ratio = math.sin(angular_distance) / math.cos(math.radians(center.lat))
    if ratio >= 1:
        return _full_longitude(min_lat, max_lat)
    delta_lng = max(delta_lng, math.degrees(math.asin(ratio)))

    min_lng = center.lng - delta_lng
    max_lng = center.lng + delta_lng
    if min_lng < -180 or max_lng > 180:
        return _full_longitude(min_lat, max_lat)

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)

def bounding_box_for_viewport(north_east: GeoPoint, south_west: GeoPoint) -> BoundingBox:
    """
    Uses the viewport corners as the box. A viewport crossing the antimeridian
    (swLng > neLng) falls back to the full longitude range rather than a
    wrapped box.
    """
    if south_west.lng <= north_east.lng:
        return BoundingBox(
            min_lat=south_west.lat,
            max_lat=north_east.lat,
            min_lng=south_west.lng,
            max_lng=north_east.lng,
        )
    return _full_longitude(south_west.lat, north_east.lat)

def bounding_box_for(request: SearchRequest) -> BoundingBox:
    if isinstance(request, ViewportQuery):
        return bounding_box_for_viewport(request.north_east, request.south_west)
    return bounding_box_for_radius(request.center, request.radius_meters)

def viewport_center(north_east: GeoPoint, south_west: GeoPoint) -> GeoPoint:
    """Midpoint of a viewport, walking east from the south-west corner (wraps past 180)."""
    lat = (north_east.lat + south_west.lat) / 2
    span = north_east.lng - south_west.lng
    if span < 0:
        span += 360
    lng = south_west.lng + span / 2
    if lng > 180:
        lng -= 360
    return GeoPoint(lat=lat, lng=lng)

def search_center(request: SearchRequest) -> GeoPoint:
    """Point distances are measured from: the circle center or the viewport midpoint."""
    if isinstance(request, RadiusQuery):
        return request.center
    return viewport_center(request.north_east, request.south_west)
