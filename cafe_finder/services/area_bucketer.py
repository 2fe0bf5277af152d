# Quantizes search inputs so near-duplicate requests share a bounding box and a cache key.

from typing import Union

from cafe_finder.models.dto import GeoPoint, RadiusQuery, SearchRequest, ViewportQuery

class AreaBucketer:
    """
    Spatial quantization of search inputs so near-duplicate requests share a
    bounding box and a cache entry.
    Precision: 4 decimal places, ~11 m at the equator.
    """

    PRECISION = 4
    STEP = 0.0001

    @staticmethod
    def normalize_coordinate(value: float) -> float:
        """
        Rounds a coordinate to the bucket precision.

        Idempotent: normalizing an already-normalized value returns it unchanged.
        Negative zero collapses to 0.0 so both map to the same cache key.
        """
        return round(value, AreaBucketer.PRECISION) + 0.0

    @staticmethod
    def normalize_point(point: GeoPoint) -> GeoPoint:
        return GeoPoint(
            lat=AreaBucketer.normalize_coordinate(point.lat),
            lng=AreaBucketer.normalize_coordinate(point.lng),
        )

    @staticmethod
    def _round_down(value: float) -> float:
        rounded = round(value, AreaBucketer.PRECISION)
        if rounded > value:
            rounded = round(rounded - AreaBucketer.STEP, AreaBucketer.PRECISION)
        return rounded + 0.0

    @staticmethod
    def _round_up(value: float) -> float:
        rounded = round(value, AreaBucketer.PRECISION)
        if rounded < value:
            rounded = round(rounded + AreaBucketer.STEP, AreaBucketer.PRECISION)
        return rounded + 0.0

    @staticmethod
    def normalize_viewport(north_east: GeoPoint, south_west: GeoPoint) -> tuple[GeoPoint, GeoPoint]:
        """
        Rounds viewport corners outward (south-west down, north-east up), so the
        normalized viewport always contains the requested one.

        A viewport crossing the antimeridian whose longitudes land in one
        bucket would read as a thin non-crossing strip after rounding; it
        widens to every longitude instead.
        """
        ne = GeoPoint(
            lat=min(90.0, AreaBucketer._round_up(north_east.lat)),
            lng=min(180.0, AreaBucketer._round_up(north_east.lng)),
        )
        sw = GeoPoint(
            lat=max(-90.0, AreaBucketer._round_down(south_west.lat)),
            lng=max(-180.0, AreaBucketer._round_down(south_west.lng)),
        )
        if south_west.lng > north_east.lng and sw.lng <= ne.lng:
            ne = GeoPoint(lat=ne.lat, lng=180.0)
            sw = GeoPoint(lat=sw.lat, lng=-180.0)
        return ne, sw

    @staticmethod
    def normalize_request(request: SearchRequest) -> SearchRequest:
        if isinstance(request, ViewportQuery):
            ne, sw = AreaBucketer.normalize_viewport(request.north_east, request.south_west)
            return request.model_copy(update={"north_east": ne, "south_west": sw})
        return request.model_copy(update={"center": AreaBucketer.normalize_point(request.center)})

    @staticmethod
    def cache_key(request: Union[RadiusQuery, ViewportQuery]) -> str:
        """
        Builds a deterministic cache key from the normalized request.

        Examples:
            nearby:radius:52.5200,13.4050:r2000:wifi:l50
            nearby:viewport:52.5000,13.3000:52.6000,13.5000:-:l50
        """
        normalized = AreaBucketer.normalize_request(request)
        feature = normalized.feature.value if normalized.feature else "-"
        if isinstance(normalized, ViewportQuery):
            sw, ne = normalized.south_west, normalized.north_east
            region = f"viewport:{sw.lat:.4f},{sw.lng:.4f}:{ne.lat:.4f},{ne.lng:.4f}"
        else:
            center = normalized.center
            region = f"radius:{center.lat:.4f},{center.lng:.4f}:r{normalized.radius_meters}"
        return f"nearby:{region}:{feature}:l{normalized.limit}"
