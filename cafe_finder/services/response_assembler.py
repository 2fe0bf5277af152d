# Shapes ranked records into the public response with its cache directive.

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

from cafe_finder.models.dto import (
    CafeResult,
    NearbyResponse,
    RadiusQuery,
    ResultRecord,
    SearchRequest,
    Viewport,
)
from cafe_finder.services.area_bucketer import AreaBucketer
from cafe_finder.services.bounding_box import search_center

# Score precedence: the current work score, then the legacy AI score.
# A cafe with neither has no score; it is never reported as zero.
SCORE_SOURCES: Sequence[str] = ("work_score", "ai_score")

def first_present(record: Any, sources: Sequence[str]) -> Optional[Any]:
    """Return the first non-null attribute of `record` named in `sources`, in order."""
    for source in sources:
        value = getattr(record, source, None)
        if value is not None:
            return value
    return None

@dataclass(frozen=True)
class CacheDirective:
    """Freshness contract for shared HTTP caches; declared here, enforced by the cache layer."""
    max_age: int = 60
    s_maxage: int = 60
    stale_while_revalidate: int = 120

    def header_value(self) -> str:
        return (
            f"public, max-age={self.max_age}, s-maxage={self.s_maxage}, "
            f"stale-while-revalidate={self.stale_while_revalidate}"
        )

NEARBY_CACHE = CacheDirective()

@dataclass(frozen=True)
class AssembledResponse:
    body: NearbyResponse
    cache_control: str
    cache_key: str

    def to_json(self) -> dict:
        return self.body.model_dump(mode="json", exclude_none=True)

def cafe_href(record: ResultRecord) -> str:
    """Canonical detail path, preferring the Google place id over the row id."""
    identifier = record.place_id or record.id
    return f"/cafe/{quote(identifier, safe='')}"

def to_cafe_result(record: ResultRecord) -> CafeResult:
    return CafeResult(
        id=record.id,
        place_id=record.place_id,
        name=record.name,
        description=record.description,
        city=record.city,
        state=record.state,
        address=record.address,
        lat=record.latitude,
        lng=record.longitude,
        distance=round(record.distance_meters),
        score=first_present(record, SCORE_SOURCES),
        google_rating=record.google_rating,
        google_ratings_total=record.google_ratings_total,
        is_work_friendly=record.is_work_friendly,
        ai_wifi_quality=record.ai_wifi_quality,
        ai_power_outlets=record.ai_power_outlets,
        ai_noise_level=record.ai_noise_level,
        ai_laptop_policy=record.ai_laptop_policy,
        is_verified=record.is_verified,
        website=record.website,
        phone=record.phone,
        created_at=record.created_at,
        href=cafe_href(record),
    )

def assemble_response(
    request: SearchRequest,
    results: List[ResultRecord],
    directive: CacheDirective = NEARBY_CACHE,
) -> AssembledResponse:
    """Shape ranked results into the public response and attach its cache contract.

    Distances are whole meters in both modes. Radius responses carry the radius;
    viewport responses carry the viewport and its midpoint as the center.
    """
    if isinstance(request, RadiusQuery):
        radius: Optional[int] = request.radius_meters
        viewport: Optional[Viewport] = None
    else:
        radius = None
        viewport = Viewport(ne=request.north_east, sw=request.south_west)

    cafes = [to_cafe_result(record) for record in results]
    body = NearbyResponse(
        center=AreaBucketer.normalize_point(search_center(request)),
        radius=radius,
        viewport=viewport,
        feature=request.feature,
        count=len(cafes),
        cafes=cafes,
    )
    return AssembledResponse(
        body=body,
        cache_control=directive.header_value(),
        cache_key=AreaBucketer.cache_key(request),
    )
