# Exact-distance filtering and ordering of store candidates.

from typing import Iterable, List, Optional, Tuple

import structlog

from cafe_finder.models.dto import CandidateRecord, RadiusQuery, ResultRecord, SearchRequest
from cafe_finder.services.bounding_box import search_center
from cafe_finder.utils.haversine import haversine

logger = structlog.get_logger(__name__)

def rank_candidates(request: SearchRequest, candidates: Iterable[CandidateRecord]) -> List[ResultRecord]:
    """Attach exact distances, apply the radius cutoff, sort nearest first and truncate.

    Radius mode drops anything farther than the radius; the bounding box was only
    an approximation. Viewport mode keeps every candidate the store returned and
    uses the distance from the viewport midpoint for ordering only.

    Candidates without coordinates are skipped. The sort is stable, so equal
    distances keep the store's order.
    """
    center = search_center(request)
    cutoff: Optional[int] = request.radius_meters if isinstance(request, RadiusQuery) else None

    distances: List[Tuple[float, CandidateRecord]] = []
    skipped = 0
    for candidate in candidates:
        if candidate.latitude is None or candidate.longitude is None:
            skipped += 1
            continue
        distance = haversine(center.lat, center.lng, candidate.latitude, candidate.longitude)
        if cutoff is not None and distance > cutoff:
            continue
        distances.append((distance, candidate))

    if skipped:
        logger.debug("candidates_without_coordinates", skipped=skipped)

    nearest = sorted(distances, key=lambda item: item[0])[: request.limit]
    return [
        ResultRecord(**candidate.model_dump(), distance_meters=distance)
        for distance, candidate in nearest
    ]
