# The proximity search pipeline:
# normalize -> bounding box -> store fetch -> rank -> assemble.
#
# Stateless per request. The store fetch is the only await; a cancelled
# request abandons it, and store failures propagate as UpstreamUnavailable.

import time

import structlog

from cafe_finder.core.errors import UpstreamUnavailable
from cafe_finder.models.dto import SearchRequest
from cafe_finder.services.area_bucketer import AreaBucketer
from cafe_finder.services.bounding_box import bounding_box_for
from cafe_finder.services.cafe_store import CafeStore
from cafe_finder.services.feature_filters import feature_predicate
from cafe_finder.services.ranking import rank_candidates
from cafe_finder.services.response_assembler import AssembledResponse, assemble_response

logger = structlog.get_logger(__name__)

class NearbySearchService:
    """Runs validated search requests against an injected record store."""

    def __init__(self, store: CafeStore, max_candidates: int = 500):
        self.store = store
        self.max_candidates = max_candidates

    async def search(self, request: SearchRequest) -> AssembledResponse:
        start_time = time.perf_counter()
        normalized = AreaBucketer.normalize_request(request)
        bbox = bounding_box_for(normalized)
        predicate = feature_predicate(normalized.feature) if normalized.feature else None

        try:
            candidates = await self.store.fetch_candidates(bbox, predicate, self.max_candidates)
        except UpstreamUnavailable as e:
            logger.error("nearby_search_failed", stage=e.stage, error=e.message)
            raise

        results = rank_candidates(normalized, candidates)
        assembled = assemble_response(normalized, results)

        logger.info(
            "nearby_search_completed",
            cache_key=assembled.cache_key,
            candidates=len(candidates),
            results=len(results),
            elapsed_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return assembled
