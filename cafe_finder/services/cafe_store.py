# Record store collaborators for the proximity search.
#
# The search pipeline only needs a bounded range query: cafes inside a
# bounding box, active (or unflagged), with the amenity predicate applied,
# capped at `limit` rows. Ordering is done locally by the ranker.

import json
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple

import httpx
import structlog
from pydantic import ValidationError

from cafe_finder.core.config import Settings
from cafe_finder.core.errors import StoreConfigurationError, UpstreamUnavailable
from cafe_finder.models.dto import BoundingBox, CandidateRecord
from cafe_finder.services.feature_filters import FeaturePredicate

logger = structlog.get_logger(__name__)

STORE_FETCH_STAGE = "store_fetch"

SELECT_COLUMNS = ",".join(
    [
        "id", "place_id", "name", "description", "city", "state", "address",
        "latitude", "longitude", "work_score", "ai_score", "google_rating",
        "google_ratings_total", "is_work_friendly", "ai_wifi_quality",
        "ai_power_outlets", "ai_noise_level", "ai_laptop_policy", "is_verified",
        "website", "phone", "is_active", "created_at",
    ]
)

class CafeStore(Protocol):
    async def fetch_candidates(
        self, bbox: BoundingBox, predicate: Optional[FeaturePredicate], limit: int
    ) -> List[CandidateRecord]: ...

    async def ping(self) -> bool: ...

def validate_rows(rows: Iterable[Any]) -> List[CandidateRecord]:
    """Validate raw rows, skipping (and logging) any that lack a usable id."""
    records: List[CandidateRecord] = []
    for row in rows:
        try:
            records.append(CandidateRecord.model_validate(row))
        except ValidationError as e:
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning("cafe_row_skipped", row_id=row_id, error_count=e.error_count())
    return records

class InMemoryCafeStore:
    """Store backed by a list of rows held in memory, e.g. a JSON seed file.

    Applies the same filters the remote store would: active-or-null flag,
    non-null coordinates, inclusive bounding box, feature predicate, row cap.
    """

    def __init__(self, rows: Optional[Iterable[Any]] = None):
        self.records: List[CandidateRecord] = validate_rows(rows or [])

    @classmethod
    def from_file(cls, path: str) -> "InMemoryCafeStore":
        """Load a JSON file shaped like {"cafes": [...]}."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise StoreConfigurationError(f"Cafe seed file not found at: {path}") from e
        except json.JSONDecodeError as e:
            raise StoreConfigurationError(f"Cafe seed file is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("cafes"), list):
            raise StoreConfigurationError("Cafe seed file must contain a top-level 'cafes' list")

        store = cls(data["cafes"])
        logger.info("cafe_seed_loaded", path=path, records=len(store.records))
        return store

    async def fetch_candidates(
        self, bbox: BoundingBox, predicate: Optional[FeaturePredicate], limit: int
    ) -> List[CandidateRecord]:
        matched: List[CandidateRecord] = []
        for record in self.records:
            if record.is_active is False:
                continue
            if record.latitude is None or record.longitude is None:
                continue
            if not bbox.contains(record.latitude, record.longitude):
                continue
            if predicate is not None and not predicate.matches(record):
                continue
            matched.append(record)
            if len(matched) >= limit:
                break
        return matched

    async def ping(self) -> bool:
        return True

class SupabaseCafeStore:
    """Reads cafes through Supabase's PostgREST endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "cafes",
        timeout_seconds: float = 5.0,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=timeout_seconds)
        )

    @staticmethod
    def build_params(
        bbox: BoundingBox, predicate: Optional[FeaturePredicate], limit: int
    ) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = [
            ("select", SELECT_COLUMNS),
            ("or", "(is_active.is.null,is_active.eq.true)"),
            ("latitude", "not.is.null"),
            ("longitude", "not.is.null"),
            ("latitude", f"gte.{bbox.min_lat!r}"),
            ("latitude", f"lte.{bbox.max_lat!r}"),
            ("longitude", f"gte.{bbox.min_lng!r}"),
            ("longitude", f"lte.{bbox.max_lng!r}"),
        ]
        if predicate is not None:
            params.extend(predicate.to_query_params())
        params.append(("limit", str(limit)))
        return params

    async def fetch_candidates(
        self, bbox: BoundingBox, predicate: Optional[FeaturePredicate], limit: int
    ) -> List[CandidateRecord]:
        params = self.build_params(bbox, predicate, limit)
        try:
            async with self._client_factory() as client:
                response = await client.get(self._endpoint, params=params, headers=self._headers)
                response.raise_for_status()
                rows = response.json()
        except httpx.TimeoutException as e:
            logger.error("store_fetch_timeout", endpoint=self._endpoint)
            raise UpstreamUnavailable(STORE_FETCH_STAGE, "Record store timed out.", e) from e
        except httpx.HTTPStatusError as e:
            logger.error("store_fetch_status_error", status_code=e.response.status_code)
            raise UpstreamUnavailable(
                STORE_FETCH_STAGE, f"Record store returned HTTP {e.response.status_code}.", e
            ) from e
        except httpx.RequestError as e:
            logger.error("store_fetch_request_error", error=str(e))
            raise UpstreamUnavailable(STORE_FETCH_STAGE, "Record store is unreachable.", e) from e
        except ValueError as e:
            logger.error("store_fetch_decode_error", error=str(e))
            raise UpstreamUnavailable(STORE_FETCH_STAGE, "Record store returned malformed JSON.", e) from e

        if not isinstance(rows, list):
            raise UpstreamUnavailable(STORE_FETCH_STAGE, "Record store returned an unexpected payload.")
        return validate_rows(rows)

    async def ping(self) -> bool:
        """Minimal query that exposes no data: one id column, zero rows."""
        try:
            async with self._client_factory() as client:
                response = await client.get(
                    self._endpoint, params=[("select", "id"), ("limit", "0")], headers=self._headers
                )
                response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning("store_ping_failed", error=str(e))
            return False

def create_cafe_store(config: Settings) -> CafeStore:
    """
    Build the configured record store. Called once at startup.

    Raises:
        StoreConfigurationError: if the backend settings are missing or invalid.
    """
    if config.CAFE_STORE_BACKEND == "supabase":
        url = (config.SUPABASE_URL or "").strip()
        key = (config.SUPABASE_ANON_KEY or "").strip()
        if not url or "placeholder" in url:
            raise StoreConfigurationError("SUPABASE_URL is missing or a placeholder")
        if not key or "placeholder" in key:
            raise StoreConfigurationError("SUPABASE_ANON_KEY is missing or a placeholder")
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise StoreConfigurationError(f"SUPABASE_URL is not a valid URL: {url!r}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise StoreConfigurationError(f"SUPABASE_URL must be an http(s) URL: {url!r}")
        return SupabaseCafeStore(
            base_url=url,
            api_key=key,
            table=config.SUPABASE_TABLE,
            timeout_seconds=config.STORE_TIMEOUT_SECONDS,
        )

    if config.CAFE_SEED_FILE:
        return InMemoryCafeStore.from_file(config.CAFE_SEED_FILE)

    logger.warning("memory_store_empty", detail="CAFE_SEED_FILE not set; every search returns no cafes")
    return InMemoryCafeStore()
