# Data models for the proximity search pipeline and its public responses.

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union

NAME_FALLBACK = "Unknown Cafe"

# --- Request-scoped value types ---

class GeoPoint(BaseModel):
    """Immutable latitude/longitude pair in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude.")
    lng: float = Field(..., ge=-180, le=180, description="Longitude.")

class FeatureKind(str, Enum):
    WIFI = "wifi"
    OUTLETS = "outlets"
    QUIET = "quiet"
    NO_TIME_LIMIT = "time-limit"

class RadiusQuery(BaseModel):
    """Search around a point with an exact distance cutoff."""
    model_config = ConfigDict(frozen=True)

    center: GeoPoint
    radius_meters: int = Field(..., gt=0)
    limit: int = Field(..., gt=0)
    feature: Optional[FeatureKind] = None

class ViewportQuery(BaseModel):
    """Search everything inside an explicit map viewport."""
    model_config = ConfigDict(frozen=True)

    north_east: GeoPoint
    south_west: GeoPoint
    limit: int = Field(..., gt=0)
    feature: Optional[FeatureKind] = None

SearchRequest = Union[RadiusQuery, ViewportQuery]

class BoundingBox(BaseModel):
    """Axis-aligned pre-filter region; a superset of the area it was derived from."""
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

# --- Store records ---

class CandidateRecord(BaseModel):
    """A cafe row as returned by the record store, after validation."""
    model_config = ConfigDict(extra="ignore")

    id: str
    place_id: Optional[str] = None
    name: str = NAME_FALLBACK
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    work_score: Optional[float] = None
    ai_score: Optional[float] = None
    google_rating: Optional[float] = None
    google_ratings_total: Optional[int] = None
    is_work_friendly: Optional[bool] = None
    ai_wifi_quality: Optional[str] = None
    ai_power_outlets: Optional[str] = None
    ai_noise_level: Optional[str] = None
    ai_laptop_policy: Optional[str] = None
    is_verified: Optional[bool] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None
    created_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _require_id(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("id is required and must be a non-empty string")
        return value.strip()

    @field_validator("place_id", mode="before")
    @classmethod
    def _blank_place_id(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("place_id must be a string when present")
        return value.strip() or None

    @field_validator("name", mode="before")
    @classmethod
    def _name_fallback(cls, value):
        if isinstance(value, str) and value.strip():
            return value.strip()
        return NAME_FALLBACK

class ResultRecord(CandidateRecord):
    """Candidate with its exact great-circle distance from the search center."""
    distance_meters: float

# --- Public Data Transfer Objects (DTOs) ---

class CafeResult(BaseModel):
    """Public DTO for a single nearby cafe."""
    id: str
    place_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    address: Optional[str] = None
    lat: float
    lng: float
    distance: int = Field(..., description="Distance from the search center in whole meters.")
    score: Optional[float] = Field(None, description="Work score, falling back to the legacy AI score.")
    google_rating: Optional[float] = None
    google_ratings_total: Optional[int] = None
    is_work_friendly: Optional[bool] = None
    ai_wifi_quality: Optional[str] = None
    ai_power_outlets: Optional[str] = None
    ai_noise_level: Optional[str] = None
    ai_laptop_policy: Optional[str] = None
    is_verified: Optional[bool] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[str] = None
    href: str = Field(..., description="Canonical detail page path.")

class Viewport(BaseModel):
    ne: GeoPoint
    sw: GeoPoint

class NearbyResponse(BaseModel):
    """Public DTO for the nearby endpoints. Null fields are omitted on the wire."""
    center: GeoPoint
    radius: Optional[int] = None
    viewport: Optional[Viewport] = None
    feature: Optional[FeatureKind] = None
    count: int
    cafes: List[CafeResult] = Field(default_factory=list)

# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
    field: Optional[str] = Field(None, description="Offending request parameter, for INVALID_ARGUMENT.")
    stage: Optional[str] = Field(None, description="Pipeline stage that failed, for UPSTREAM_UNAVAILABLE.")
