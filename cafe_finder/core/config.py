# Service configuration: store backend, endpoint ceilings, logging mode.

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Cafe Finder"
    VERSION: str = "0.2.0"
    BRIEF_DESCRIPTION: str = "Proximity search over a directory of laptop-friendly cafes."

    ENV: str = Field("development", description="Application environment (e.g., production, development)")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: Optional[Literal["console", "json"]] = Field(
        None, description="Log renderer; defaults to console in development and json elsewhere"
    )

    # --- Record store ---
    CAFE_STORE_BACKEND: Literal["memory", "supabase"] = Field(
        "memory", description="Which record store backs the search pipeline"
    )
    CAFE_SEED_FILE: Optional[str] = Field(
        None, description="JSON file with a top-level 'cafes' list, used by the memory backend"
    )
    SUPABASE_URL: Optional[str] = Field(None, description="Supabase project URL, e.g. https://xyz.supabase.co")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, description="Supabase anon (public) API key")
    SUPABASE_TABLE: str = Field("cafes", description="Table holding cafe records")
    STORE_TIMEOUT_SECONDS: float = Field(5.0, description="Timeout for a single store fetch")
    STORE_MAX_CANDIDATES: int = Field(500, description="Hard cap on raw rows fetched per search")

    # --- General endpoint (/api/cafes/nearby) ---
    NEARBY_DEFAULT_RADIUS_M: int = 2000
    NEARBY_MAX_RADIUS_M: int = 10000
    NEARBY_DEFAULT_LIMIT: int = 50
    NEARBY_MAX_LIMIT: int = 50

    # --- Feature endpoint (/api/cafes/nearby-feature) ---
    FEATURE_DEFAULT_RADIUS_M: int = 5000
    FEATURE_MAX_RADIUS_M: int = 20000
    FEATURE_DEFAULT_LIMIT: int = 50
    FEATURE_MAX_LIMIT: int = 100

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
