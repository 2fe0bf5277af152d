from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import uuid

import structlog

from cafe_finder.core.config import Settings, settings
from cafe_finder.core.errors import InvalidArgument, UpstreamUnavailable
from cafe_finder.api.routes import router as api_router
from cafe_finder.logging import configure_logging
from cafe_finder.middleware.logging import LoggingMiddleware
from cafe_finder.models.dto import ErrorResponse
from cafe_finder.services.cafe_store import create_cafe_store
from cafe_finder.services.search_service import NearbySearchService
from cafe_finder.services.validation import SearchLimits

logger = structlog.get_logger(__name__)

NO_STORE = {"Cache-Control": "no-store"}

def _error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": error.model_dump(exclude_none=True)},
        headers=NO_STORE,
    )

def create_app(config: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("application_startup", version=config.VERSION, store_backend=config.CAFE_STORE_BACKEND)
        # Fails startup on bad store configuration
        store = create_cafe_store(config)
        app.state.search_service = NearbySearchService(store, max_candidates=config.STORE_MAX_CANDIDATES)
        yield
        logger.info("application_shutdown")

    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        description=config.BRIEF_DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.general_limits = SearchLimits.general(config)
    app.state.feature_limits = SearchLimits.feature(config)
    app.add_middleware(LoggingMiddleware)
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check(request: Request):
        service: Optional[NearbySearchService] = getattr(request.app.state, "search_service", None)
        store_ok = service is not None and await service.store.ping()
        if not store_ok:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "degraded", "store": "unavailable"},
                headers=NO_STORE,
            )
        return JSONResponse(content={"status": "ok", "store": "ok"}, headers=NO_STORE)

    @app.exception_handler(InvalidArgument)
    async def invalid_argument_handler(request: Request, exc: InvalidArgument):
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(error=exc.code, detail=exc.message, field=exc.field),
        )

    @app.exception_handler(UpstreamUnavailable)
    async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailable):
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorResponse(error=exc.code, detail=exc.message, stage=exc.stage),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        logger.error("unhandled_exception", error_id=error_id, error=str(exc), exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": {
                    "error": "INTERNAL_SERVER_ERROR",
                    "detail": "An unexpected error occurred. Please report this error ID.",
                    "error_id": error_id,
                }
            },
            headers=NO_STORE,
        )

    return app

configure_logging()
app = create_app()
