# path: route-extract-api/route_extract/api/routes/extract.py

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from route_extract.config import Settings, get_settings
from route_extract.models.route_models import ErrorResponse, ExtractRequest, RouteResult
from route_extract.services.errors import InvalidWaypoints, OracleError, OracleResponseError
from route_extract.services.reconstruction import ReconstructionPipeline
from route_extract.services.road_snapper import OsrmRoadSnapper
from route_extract.services.vision_oracle import ClaudeVisionOracle, VisionOracle

router = APIRouter(prefix="/api", tags=["extract"])


@lru_cache(maxsize=4)
def _claude_oracle(settings: Settings) -> ClaudeVisionOracle:
    # One client (and connection pool) per configuration
    return ClaudeVisionOracle.from_api_key(
        settings.anthropic_api_key,
        timeout_s=settings.oracle_timeout_s,
        model=settings.oracle_model,
        max_tokens=settings.oracle_max_tokens,
        key_waypoints=settings.snap_to_roads,
    )


def get_oracle(settings: Settings = Depends(get_settings)) -> VisionOracle:
    if not settings.anthropic_api_key:
        raise HTTPException(status_code=500, detail="API key not configured")
    return _claude_oracle(settings)


def get_pipeline(settings: Settings = Depends(get_settings)) -> ReconstructionPipeline:
    snapper = OsrmRoadSnapper(
        base_url=settings.osrm_base_url,
        profile=settings.osrm_profile,
        timeout_s=settings.osrm_timeout_s,
    )
    return ReconstructionPipeline(settings, snapper=snapper)


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.options("/extract", include_in_schema=False)
def extract_preflight() -> Response:
    return Response(status_code=200)


@router.post(
    "/extract",
    response_model=RouteResult,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def extract_route(
    req: ExtractRequest,
    oracle: VisionOracle = Depends(get_oracle),
    pipeline: ReconstructionPipeline = Depends(get_pipeline),
):
    if not req.image:
        raise HTTPException(status_code=400, detail="No image provided")

    try:
        extraction = oracle.extract(req.image, req.media_type)
    except OracleResponseError as e:
        return _error(e.status_code, ErrorResponse(error=e.message, raw=e.raw))
    except OracleError as e:
        return _error(e.status_code, ErrorResponse(error=e.message, details=e.details))

    try:
        return pipeline.reconstruct(extraction.waypoints, extraction.metadata)
    except InvalidWaypoints as e:
        return _error(
            422,
            ErrorResponse(
                error="Could not identify enough waypoints",
                details=str(e),
                notes=extraction.metadata.notes,
            ),
        )
