from fastapi import APIRouter, Depends, Request

from app.api.deps import get_place_resolver
from app.middleware.rate_limit import GEOCODE_LIMIT, limiter
from app.schemas.common import ErrorResponse
from app.schemas.place import (
    PlaceNotFoundOut,
    PlaceResolvedOut,
    PlaceResolveRequest,
    PlaceResolveResponse,
)
from app.services.geocode import PlaceResolver, ResolvedPlace

router = APIRouter(prefix="/places", tags=["places"])


@router.post(
    "/resolve",
    response_model=PlaceResolveResponse,
    summary="Resolve a place name to coordinates",
    description="Cache first, then the external geocoder. Zero results is `ok: false`, not an error.",
    responses={
        400: {"model": ErrorResponse, "description": "Query shorter than 2 or longer than 80"},
        502: {"model": ErrorResponse, "description": "Geocoder failed"},
    },
)
@limiter.limit(GEOCODE_LIMIT)
async def resolve_place(
    request: Request,
    body: PlaceResolveRequest,
    svc: PlaceResolver = Depends(get_place_resolver),
):
    result = await svc.resolve(body.q)
    if isinstance(result, ResolvedPlace):
        return PlaceResolvedOut(
            lat=result.lat, lng=result.lng, name=result.name, source=result.source
        )
    return PlaceNotFoundOut()
