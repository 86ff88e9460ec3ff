from typing import Optional

from fastapi import APIRouter, Depends

from ..config import get_settings
from ..models.game import ErrorResponse, ImageResult
from ..services.mapillary import MapillaryClient

router = APIRouter(tags=["Images"])


def get_mapillary_client() -> MapillaryClient:
    """Build a Mapillary client from current settings."""
    settings = get_settings()
    return MapillaryClient(
        settings.MAPILLARY_ACCESS_TOKEN,
        api_url=settings.MAPILLARY_API_URL,
        timeout=settings.MAPILLARY_TIMEOUT_SECONDS,
        bbox_delta=settings.BBOX_DELTA,
    )


@router.get(
    "/getMapillaryImage",
    response_model=ImageResult,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def get_mapillary_image(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    client: MapillaryClient = Depends(get_mapillary_client),
):
    """Find a panoramic image near the given coordinates."""
    # lat/lon are taken as raw strings so bad input gets our 400 body, not a 422
    return await client.locate(lat, lon)
