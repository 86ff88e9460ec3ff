import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import (
    ConfigurationError,
    GeoExplorerError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ..models.game import ImageResult

logger = logging.getLogger(__name__)

IMAGE_FIELDS = "id,thumb_1024_url,thumb_original_url,computed_geometry,is_pano,compass_angle"


def parse_coordinate(value: Any, name: str, limit: float) -> float:
    """
    Parse a latitude/longitude value coming from a query string or a caller.
    
    Args:
        value: Raw value (string or number)
        name: Parameter name used in error messages
        limit: Absolute bound (90 for latitude, 180 for longitude)
        
    Returns:
        The coordinate as a float
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Latitude and longitude are required.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid latitude or longitude values.")
    if not math.isfinite(number) or abs(number) > limit:
        raise ValidationError(f"Invalid {name} value: {value}")
    return number


def build_bbox(lat: float, lon: float, delta: float = 0.01) -> List[float]:
    """Bounding box ``[min_lon, min_lat, max_lon, max_lat]`` centered on a point."""
    return [lon - delta, lat - delta, lon + delta, lat + delta]


class MapillaryClient:
    """Client for finding panoramic images through the Mapillary Graph API."""
    
    def __init__(
        self,
        access_token: Optional[str],
        api_url: str = "https://graph.mapillary.com",
        timeout: float = 10.0,
        bbox_delta: float = 0.01,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.bbox_delta = bbox_delta
        self._transport = transport
        self.headers = {"Accept": "application/json"}
    
    def build_params(self, lat: float, lon: float) -> Dict[str, Any]:
        """Query parameters for a single-panorama bounding-box search."""
        min_lon, min_lat, max_lon, max_lat = build_bbox(lat, lon, self.bbox_delta)
        return {
            "access_token": self.access_token,
            "fields": IMAGE_FIELDS,
            "bbox": f"{min_lon},{min_lat},{max_lon},{max_lat}",
            "is_pano": "true",
            "limit": 1,  # only the first image is used
        }
    
    async def locate(self, lat: Any, lon: Any) -> ImageResult:
        """
        Find one panoramic image near the given coordinates.
        
        Args:
            lat: Latitude in degrees
            lon: Longitude in degrees
            
        Returns:
            The first image Mapillary returns inside the bounding box
            
        Raises:
            ConfigurationError: access token not configured
            ValidationError: missing or malformed coordinates
            UpstreamError: Mapillary answered with an error or timed out
            NotFoundError: no panoramic image in the area
            InternalError: anything else went wrong
        """
        if not self.access_token:
            logger.error("Mapillary access token not configured.")
            raise ConfigurationError("Mapillary access token not configured.")
        
        lat_num = parse_coordinate(lat, "latitude", 90.0)
        lon_num = parse_coordinate(lon, "longitude", 180.0)
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.api_url}/images",
                    headers=self.headers,
                    params=self.build_params(lat_num, lon_num),
                )
                
                if not response.is_success:
                    raise self._upstream_error(response)
                
                data = response.json().get("data") or []
                if not data:
                    raise NotFoundError("No panoramic images found for this location.")
                
                return self._to_image_result(data[0])
        
        except GeoExplorerError:
            raise
        except httpx.TimeoutException as e:
            logger.warning("Mapillary request timed out after %ss: %s", self.timeout, e)
            raise UpstreamError(
                f"Timed out fetching image from Mapillary after {self.timeout}s.",
                status_code=504,
            )
        except Exception as e:
            logger.exception("Server error while fetching image from Mapillary: %s", e)
            raise InternalError("Server error while fetching image from Mapillary.")
    
    def _upstream_error(self, response: httpx.Response) -> UpstreamError:
        status_code = response.status_code or 502
        message = f"Failed to fetch image from Mapillary. Status: {status_code}"
        provider_payload = None
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("error"):
                provider_payload = body
        except ValueError as e:
            logger.warning("Error parsing Mapillary error response: %s", e)
        
        logger.warning("Mapillary request failed with status %s", status_code)
        return UpstreamError(message, status_code=status_code, provider_payload=provider_payload)
    
    @staticmethod
    def _to_image_result(image: Dict[str, Any]) -> ImageResult:
        geometry = image.get("computed_geometry")
        return ImageResult(
            image_id=str(image["id"]),
            # Prefer original, fall back to the 1024px thumbnail
            image_url=image.get("thumb_original_url") or image.get("thumb_1024_url"),
            coordinates=geometry.get("coordinates") if geometry else None,
            compass_angle=image.get("compass_angle"),
        )
