import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import (
    GeoExplorerError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ..models.game import ImageResult

logger = logging.getLogger(__name__)


class ImageApiClient:
    """Resolves round images through this service's own image endpoint.
    
    This is the path a front end takes: it never sees the Mapillary token and
    gets the already-trimmed image document back.
    """
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
    
    async def locate(self, lat: float, lon: float) -> ImageResult:
        """Fetch the image for a location from ``/api/getMapillaryImage``."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/api/getMapillaryImage",
                    params={"lat": lat, "lon": lon},
                )
                if response.is_success:
                    return ImageResult.model_validate(response.json())
                raise self._error_for(response)
        
        except GeoExplorerError:
            raise
        except httpx.TimeoutException:
            raise UpstreamError("Timed out waiting for the image service.", status_code=504)
        except httpx.RequestError as e:
            logger.error("Network error fetching image for %s,%s: %s", lat, lon, e)
            raise InternalError("Network error or server unavailable.")
        except Exception as e:
            logger.exception("Invalid image data received for %s,%s: %s", lat, lon, e)
            raise InternalError("Invalid image data received.")
    
    @staticmethod
    def _error_for(response: httpx.Response) -> GeoExplorerError:
        try:
            body: Dict[str, Any] = response.json()
        except ValueError:
            body = {"error": "Failed to parse error from API."}
        if not isinstance(body, dict):
            body = {"error": "Unknown API error"}
        message = str(body.get("error") or "Unknown API error")
        
        status_code = response.status_code
        if status_code == 400:
            return ValidationError(message)
        if status_code == 404:
            return NotFoundError(message)
        if status_code == 500:
            return InternalError(message)
        return UpstreamError(message, status_code=status_code, provider_payload=body)
