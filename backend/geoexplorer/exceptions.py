"""Error taxonomy shared by the image locators, the round engine and the API.

Every error carries the HTTP status it maps to and the JSON payload the API
returns for it, so the FastAPI handler in ``main`` needs no per-type logic.
"""
from typing import Any, Dict, Optional


class GeoExplorerError(Exception):
    """Base exception for GeoExplorer errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(GeoExplorerError):
    """Raised when the server is misconfigured (e.g. missing provider credential)."""

    status_code = 500


class ValidationError(GeoExplorerError):
    """Raised when latitude/longitude input is missing or malformed."""

    status_code = 400


class UpstreamError(GeoExplorerError):
    """Raised when the imagery provider answers with a failure or times out.

    ``provider_payload`` holds the provider's own error body when it could be
    parsed; it is forwarded to the client unchanged.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider_payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code or 502)
        self.provider_payload = provider_payload

    @property
    def payload(self) -> Dict[str, Any]:
        if self.provider_payload is not None:
            return self.provider_payload
        return {"error": self.message}


class NotFoundError(GeoExplorerError):
    """Raised when no panoramic image exists in the search area."""

    status_code = 404


class InternalError(GeoExplorerError):
    """Raised for unexpected failures while talking to the provider."""

    status_code = 500


class NoGuessError(GeoExplorerError):
    """Raised when a guess is submitted before one was placed on the map."""

    status_code = 400


class RoundStateError(GeoExplorerError):
    """Raised when a game action is not valid in the current phase."""

    status_code = 409
