from pydantic import BaseModel, Field
from typing import Optional, List, Tuple

from ..services.scoring import lon_lat_to_lat_lon


class Location(BaseModel):
    """A fixed round location."""
    name: str
    lat: float
    lon: float
    
    class Config:
        frozen = True


class ImageResult(BaseModel):
    """Panoramic image resolved for a location."""
    image_id: str = Field(alias="imageId")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    # [longitude, latitude] as reported by Mapillary
    coordinates: Optional[List[float]] = None
    compass_angle: Optional[float] = Field(default=None, alias="compassAngle")
    
    class Config:
        frozen = True
        populate_by_name = True
    
    @property
    def is_playable(self) -> bool:
        """Whether the image can be shown and scored against."""
        return bool(self.image_id and self.image_url and self.coordinates and len(self.coordinates) == 2)
    
    def true_lat_lon(self) -> Tuple[float, float]:
        """True location of the image as ``(lat, lon)``."""
        if not self.coordinates:
            raise ValueError(f"Image {self.image_id} has no coordinates")
        return lon_lat_to_lat_lon(self.coordinates)


class RoundResult(BaseModel):
    """Outcome of a single submitted guess."""
    round_number: int
    location_name: str
    image_id: str
    true_coordinates: Tuple[float, float]
    guessed_coordinates: Tuple[float, float]
    distance_km: float = Field(ge=0)
    score: int = Field(ge=0)
    
    class Config:
        frozen = True


class ErrorResponse(BaseModel):
    """Error body returned by the API."""
    error: str
