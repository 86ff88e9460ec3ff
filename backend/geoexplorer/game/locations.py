from typing import Tuple

from ..models.game import Location

# Played in this order every game.
DEFAULT_LOCATIONS: Tuple[Location, ...] = (
    Location(name="New York City", lat=40.7128, lon=-74.0060),
    Location(name="London", lat=51.5074, lon=-0.1278),
    Location(name="Tokyo", lat=35.6895, lon=139.6917),
    Location(name="Sydney", lat=-33.8688, lon=151.2093),
    Location(name="Paris", lat=48.8566, lon=2.3522),
)
