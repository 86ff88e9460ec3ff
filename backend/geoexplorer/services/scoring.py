from math import radians, sin, cos, sqrt, atan2, floor
from typing import Sequence, Tuple


LatLon = Tuple[float, float]

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Guesses closer than this are worth full points
PERFECT_DISTANCE_KM = 0.25

# Guesses farther than this are worth nothing
MAX_SCORING_DISTANCE_KM = 2000.0

# 5000 points spread linearly over 2000 km
POINTS_LOST_PER_KM = 2.5


def lon_lat_to_lat_lon(coordinates: Sequence[float]) -> LatLon:
    """
    Convert a provider ``[lon, lat]`` pair (GeoJSON order) to ``(lat, lon)``.
    
    Mapillary reports geometry as ``[longitude, latitude]`` while the distance
    math and the map both work in ``(latitude, longitude)``.
    """
    if len(coordinates) != 2:
        raise ValueError(f"Expected a [lon, lat] pair, got {list(coordinates)!r}")
    lon, lat = coordinates
    return float(lat), float(lon)


def haversine_distance(coords1: Sequence[float], coords2: Sequence[float]) -> float:
    """
    Calculate the great circle distance between two points on Earth.
    
    Args:
        coords1: ``(lat, lon)`` of the first point (degrees)
        coords2: ``(lat, lon)`` of the second point (degrees)
        
    Returns:
        Distance in kilometers
    """
    lat1, lon1 = coords1
    lat2, lon2 = coords2
    
    # Convert coordinates to radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    
    # Haversine formula
    a = sin(dlat / 2)**2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2)**2
    # rounding can push a past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    
    return EARTH_RADIUS_KM * c


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def calculate_score(distance_km: float, max_points: int = 5000) -> int:
    """
    Calculate score based on distance from actual location.
    
    Scoring system:
    - < 0.25km: max_points
    - > 2000km: 0 points
    - otherwise: max_points - 2.5 points per km, rounded half up
    
    Args:
        distance_km: Distance in kilometers
        max_points: Maximum possible points
        
    Returns:
        Score (0 to max_points)
    """
    if distance_km < PERFECT_DISTANCE_KM:
        return max_points
    if distance_km > MAX_SCORING_DISTANCE_KM:
        return 0
    
    score = max_points - distance_km * POINTS_LOST_PER_KM
    return max(0, _round_half_up(score))
