from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""
    
    # Mapillary Connection
    MAPILLARY_ACCESS_TOKEN: Optional[str] = None
    MAPILLARY_API_URL: str = "https://graph.mapillary.com"
    MAPILLARY_TIMEOUT_SECONDS: float = 10.0
    
    # Image search
    BBOX_DELTA: float = 0.01  # ~1.1km at the equator
    
    # Game Configuration
    MAX_POINTS: int = 5000
    
    # Server
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]
    
    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
