from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .exceptions import GeoExplorerError
from .logging_config import setup_logging
from .routers import images

settings = get_settings()
setup_logging(settings.LOG_LEVEL)


# Create FastAPI application
app = FastAPI(
    title="GeoExplorer",
    description="Guess where a street-level panorama was taken",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(images.router, prefix="/api")


@app.exception_handler(GeoExplorerError)
async def geoexplorer_error_handler(request: Request, exc: GeoExplorerError):
    """Return every GeoExplorer error as its JSON payload."""
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to GeoExplorer API",
        "docs": "/docs",
        "health": "ok"
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
