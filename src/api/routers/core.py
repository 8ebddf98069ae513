"""Root and health routes for the image adapter API."""

from api.schemas import HealthResponse, RootResponse
from fastapi import APIRouter

API_NAME = "fal Image Adapter API"
API_VERSION = "1.0.0"

router = APIRouter(tags=["Core"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="API root",
    description="Returns API name and version.",
)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": API_NAME, "version": API_VERSION}


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness probe; provider configuration is reported by /api/image/status.",
)
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
