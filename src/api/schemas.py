"""Pydantic request/response models for the image adapter API."""

from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Response Models
# =============================================================================


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "fal Image Adapter API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy"}]}}


class ImageStatusResponse(BaseModel):
    """Provider configuration status."""

    configured: bool
    available: bool
    provider: str = "fal"
    error: str | None = None


# =============================================================================
# Request Models
# =============================================================================


class ImageGenerateRequest(BaseModel):
    """Request body for image generation.

    ``params`` uses canonical parameter names (prompt, steps, cfg, imageUrls,
    width, height, ...).
    """

    model: str = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "model": "flux/krea",
                    "params": {"prompt": "a lighthouse at dusk", "width": 1024, "height": 768, "steps": 28},
                }
            ]
        }
    }
