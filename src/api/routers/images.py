"""Image generation routes for the fal image adapter API."""

import logging
import uuid

from api.dependencies import get_image_gen_service
from api.schemas import ImageGenerateRequest, ImageStatusResponse
from fastapi import APIRouter, HTTPException
from models.errors import ProviderErrorType, ProviderRuntimeError
from models.image_generation import ImageGenerationRequest
from utils.logging import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Image Generation"])

# Classified provider error -> HTTP status returned to API clients
ERROR_STATUS_CODES = {
    ProviderErrorType.INVALID_PROVIDER_API_KEY: 401,
    ProviderErrorType.UNEXPECTED_RESPONSE_FORMAT: 502,
    ProviderErrorType.PROVIDER_BIZ_ERROR: 502,
}


def _to_http_exception(error: ProviderRuntimeError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.error_type, 500),
        detail=error.to_dict(),
    )


@router.get("/api/image/status", response_model=ImageStatusResponse, summary="Image generation status", description="Check whether the fal.ai provider is configured.")
async def get_image_status() -> dict:
    """fal.ai provider status."""
    try:
        service = get_image_gen_service()
    except ProviderRuntimeError as e:
        return {"configured": False, "available": False, "provider": e.provider, "error": str(e)}
    return await service.check_health()


@router.post("/api/image/generate", summary="Generate image", description="Generate a single image with fal.ai and return its URL.", responses={400: {"description": "Invalid parameters"}, 401: {"description": "Invalid provider API key"}, 502: {"description": "Provider failure"}})
async def generate_image(request: ImageGenerateRequest) -> dict:
    """Generate an image and return ``{imageUrl, width?, height?}``."""
    if not request.model.strip():
        raise HTTPException(status_code=400, detail="Model is required")

    request_id = uuid.uuid4().hex[:12]
    set_request_context(request_id)
    try:
        service = get_image_gen_service()
        result = await service.generate(
            ImageGenerationRequest(model=request.model.strip(), params=request.params)
        )
        return result.to_dict()

    except ProviderRuntimeError as e:
        logger.error(f"Image generation failed for request {request_id}: {e}")
        raise _to_http_exception(e) from e
    finally:
        clear_request_context()
