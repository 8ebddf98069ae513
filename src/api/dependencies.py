"""Service singletons and dependency injection for the image adapter API."""

from services.image_generation_service import FalImageService
from utils.config import load_config

# Service singletons
_image_gen_service: FalImageService | None = None


def get_image_gen_service() -> FalImageService:
    """Get or create the image generation service instance.

    Raises:
        ProviderRuntimeError: InvalidProviderAPIKey if FAL_KEY is not configured
    """
    global _image_gen_service
    if _image_gen_service is None:
        config = load_config()
        _image_gen_service = FalImageService(
            api_key=config.get("fal_api_key", ""),
            client_options={
                "queue_url": config["fal_queue_url"],
                "poll_interval": config["fal_poll_interval"],
                "max_poll_attempts": config["fal_max_poll_attempts"],
                "timeout": config["fal_request_timeout"],
            },
        )
    return _image_gen_service


async def close_services() -> None:
    """Close service singletons (called on application shutdown)."""
    global _image_gen_service
    if _image_gen_service is not None:
        await _image_gen_service.close()
        _image_gen_service = None
