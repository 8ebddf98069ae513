# Data models for the fal image adapter
from .errors import ProviderErrorType, ProviderRuntimeError
from .image_generation import ImageGenerationRequest, ImageGenerationResult

__all__ = [
    "ProviderErrorType",
    "ProviderRuntimeError",
    "ImageGenerationRequest",
    "ImageGenerationResult",
]
