"""Models for fal.ai image generation requests and results."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ImageGenerationRequest:
    """Provider-agnostic image generation request.

    ``params`` uses canonical parameter names (``prompt``, ``steps``, ``cfg``,
    ``imageUrls``, ``width``...). Values may be None or empty lists, which
    mean "not specified".
    """

    model: str
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def has_image_urls(self) -> bool:
        """Whether the request carries at least one input image URL."""
        image_urls = self.params.get("imageUrls")
        return bool(image_urls) and isinstance(image_urls, (list, tuple))


@dataclass
class ImageGenerationResult:
    """Normalized result of a single image generation."""

    image_url: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses.

        Width and height are only included when truthy.
        """
        result: dict[str, Any] = {"imageUrl": self.image_url}
        if self.width:
            result["width"] = self.width
        if self.height:
            result["height"] = self.height
        return result
