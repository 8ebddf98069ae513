"""Image Generation Service - fal.ai provider adapter.

Translates a canonical ``(model, params)`` request into a fal.ai endpoint and
input payload, runs it through the queue transport, and normalizes the
different response shapes fal.ai models return into one result.
"""

import json
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from models.errors import ProviderErrorType, ProviderRuntimeError
from models.image_generation import ImageGenerationRequest, ImageGenerationResult
from services.fal_client import FalQueueClient
from utils.logging import get_logger

logger = get_logger(__name__)

# Every fal.ai endpoint lives under this namespace
FAL_NAMESPACE = "fal-ai/"

# Canonical parameter name -> fal.ai parameter name
PARAM_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "steps": "num_inference_steps",
        "cfg": "guidance_scale",
        "imageUrl": "image_url",
        "imageUrls": "image_urls",
    }
)

DEFAULT_INPUT: Mapping[str, Any] = MappingProxyType(
    {
        "enable_safety_checker": False,
        "num_images": 1,
    }
)

# Models that get acceleration="high" unless the caller overrides it
ACCELERATED_BY_DEFAULT = frozenset({"flux/krea"})

# Endpoint -> (suffix when input images are given, suffix otherwise)
ENDPOINT_SUFFIXES: Mapping[str, tuple[str, str]] = MappingProxyType(
    {
        "fal-ai/bytedance/seedream/v4": ("/edit", "/text-to-image"),
        "fal-ai/nano-banana": ("/edit", ""),
    }
)


def is_vacuous(value: Any) -> bool:
    """True for values that mean "not specified": None and empty lists."""
    return value is None or (isinstance(value, (list, tuple)) and len(value) == 0)


def translate_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Drop vacuous values and rename canonical keys to fal.ai names."""
    return {
        PARAM_ALIASES.get(key, key): value
        for key, value in params.items()
        if not is_vacuous(value)
    }


def fold_image_size(user_input: dict[str, Any]) -> dict[str, Any]:
    """Replace a width/height pair with a single ``image_size`` entry.

    A lone width or height is left untouched.
    """
    if "width" in user_input and "height" in user_input:
        user_input["image_size"] = {
            "width": user_input.pop("width"),
            "height": user_input.pop("height"),
        }
    return user_input


def strip_namespace(model: str) -> str:
    return model[len(FAL_NAMESPACE):] if model.startswith(FAL_NAMESPACE) else model


def build_input(model: str, params: Mapping[str, Any]) -> dict[str, Any]:
    """Build the final fal.ai input: defaults overlaid by translated user params."""
    default_input = dict(DEFAULT_INPUT)
    if strip_namespace(model) in ACCELERATED_BY_DEFAULT:
        default_input["acceleration"] = "high"

    user_input = fold_image_size(translate_params(params))
    return {**default_input, **user_input}


def resolve_endpoint(model: str, has_image_urls: bool) -> str:
    """Namespace the model id and apply any model-specific endpoint suffix."""
    endpoint = model if model.startswith(FAL_NAMESPACE) else f"{FAL_NAMESPACE}{model}"

    suffixes = ENDPOINT_SUFFIXES.get(endpoint)
    if suffixes is None:
        return endpoint

    with_images, without_images = suffixes
    return endpoint + (with_images if has_image_urls else without_images)


# =========================================================================
# Response normalization
# =========================================================================


def _match_images_list(payload: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """{ images: [{ url, width, height }] } - the most common shape."""
    images = payload.get("images")
    if isinstance(images, list) and images:
        return images[0] if isinstance(images[0], Mapping) else {}
    return None


def _match_single_image(payload: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """{ image: { url, width, height } }"""
    image = payload.get("image")
    if isinstance(image, Mapping):
        return image
    return None


def _match_direct_url(payload: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    """{ url, width, height }"""
    return payload if "url" in payload else None


# Tried in order; the first matcher returning a record wins
RESPONSE_MATCHERS: tuple[Callable[[Mapping[str, Any]], Optional[Mapping[str, Any]]], ...] = (
    _match_images_list,
    _match_single_image,
    _match_direct_url,
)


def _serialize_payload(payload: Any) -> str:
    try:
        return json.dumps(payload)
    except (TypeError, ValueError):
        return repr(payload)


def normalize_response(payload: Any) -> ImageGenerationResult:
    """Turn a fal.ai payload into an ImageGenerationResult.

    Raises:
        ProviderRuntimeError: UnexpectedResponseFormat if no known shape
            matches or the matched record has no URL
    """
    record = None
    if isinstance(payload, Mapping):
        for matcher in RESPONSE_MATCHERS:
            record = matcher(payload)
            if record is not None:
                break

    image_url = record.get("url") if record else None
    if not image_url:
        raw = _serialize_payload(payload)
        raise ProviderRuntimeError.create_error(
            ProviderErrorType.UNEXPECTED_RESPONSE_FORMAT,
            {
                "message": f"Unexpected response format from fal.ai: {raw}",
                "payload": raw,
            },
        )

    return ImageGenerationResult(
        image_url=image_url,
        width=record.get("width") or None,
        height=record.get("height") or None,
    )


def get_status_code(error: BaseException) -> Optional[int]:
    """Read an HTTP-like status code off a transport failure, if it has one."""
    for attr in ("status", "status_code"):
        status = getattr(error, attr, None)
        if isinstance(status, int):
            return status

    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class FalImageService:
    """fal.ai image generation adapter."""

    def __init__(
        self,
        api_key: str = "",
        client: Optional[FalQueueClient] = None,
        client_options: Optional[dict[str, Any]] = None,
    ):
        """Initialize the adapter.

        Args:
            api_key: fal.ai API key (required)
            client: Queue transport; a FalQueueClient is created if omitted
            client_options: Keyword arguments for the FalQueueClient created
                when no client is given

        Raises:
            ProviderRuntimeError: InvalidProviderAPIKey if api_key is empty
        """
        if not api_key:
            raise ProviderRuntimeError.create_error(
                ProviderErrorType.INVALID_PROVIDER_API_KEY,
                {"message": "fal.ai API key is not configured"},
            )

        if client is None:
            client = FalQueueClient(**(client_options or {}))
        self.client = client
        self.client.configure(api_key)

        logger.info("FalAI initialized", api_key=api_key)

    def build_input(self, request: ImageGenerationRequest) -> dict[str, Any]:
        """Final fal.ai input for a request."""
        return build_input(request.model, request.params)

    def resolve_endpoint(self, request: ImageGenerationRequest) -> str:
        """Fully resolved fal.ai endpoint for a request."""
        return resolve_endpoint(request.model, request.has_image_urls)

    async def check_health(self) -> dict:
        """Check if fal.ai is configured."""
        configured = self.client.is_configured
        return {
            "configured": configured,
            "available": configured,
            "provider": "fal",
        }

    async def generate(self, request: ImageGenerationRequest) -> ImageGenerationResult:
        """Generate a single image with fal.ai.

        Args:
            request: Canonical model id and parameters

        Returns:
            ImageGenerationResult with the first generated image

        Raises:
            ProviderRuntimeError: InvalidProviderAPIKey on a 401 from fal.ai,
                UnexpectedResponseFormat if the payload has no usable image,
                ProviderBizError for any other failure
        """
        logger.debug("Creating image", model=request.model, params=request.params)

        endpoint = self.resolve_endpoint(request)
        final_input = self.build_input(request)

        logger.debug("Calling fal.ai", endpoint=endpoint, input=final_input)

        try:
            payload = await self.client.subscribe(endpoint, final_input)
            logger.debug("Received data from fal.ai", payload=payload)
            return normalize_response(payload)

        except ProviderRuntimeError:
            raise
        except Exception as e:
            logger.error("Error generating image", endpoint=endpoint, error=str(e))

            if get_status_code(e) == 401:
                raise ProviderRuntimeError.create_error(
                    ProviderErrorType.INVALID_PROVIDER_API_KEY, {"error": e}
                ) from e
            raise ProviderRuntimeError.create_error(
                ProviderErrorType.PROVIDER_BIZ_ERROR, {"error": e}
            ) from e

    async def close(self) -> None:
        """Close the transport."""
        await self.client.close()
