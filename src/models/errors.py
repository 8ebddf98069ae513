"""Classified provider errors surfaced to callers of the image adapters."""

from enum import Enum
from typing import Any, Optional


class ProviderErrorType(str, Enum):
    """Kinds of failure an image provider adapter can report."""

    INVALID_PROVIDER_API_KEY = "InvalidProviderAPIKey"
    UNEXPECTED_RESPONSE_FORMAT = "UnexpectedResponseFormat"
    PROVIDER_BIZ_ERROR = "ProviderBizError"


class ProviderRuntimeError(Exception):
    """Error raised by a provider adapter, tagged with its classification.

    The adapter only picks the ``error_type`` and fills ``details``. How the
    error is presented (HTTP status, CLI message) is up to the caller.
    """

    def __init__(
        self,
        error_type: ProviderErrorType,
        details: Optional[dict[str, Any]] = None,
        provider: str = "fal",
    ):
        self.error_type = error_type
        self.details = details or {}
        self.provider = provider
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        message = self.details.get("message")
        if message:
            return f"{self.error_type.value}: {message}"
        error = self.details.get("error")
        if error is not None:
            return f"{self.error_type.value}: {error}"
        return self.error_type.value

    @classmethod
    def create_error(
        cls,
        error_type: ProviderErrorType,
        details: Optional[dict[str, Any]] = None,
        provider: str = "fal",
    ) -> "ProviderRuntimeError":
        """Build a classified error from a kind and free-form details."""
        return cls(error_type, details=details, provider=provider)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        details = {}
        for key, value in self.details.items():
            # Wrapped exceptions are not JSON serializable
            details[key] = str(value) if isinstance(value, BaseException) else value
        return {
            "error_type": self.error_type.value,
            "provider": self.provider,
            "details": details,
        }
