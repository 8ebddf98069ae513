"""Shared pytest fixtures for fal image adapter tests."""

import sys
from pathlib import Path
from typing import Any, Optional

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


class FakeFalClient:
    """In-memory stand-in for FalQueueClient that records every call."""

    def __init__(self, payload: Any = None, error: Optional[BaseException] = None):
        self.payload = payload if payload is not None else {"images": [{"url": "https://fal.media/a.png"}]}
        self.error = error
        self.credentials: Optional[str] = None
        self.calls: list[tuple[str, dict]] = []
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.credentials)

    def configure(self, credentials: str) -> None:
        self.credentials = credentials

    async def subscribe(self, endpoint: str, arguments: dict) -> Any:
        self.calls.append((endpoint, arguments))
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self) -> None:
        self.closed = True


class StatusError(Exception):
    """Transport failure carrying an HTTP-like ``status`` attribute."""

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


@pytest.fixture
def fake_client() -> FakeFalClient:
    """Fake transport returning a single-image payload."""
    return FakeFalClient()


@pytest.fixture
def make_service():
    """Factory building a FalImageService around a FakeFalClient."""
    from services.image_generation_service import FalImageService

    def _make(payload: Any = None, error: Optional[BaseException] = None, api_key: str = "test_fal_key"):
        client = FakeFalClient(payload=payload, error=error)
        return FalImageService(api_key=api_key, client=client), client

    return _make


@pytest.fixture
def sample_config() -> dict:
    """Sample configuration for testing."""
    return {
        "fal_api_key": "test_fal_key",
        "fal_queue_url": "https://queue.fal.test",
        "fal_poll_interval": 0.01,
        "fal_max_poll_attempts": 5,
        "fal_request_timeout": 10.0,
        "log_level": "INFO",
        "log_json": False,
    }
