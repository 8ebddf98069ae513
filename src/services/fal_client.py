"""fal.ai queue transport - submit a job, poll its status, fetch the result."""

import asyncio
from typing import Any, Optional

import httpx

from utils.logging import get_logger

logger = get_logger(__name__)

FAL_QUEUE_URL = "https://queue.fal.run"

# Queue status values reported by fal.ai
STATUS_IN_QUEUE = "IN_QUEUE"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"


class FalClientError(Exception):
    """Error from the fal.ai queue transport."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FalQueueClient:
    """Minimal async client for the fal.ai queue API.

    ``subscribe`` hides the submit/poll/fetch cycle behind a single awaitable
    call, so callers see one blocking operation per generation.
    """

    def __init__(
        self,
        queue_url: str = FAL_QUEUE_URL,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 600,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the queue client.

        Args:
            queue_url: Base URL of the fal.ai queue API
            poll_interval: Seconds to wait between status checks
            max_poll_attempts: Status checks before giving up on a job
            timeout: Per-request HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.queue_url = queue_url.rstrip("/")
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def is_configured(self) -> bool:
        return "Authorization" in self.client.headers

    def configure(self, credentials: str) -> None:
        """Attach the API key to every subsequent request."""
        self.client.headers["Authorization"] = f"Key {credentials}"
        logger.debug("fal queue client configured", credentials=credentials)

    async def submit(self, endpoint: str, arguments: dict[str, Any]) -> dict:
        """Submit a job and return the queue receipt (request_id, status/response URLs)."""
        url = f"{self.queue_url}/{endpoint}"
        response = await self.client.post(url, json=arguments)
        response.raise_for_status()

        receipt = response.json()
        request_id = receipt.get("request_id")
        if not request_id:
            raise FalClientError(f"fal.ai did not return a request id for {endpoint}")

        base = f"{url}/requests/{request_id}"
        receipt.setdefault("status_url", f"{base}/status")
        receipt.setdefault("response_url", base)
        return receipt

    async def wait_for_completion(self, status_url: str) -> dict:
        """Poll a job's status URL until the job completes."""
        for attempt in range(1, self.max_poll_attempts + 1):
            response = await self.client.get(status_url)
            response.raise_for_status()
            status_data = response.json()

            status = status_data.get("status")
            if status == STATUS_COMPLETED:
                if status_data.get("error"):
                    raise FalClientError(
                        f"fal.ai job failed: {status_data['error']}",
                        status_code=status_data.get("status_code"),
                    )
                return status_data

            if status not in (STATUS_IN_QUEUE, STATUS_IN_PROGRESS):
                raise FalClientError(f"Unknown fal.ai job status: {status}")

            logger.debug(
                "fal job pending",
                status=status,
                attempt=attempt,
                queue_position=status_data.get("queue_position"),
            )
            await asyncio.sleep(self.poll_interval)

        raise FalClientError(
            f"fal.ai job did not complete after {self.max_poll_attempts} status checks"
        )

    async def result(self, response_url: str) -> dict:
        """Fetch the payload of a completed job."""
        response = await self.client.get(response_url)
        response.raise_for_status()
        return response.json()

    async def subscribe(self, endpoint: str, arguments: dict[str, Any]) -> dict:
        """Run a job to completion and return its payload.

        Raises:
            httpx.HTTPStatusError: If any queue request returns a non-2xx status
            FalClientError: If the job fails or never completes
        """
        receipt = await self.submit(endpoint, arguments)
        request_id = receipt["request_id"]
        logger.info("fal job submitted", endpoint=endpoint, request_id=request_id)

        await self.wait_for_completion(receipt["status_url"])
        payload = await self.result(receipt["response_url"])

        logger.info("fal job completed", endpoint=endpoint, request_id=request_id)
        return payload

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
