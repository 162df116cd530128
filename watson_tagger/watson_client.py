"""
Watson Visual Recognition API client.
"""

import asyncio
import time
from typing import Any, Dict, Optional
import httpx
from .config import settings
from .logging import get_logger
from .performance_monitor import performance_monitor


class WatsonAPIError(Exception):
    """Custom exception for Watson API errors."""
    pass


class BaseImageAnalyzer:
    """Base class for image analyzers handed to the processor."""

    async def analyze(self, image_url: str) -> Dict[str, Any]:
        """Return the raw ``{"general": ..., "faces": ...}`` result for an image URL.

        Failures should be raised as WatsonAPIError.
        """
        raise NotImplementedError

    async def test_connection(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class WatsonClient(BaseImageAnalyzer):
    """Client for the Watson Visual Recognition v3 API."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.watson_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.watson_api_key
        self.version = settings.watson_version
        self.timeout = settings.request_timeout
        self.max_retries = settings.max_retries
        self.retry_delay = settings.retry_delay
        self.logger = get_logger("watson_client")

        if not self.api_key:
            self.logger.warning("⚠️  WATSON_API_KEY is not set, requests will likely be rejected")

        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            auth=("apikey", self.api_key),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Make an HTTP request with retry logic."""
        url = f"{self.base_url}{endpoint}"
        query = {"version": self.version}
        if params:
            query.update(params)
        request_start = time.time()

        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method=method, url=url, params=query)
                response.raise_for_status()

                performance_monitor.record_api_call(time.time() - request_start)
                return response

            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500 and attempt < self.max_retries:
                    self.logger.warning(
                        f"⚠️  Watson server error {e.response.status_code}, retrying "
                        f"(attempt {attempt + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))  # Exponential backoff
                    continue
                performance_monitor.record_api_failure()
                self.logger.error(
                    f"❌ HTTP {method} {endpoint} failed: {e.response.status_code} - {e.response.text}"
                )
                raise WatsonAPIError(f"HTTP {e.response.status_code}: {e.response.text}")

            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    self.logger.warning(f"Request error, retrying (attempt {attempt + 1}/{self.max_retries}): {e}")
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                    continue
                performance_monitor.record_api_failure()
                self.logger.error(f"❌ Request failed: {str(e)}")
                raise WatsonAPIError(f"Request failed: {e}")

    async def _get_json(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._make_request("GET", endpoint, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise WatsonAPIError(f"Invalid JSON from {endpoint}: {e}")

    async def classify(self, image_url: str) -> Dict[str, Any]:
        """Run the general classifier on an image URL."""
        params = {"url": image_url}
        params.update(settings.get_classify_params())
        return await self._get_json("/v3/classify", params)

    async def detect_faces(self, image_url: str) -> Dict[str, Any]:
        """Run face detection on an image URL."""
        return await self._get_json("/v3/detect_faces", {"url": image_url})

    async def analyze(self, image_url: str) -> Dict[str, Any]:
        """Classify the image and detect faces concurrently."""
        self.logger.debug(f"🔍 Analysing image: {image_url}")
        general, faces = await asyncio.gather(
            self.classify(image_url),
            self.detect_faces(image_url),
        )
        return {"general": general, "faces": faces}

    async def test_connection(self) -> bool:
        """Test the connection to Watson by listing classifiers."""
        try:
            await self._make_request("GET", "/v3/classifiers")
            self.logger.info("✅ Successfully connected to Watson")
            return True
        except WatsonAPIError as e:
            self.logger.error(f"❌ Failed to connect to Watson: {e}")
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
