"""
HTTP server for the Watson Image Tagger service.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Optional
from aiohttp import web
from pydantic import ValidationError
from .models import HealthStatus, ImageAnalysisRequest
from .processor import ImageTagProcessor
from .tag_extractor import ExtractionError
from .watson_client import WatsonAPIError
from .config import settings
from .logging import get_logger
from . import __version__

MISSING_IMAGE_URL_MESSAGE = "No imageUrl was provided"


class TaggerServer:
    """aiohttp application exposing the tagging route plus health and metrics."""

    def __init__(self, processor: ImageTagProcessor, health_cache_seconds: Optional[int] = None):
        self.processor = processor
        self.logger = get_logger("server")
        self.cache_duration = settings.health_cache_seconds if health_cache_seconds is None else health_cache_seconds
        self._connection_cache = None  # (checked_at, ok)
        self.app = web.Application()
        self.setup_routes()

    def setup_routes(self):
        """Setup HTTP routes."""
        self.app.router.add_post("/api/image", self.image_handler)
        self.app.router.add_get("/health", self.health_handler)
        self.app.router.add_get("/metrics", self.metrics_handler)
        self.app.router.add_get("/", self.root_handler)

    async def _read_image_url(self, request) -> Optional[str]:
        try:
            body = await request.json()
            payload = ImageAnalysisRequest.model_validate(body)
        except (ValueError, ValidationError):
            return None
        return payload.imageUrl or None

    async def image_handler(self, request):
        """Analyse the posted image URL and return its tags."""
        image_url = await self._read_image_url(request)
        if not image_url:
            return web.Response(status=500, text=MISSING_IMAGE_URL_MESSAGE)

        try:
            result = await self.processor.tag_image(image_url)
        except WatsonAPIError as e:
            self.logger.error(f"❌ Watson request failed for {image_url}: {e}")
            return web.json_response({}, status=500)
        except ExtractionError as e:
            self.logger.error(f"❌ Could not extract tags for {image_url}: {e}")
            return web.json_response({}, status=500)

        return web.json_response(result.to_response())

    async def _test_connection_cached(self) -> bool:
        """Test the upstream connection, reusing a recent result."""
        now = time.time()
        if self._connection_cache is not None:
            checked_at, ok = self._connection_cache
            if now - checked_at < self.cache_duration:
                return ok

        ok = await self.processor.test_connection()
        self._connection_cache = (now, ok)
        return ok

    async def health_handler(self, request):
        """Health check endpoint."""
        connection_ok = await self._test_connection_cached()
        health_status = HealthStatus(
            status="healthy" if connection_ok else "unhealthy",
            version=__version__,
            metrics=self.processor.get_metrics(),
        )
        return web.json_response(
            health_status.model_dump(mode="json"),
            status=200 if connection_ok else 503
        )

    async def metrics_handler(self, request):
        """Metrics endpoint."""
        metrics = self.processor.get_metrics()

        # Add process metrics
        import psutil
        process = psutil.Process()
        metrics["process"] = {
            "cpu_percent": process.cpu_percent(),
            "memory_rss": process.memory_info().rss,
            "memory_percent": round(process.memory_percent(), 2),
        }

        return web.json_response(metrics)

    async def root_handler(self, request):
        """Root endpoint with service information."""
        info = {
            "service": "Watson Image Tagger",
            "version": __version__,
            "endpoints": {
                "/api/image": "POST {\"imageUrl\": ...} to get tags for an image",
                "/health": "Health check endpoint",
                "/metrics": "Processing metrics",
                "/": "Service information"
            },
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return web.json_response(info)

    async def start(self, host: Optional[str] = None, port: Optional[int] = None):
        """Start the HTTP server."""
        host = host or settings.host
        port = port or settings.port

        runner = web.AppRunner(self.app)
        await runner.setup()

        site = web.TCPSite(runner, host, port)
        await site.start()

        self.logger.info(f"🚀 Server started on {host}:{port}")

        return runner

    async def stop(self, runner):
        """Stop the HTTP server."""
        await runner.cleanup()
        self.logger.info("Server stopped")


def create_app(processor: ImageTagProcessor) -> web.Application:
    """Build the aiohttp application around a processor."""
    return TaggerServer(processor).app


async def run_server(processor: ImageTagProcessor, host: Optional[str] = None, port: Optional[int] = None):
    """Run the HTTP server until cancelled."""
    server = TaggerServer(processor)
    runner = await server.start(host, port)

    try:
        # Keep the server running
        while True:
            await asyncio.sleep(3600)
    finally:
        await server.stop(runner)
