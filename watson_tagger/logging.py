"""
Logging configuration for the Watson Image Tagger service.
"""

import logging
from typing import Any, Dict
from rich.logging import RichHandler
from .config import settings


def setup_logging() -> None:
    """Configure clean, simple logging output."""

    # Configure standard library logging with Rich handler
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
        handlers=[RichHandler(
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
            show_level=False,
            markup=True
        )],
        force=True  # Override any existing configuration
    )

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def get_logger(name: str):
    """Get a standard logger instance."""
    return logging.getLogger(name)


class MetricsLogger:
    """Logger for tracking tagging outcomes."""

    def __init__(self):
        self.logger = get_logger("metrics")
        self.metrics: Dict[str, Any] = {
            "images_tagged": 0,
            "tags_returned": 0,
            "upstream_failures": 0,
            "malformed_results": 0,
            "processing_time": 0.0,
        }

    def log_image_tagged(self, image_url: str, tags_count: int, processing_time: float) -> None:
        """Log a successfully tagged image."""
        self.metrics["images_tagged"] += 1
        self.metrics["tags_returned"] += tags_count
        self.metrics["processing_time"] += processing_time

        # Only log individual images at DEBUG level to avoid spam
        self.logger.debug(
            f"Image tagged: {image_url} | Tags: {tags_count} | Time: {processing_time:.3f}s | "
            f"Total: {self.metrics['images_tagged']} images, {self.metrics['tags_returned']} tags"
        )

    def log_upstream_failure(self, image_url: str, error: str) -> None:
        """Log a failed Watson request."""
        self.metrics["upstream_failures"] += 1
        self.logger.warning(f"Watson request failed: {image_url} | Error: {error}")

    def log_malformed_result(self, image_url: str, error: str) -> None:
        """Log a Watson result that could not be turned into tags."""
        self.metrics["malformed_results"] += 1
        self.logger.warning(f"Malformed Watson result: {image_url} | Error: {error}")

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.copy()
