"""
Main processor for the Watson Image Tagger service.
"""

import time
from typing import Optional
from .watson_client import BaseImageAnalyzer, WatsonClient, WatsonAPIError
from .tag_extractor import extract, ExtractionError
from .models import ExtractionResult
from .logging import get_logger, MetricsLogger
from .performance_monitor import performance_monitor


class ImageTagProcessor:
    """Sends images to the analyzer and turns its results into tags."""

    def __init__(self, analyzer: Optional[BaseImageAnalyzer] = None):
        self.logger = get_logger("processor")
        self.metrics = MetricsLogger()
        self.analyzer = analyzer if analyzer is not None else WatsonClient()

    async def tag_image(self, image_url: str) -> ExtractionResult:
        """Analyse one image URL and extract its tags.

        Raises WatsonAPIError when the analyzer call fails (other analyzer
        errors are wrapped in it) and ExtractionError when its result cannot
        be read.
        """
        start_time = time.time()

        try:
            raw = await self.analyzer.analyze(image_url)
        except WatsonAPIError as e:
            self.metrics.log_upstream_failure(image_url, str(e))
            raise
        except Exception as e:
            self.metrics.log_upstream_failure(image_url, str(e))
            raise WatsonAPIError(f"Analyzer failed: {e}") from e

        try:
            result = extract(raw)
        except ExtractionError as e:
            self.metrics.log_malformed_result(image_url, str(e))
            raise

        processing_time = time.time() - start_time
        self.metrics.log_image_tagged(image_url, len(result.tags), processing_time)
        performance_monitor.record_image_processed(processing_time)

        self.logger.info(
            f"🏷️  {len(result.tags)} tags for {image_url}: "
            f"{', '.join(tag.label for tag in result.tags)}"
        )
        return result

    def get_metrics(self):
        """Get current processing metrics."""
        return {
            "basic_metrics": self.metrics.get_metrics(),
            "performance_metrics": performance_monitor.get_metrics_dict(),
        }

    async def test_connection(self) -> bool:
        """Test the connection to the analyzer."""
        return await self.analyzer.test_connection()

    async def close(self):
        """Clean up resources."""
        performance_monitor.log_performance_summary()
        await self.analyzer.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
