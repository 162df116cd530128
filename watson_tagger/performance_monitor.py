"""
Performance monitoring utilities for the Watson Image Tagger service.
"""

import time
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from .logging import get_logger


@dataclass
class PerformanceMetrics:
    """Performance metrics tracking."""

    # Watson API call tracking
    api_calls_total: int = 0
    api_calls_failed: int = 0
    api_response_times: List[float] = field(default_factory=list)

    # Image processing
    images_processed: int = 0
    total_processing_time: float = 0.0
    average_processing_time: Optional[float] = None

    def update_averages(self):
        """Update calculated averages."""
        if self.images_processed > 0:
            self.average_processing_time = self.total_processing_time / self.images_processed

    def get_average_response_time(self) -> float:
        """Average Watson response time in seconds."""
        if not self.api_response_times:
            return 0.0
        return sum(self.api_response_times) / len(self.api_response_times)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary for logging."""
        self.update_averages()
        return {
            "api_calls_total": self.api_calls_total,
            "api_calls_failed": self.api_calls_failed,
            "average_response_time": round(self.get_average_response_time(), 3),
            "images_processed": self.images_processed,
            "average_processing_time": round(self.average_processing_time or 0, 3),
        }


class PerformanceMonitor:
    """Performance monitoring and metrics collection."""

    def __init__(self):
        self.logger = get_logger("performance")
        self.metrics = PerformanceMetrics()
        self.start_time = time.time()

    def record_api_call(self, response_time: float):
        """Record a successful Watson API call."""
        self.metrics.api_calls_total += 1
        self.metrics.api_response_times.append(response_time)

    def record_api_failure(self):
        """Record a Watson API call that gave up."""
        self.metrics.api_calls_total += 1
        self.metrics.api_calls_failed += 1

    def record_image_processed(self, processing_time: float):
        """Record image processing completion."""
        self.metrics.images_processed += 1
        self.metrics.total_processing_time += processing_time

    def get_runtime_seconds(self) -> float:
        """Get total runtime in seconds."""
        return time.time() - self.start_time

    def log_performance_summary(self):
        """Log a summary of performance metrics."""
        runtime = self.get_runtime_seconds()
        metrics_dict = self.metrics.to_dict()

        self.logger.info(
            f"📈 Performance Summary: Runtime {runtime:.1f}s, "
            f"API calls {metrics_dict['api_calls_total']} "
            f"({metrics_dict['api_calls_failed']} failed), "
            f"avg response {metrics_dict['average_response_time']:.3f}s"
        )

    def get_metrics_dict(self) -> Dict[str, Any]:
        """Get all metrics as a dictionary."""
        runtime = self.get_runtime_seconds()
        metrics_dict = self.metrics.to_dict()
        metrics_dict["runtime_seconds"] = round(runtime, 2)
        return metrics_dict

    def reset(self):
        """Start a fresh metrics window."""
        self.metrics = PerformanceMetrics()
        self.start_time = time.time()


# Global performance monitor instance
performance_monitor = PerformanceMonitor()
