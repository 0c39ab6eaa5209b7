"""
Prometheus metrics for the GCS gzip uploader.

Metrics Provided:
    - upload_requests_total: Counter for upload operations by status and bucket
    - upload_bytes_total: Counter for uncompressed bytes uploaded
    - upload_duration_seconds: Histogram for end-to-end upload latency
    - bucket_creations_total: Counter for buckets created on demand
    - gcs_api_errors_total: Counter for GCS API errors by operation

Usage:
    from gzupload.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        result = upload_file(connection, "my-bucket", "notes.txt")

Set METRICS_ENABLED=false to turn every recorder into a no-op.
"""

import os
from contextlib import nullcontext
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    REGISTRY,
    start_http_server,
)

from gzupload.utils.logging import get_logger

logger = get_logger(__name__)


class UploadMetrics:
    """
    Prometheus collectors for bucket resolution and uploads.

    Example:
        >>> metrics = UploadMetrics(registry=CollectorRegistry())
        >>> metrics.record_upload_success(bytes_uploaded=1024, bucket="logs")
    """

    def __init__(
        self, enabled: bool = True, registry: Optional[CollectorRegistry] = None
    ) -> None:
        """
        Initialize metrics collectors.

        Args:
            enabled: Whether metrics collection is enabled
            registry: Prometheus registry (uses the default registry if None)
        """
        self.enabled = enabled
        self.registry = registry if registry is not None else REGISTRY

        if not self.enabled:
            logger.info("Metrics collection disabled")
            return

        self.upload_requests = Counter(
            name="upload_requests_total",
            documentation="Total number of upload requests",
            labelnames=["status", "bucket"],
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="upload_bytes_total",
            documentation="Total uncompressed bytes uploaded to GCS",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="upload_duration_seconds",
            documentation="Time spent resolving the bucket and uploading a file",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry,
        )

        self.bucket_creations = Counter(
            name="bucket_creations_total",
            documentation="Buckets created because they did not exist",
            registry=self.registry,
        )

        self.gcs_api_errors = Counter(
            name="gcs_api_errors_total",
            documentation="Total GCS API errors",
            labelnames=["operation", "error_type"],
            registry=self.registry,
        )

    def track_upload(self):
        """Context manager timing a single upload."""
        if not self.enabled:
            return nullcontext()
        return self.upload_duration.time()

    def record_upload_success(self, bytes_uploaded: int, bucket: str) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="success", bucket=bucket).inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_upload_failure(self, bucket: str) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="failure", bucket=bucket).inc()

    def record_bucket_created(self) -> None:
        if not self.enabled:
            return
        self.bucket_creations.inc()

    def record_gcs_error(self, operation: str, error_type: str) -> None:
        """
        Record a GCS API error.

        Args:
            operation: Failing stage (bucket, open, compress, finalize)
            error_type: Exception class name (Forbidden, NotFound, ...)
        """
        if not self.enabled:
            return
        self.gcs_api_errors.labels(operation=operation, error_type=error_type).inc()


_metrics_instance: Optional[UploadMetrics] = None


def get_metrics() -> UploadMetrics:
    """Get the process-wide metrics instance, creating it on first use."""
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = UploadMetrics(enabled=enabled)

    return _metrics_instance


def start_metrics_server(port: int = 9090, addr: str = "0.0.0.0") -> None:
    """
    Expose the default registry over HTTP from a daemon thread.

    Example:
        >>> start_metrics_server(port=9090)
        >>> # curl http://localhost:9090/metrics
    """
    logger.info(f"Starting Prometheus metrics server on {addr}:{port}")
    start_http_server(port=port, addr=addr)
