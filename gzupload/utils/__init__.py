"""
Utility modules for the GCS gzip uploader.

- logging: Structured logging with entry/exit decorators
- config: Environment configuration loading
- metrics: Prometheus collectors for uploads
"""

from gzupload.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
