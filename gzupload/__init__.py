"""
GCS gzip uploader

Uploads a local file to a Google Cloud Storage bucket as a gzip-compressed
object tagged with ``Content-Type: text/plain`` and ``Content-Encoding: gzip``,
creating the bucket on first use.

- gcs: connection management and the upload workflow
- utils: logging, configuration and metrics
"""

__version__ = "0.1.0"

from gzupload.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()
