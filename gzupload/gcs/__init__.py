"""
Google Cloud Storage connection and gzip upload workflow.

Connect once per process, then upload files one at a time; each upload
resolves (or creates) its bucket and writes a gzip-compressed object.
"""

from .connection import (
    ClientInitializationError,
    GCSConnection,
    connect,
    get_connection,
    reset_connection,
)
from .uploader import (
    COMPRESSED_EXTENSION,
    CONTENT_ENCODING,
    CONTENT_TYPE,
    UploadResult,
    derive_object_name,
    ensure_bucket,
    upload_file,
)

__all__ = [
    "COMPRESSED_EXTENSION",
    "CONTENT_ENCODING",
    "CONTENT_TYPE",
    "ClientInitializationError",
    "GCSConnection",
    "UploadResult",
    "connect",
    "derive_object_name",
    "ensure_bucket",
    "get_connection",
    "reset_connection",
    "upload_file",
]
