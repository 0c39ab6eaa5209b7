"""
Google Cloud Storage gzip uploader.

Ensures the target bucket exists, then streams a gzip-compressed copy of a
local file into a new object named after the file with a ``.gzip``
extension. Objects are tagged ``Content-Type: text/plain`` and
``Content-Encoding: gzip``.

Example usage:
    >>> from gzupload.gcs import connect, upload_file
    >>> connection = connect()
    >>> result = upload_file(connection, "my-bucket", "reports/notes.txt")
    >>> if result.success:
    ...     print(f"Uploaded to {result.gcs_uri}")
    gs://my-bucket/notes.gzip
"""

import gzip
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from google.api_core.exceptions import NotFound
from google.cloud import storage

from gzupload.gcs.connection import GCSConnection
from gzupload.utils.logging import get_logger, log_function_call
from gzupload.utils.metrics import get_metrics

logger = get_logger(__name__)

metrics = get_metrics()

COMPRESSED_EXTENSION = ".gzip"
CONTENT_TYPE = "text/plain"
CONTENT_ENCODING = "gzip"


@dataclass
class UploadResult:
    """
    Result of an upload operation.

    Attributes:
        success: Whether the object was written and finalized
        bucket_name: Target bucket
        local_path: Original local file path
        object_name: Derived object name (None if the file was never read)
        gcs_uri: gs://bucket/object if successful
        file_size_bytes: Uncompressed bytes fed to the gzip encoder
        duration_seconds: Wall time including bucket resolution
        error_message: Error description (None if successful)
        error: Exception that caused the failure
    """

    success: bool
    bucket_name: str
    local_path: str
    object_name: Optional[str] = None
    gcs_uri: Optional[str] = None
    file_size_bytes: int = 0
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
    error: Optional[Exception] = field(default=None, repr=False, compare=False)


def derive_object_name(file_path: str) -> str:
    """
    Name of the object a file is uploaded as.

    Directory components are dropped, everything from the last dot of
    the base name is stripped and ``.gzip`` is appended.

    Example:
        >>> derive_object_name("exports/data.csv")
        'data.gzip'
        >>> derive_object_name("README")
        'README.gzip'
        >>> derive_object_name(".bashrc")
        '.gzip'
    """
    name = Path(file_path).name
    stem, dot, _ = name.rpartition(".")
    return (stem if dot else name) + COMPRESSED_EXTENSION


@log_function_call
def ensure_bucket(connection: GCSConnection, bucket_name: str) -> storage.Bucket:
    """
    Bind an existing bucket to the connection, creating it if absent.

    Only a NotFound lookup triggers creation; the bucket is created under
    the connection's project with default settings. Any other error is
    raised unchanged and the connection's bucket binding is left as is.

    Args:
        connection: Connection returned by ``connect()``
        bucket_name: Bucket to resolve

    Returns:
        The bound bucket
    """
    bucket = connection.client.bucket(bucket_name)
    try:
        bucket.reload()
    except NotFound:
        logger.info(f"Creating bucket {bucket_name}")
        bucket = connection.client.create_bucket(
            bucket, project=connection.project_id
        )
        metrics.record_bucket_created()

    connection.bucket = bucket
    return bucket


def _failure(
    stage: str,
    message: str,
    error: Exception,
    bucket_name: str,
    local_path: str,
    start_time: float,
    object_name: Optional[str] = None,
) -> UploadResult:
    logger.error(f"{message}: {error}")
    metrics.record_upload_failure(bucket=bucket_name)
    if stage != "read":
        metrics.record_gcs_error(operation=stage, error_type=type(error).__name__)
    return UploadResult(
        success=False,
        bucket_name=bucket_name,
        local_path=local_path,
        object_name=object_name,
        duration_seconds=time.time() - start_time,
        error_message=f"{message}: {error}",
        error=error,
    )


def _abandon(writer, encoder: Optional[gzip.GzipFile]) -> None:
    """Cancel an unfinished object upload so no partial object is committed."""
    if encoder is not None:
        try:
            encoder.close()
        except Exception as e:
            logger.debug(f"Discarding gzip encoder after failure: {e}")
    try:
        writer.terminate()
    except Exception as e:
        logger.warning(f"Could not cancel upload session: {e}")


@log_function_call
def upload_file(
    connection: GCSConnection, bucket_name: str, file_path: str
) -> UploadResult:
    """
    Compress a local file and write it to a GCS object.

    The bucket is resolved first (and created if missing), then the whole
    file is read into memory and gzip-compressed into the object's write
    stream. The encoder is closed before the stream so that its trailer
    reaches the object; a failure at either close fails the upload.

    Errors are reported through the returned UploadResult, never raised.
    If compression fails the object upload is cancelled with
    ``BlobWriter.terminate()`` instead of being finalized, so no truncated
    object is committed.

    Args:
        connection: Connection returned by ``connect()``
        bucket_name: Destination bucket (created if it does not exist)
        file_path: Local file to upload

    Returns:
        UploadResult with success status and details

    Example:
        >>> result = upload_file(connection, "my-bucket", "notes.txt")
        >>> result.gcs_uri
        'gs://my-bucket/notes.gzip'
    """
    start_time = time.time()

    with metrics.track_upload():
        try:
            bucket = ensure_bucket(connection, bucket_name)
        except Exception as e:
            return _failure(
                "bucket", "Error setting bucket", e,
                bucket_name, file_path, start_time,
            )

        try:
            data = Path(file_path).read_bytes()
        except OSError as e:
            return _failure(
                "read", "Error reading file for upload", e,
                bucket_name, file_path, start_time,
            )

        object_name = derive_object_name(file_path)
        logger.info(f"Object name {object_name}")

        blob = bucket.blob(object_name)
        blob.content_type = CONTENT_TYPE
        blob.content_encoding = CONTENT_ENCODING

        try:
            writer = blob.open("wb", content_type=CONTENT_TYPE, ignore_flush=True)
        except Exception as e:
            return _failure(
                "open", "Error opening object writer", e,
                bucket_name, file_path, start_time, object_name,
            )
        logger.debug(f"Opened writer for gs://{bucket_name}/{object_name}")

        encoder = None
        try:
            # GzipFile writes its header into the writer on construction
            encoder = gzip.GzipFile(mode="wb", fileobj=writer)
            encoder.write(data)
        except Exception as e:
            _abandon(writer, encoder)
            return _failure(
                "compress", "Error compressing file", e,
                bucket_name, file_path, start_time, object_name,
            )

        try:
            encoder.close()
        except Exception as e:
            _abandon(writer, encoder)
            return _failure(
                "compress", "Error closing gzip encoder", e,
                bucket_name, file_path, start_time, object_name,
            )
        logger.info(f"Wrote {len(data)} bytes")

        try:
            writer.close()
        except Exception as e:
            return _failure(
                "finalize", "Error on object writer close", e,
                bucket_name, file_path, start_time, object_name,
            )

    gcs_uri = f"gs://{bucket_name}/{object_name}"
    duration = time.time() - start_time
    logger.info(
        f"Upload successful: {gcs_uri} ({len(data)} bytes in {duration:.2f}s)"
    )
    metrics.record_upload_success(bytes_uploaded=len(data), bucket=bucket_name)

    return UploadResult(
        success=True,
        bucket_name=bucket_name,
        local_path=file_path,
        object_name=object_name,
        gcs_uri=gcs_uri,
        file_size_bytes=len(data),
        duration_seconds=duration,
    )
