"""
Google Cloud Storage connection management.

Holds the single storage client used by the uploader for the lifetime of the
process. ``connect()`` builds it on first call; every later call returns the
same connection, including when several threads race to connect first.

Example usage:
    >>> from gzupload.gcs import connect, upload_file
    >>> connection = connect()
    >>> result = upload_file(connection, "my-bucket", "notes.txt")
"""

import threading
from typing import Optional

from google.cloud import storage

from gzupload.utils.config import StorageConfig
from gzupload.utils.logging import get_logger

logger = get_logger(__name__)


class ClientInitializationError(RuntimeError):
    """Raised when the storage client cannot be constructed."""


class GCSConnection:
    """
    Live connection to Google Cloud Storage.

    Attributes:
        project_id: Project new buckets are created under
        client: Underlying google-cloud-storage client
        bucket: Bucket bound by the most recent upload (None until then)
    """

    def __init__(self, project_id: str, client: storage.Client) -> None:
        self.project_id = project_id
        self.client = client
        self.bucket: Optional[storage.Bucket] = None

    @property
    def bucket_name(self) -> Optional[str]:
        return self.bucket.name if self.bucket is not None else None

    @classmethod
    def from_config(cls, config: StorageConfig) -> "GCSConnection":
        """
        Build a connection from loaded configuration.

        Credentials are picked up by Application Default Credentials from
        GOOGLE_APPLICATION_CREDENTIALS.

        Raises:
            ClientInitializationError: If the client cannot be created
        """
        logger.info(f"Creating GCS client for project {config.project_id}")
        try:
            client = storage.Client(project=config.project_id)
        except Exception as e:
            raise ClientInitializationError(
                f"Unable to create GCS client: {e}"
            ) from e
        return cls(project_id=config.project_id, client=client)

    def __repr__(self) -> str:
        return (
            f"GCSConnection(project_id={self.project_id!r}, "
            f"bucket={self.bucket_name!r})"
        )


_connection: Optional[GCSConnection] = None
_connection_lock = threading.Lock()


def connect(config: Optional[StorageConfig] = None) -> GCSConnection:
    """
    Return the process-wide connection, creating it on first call.

    The environment is only read when no connection exists yet. Concurrent
    first callers block on a lock so exactly one client is constructed.

    Args:
        config: Configuration to use instead of reading the environment

    Returns:
        The shared GCSConnection

    Raises:
        ConfigurationError: If GOOGLE_CLOUD_PROJECT or
            GOOGLE_APPLICATION_CREDENTIALS is missing
        ClientInitializationError: If the storage client cannot be created
    """
    global _connection

    if _connection is not None:
        return _connection

    with _connection_lock:
        if _connection is None:
            if config is None:
                config = StorageConfig.from_env()
            _connection = GCSConnection.from_config(config)
            logger.info(f"Connected to GCS project {_connection.project_id}")

    return _connection


def get_connection() -> GCSConnection:
    """
    Return the connection created by ``connect()``.

    Raises:
        RuntimeError: If ``connect()`` has not succeeded yet
    """
    if _connection is None:
        raise RuntimeError("GCS connection not initialized; call connect() first")
    return _connection


def reset_connection() -> None:
    """Drop the shared connection so the next ``connect()`` builds a new one."""
    global _connection
    with _connection_lock:
        _connection = None
