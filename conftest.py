"""Pytest configuration."""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def _fresh_connection():
    """Each test starts without a shared GCS connection."""
    from gzupload.gcs import connection

    connection.reset_connection()
    yield
    connection.reset_connection()
