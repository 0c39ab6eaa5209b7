#!/usr/bin/env python3
"""
Upload a gzip-compressed file to Google Cloud Storage.

CLI wrapper around gzupload.gcs. Reads GOOGLE_CLOUD_PROJECT and
GOOGLE_APPLICATION_CREDENTIALS from the environment (or .env), creates the
bucket if it does not exist and uploads FILE as <name>.gzip.

Usage:
    python scripts/upload.py my-bucket notes.txt
    python scripts/upload.py my-bucket exports/data.csv --verbose
    python scripts/upload.py my-bucket notes.txt --metrics-port 9090
"""

import argparse
import sys
import uuid
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from gzupload.gcs import ClientInitializationError, connect, upload_file  # noqa: E402
from gzupload.utils.config import ConfigurationError  # noqa: E402
from gzupload.utils.logging import get_logger, set_correlation_id, setup_logging  # noqa: E402
from gzupload.utils.metrics import start_metrics_server  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Upload a gzip-compressed file to Google Cloud Storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  GOOGLE_CLOUD_PROJECT            project new buckets are created under
  GOOGLE_APPLICATION_CREDENTIALS  service account key file

Examples:
  # Upload notes.txt as gs://my-bucket/notes.gzip
  %(prog)s my-bucket notes.txt

  # Debug logging
  %(prog)s my-bucket data.csv --verbose
        """,
    )

    parser.add_argument("bucket", help="Destination bucket (created if missing)")
    parser.add_argument("file", help="Local file to upload")

    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while uploading",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for upload CLI."""
    args = parse_args(argv)

    if args.verbose:
        setup_logging(level="DEBUG")

    set_correlation_id(f"upload-{uuid.uuid4().hex[:12]}")

    try:
        connection = connect()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except ClientInitializationError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.metrics_port:
        start_metrics_server(port=args.metrics_port)

    try:
        result = upload_file(connection, args.bucket, args.file)
    except KeyboardInterrupt:
        print("\nUpload cancelled by user", file=sys.stderr)
        return 130

    if not result.success:
        print(f"Upload failed: {result.error_message}", file=sys.stderr)
        return 1

    print("Upload successful!")
    print(f"  GCS URI: {result.gcs_uri}")
    print(f"  File size: {result.file_size_bytes:,} bytes")
    print(f"  Duration: {result.duration_seconds:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
