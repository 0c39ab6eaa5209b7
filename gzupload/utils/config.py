"""
Environment configuration loader for the GCS gzip uploader.

Loads the Google Cloud project and credentials reference from a .env file
or from the process environment.
"""

import os
from pathlib import Path
from dataclasses import dataclass

from dotenv import load_dotenv

PROJECT_ENV_VAR = "GOOGLE_CLOUD_PROJECT"
CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"

# .env lives at the repository root, next to pyproject.toml
ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class ConfigurationError(ValueError):
    """Raised when required uploader configuration is missing."""


@dataclass
class StorageConfig:
    """Storage connection configuration."""

    # Google Cloud project that owns (or will own) the buckets
    project_id: str

    # Path to the service account key used by Application Default Credentials
    credentials_path: str

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """
        Load configuration from environment variables.

        Loads the project-root .env file if present (without overriding
        variables already set), then reads from os.environ. Blank values
        count as missing.

        Returns:
            StorageConfig instance with loaded values

        Raises:
            ConfigurationError: If a required environment variable is missing
        """
        if ENV_FILE.exists():
            load_dotenv(ENV_FILE)

        project_id = os.getenv(PROJECT_ENV_VAR, "").strip()
        credentials_path = os.getenv(CREDENTIALS_ENV_VAR, "").strip()

        if not project_id:
            raise ConfigurationError(
                f"{PROJECT_ENV_VAR} environment variable must be set."
            )
        if not credentials_path:
            raise ConfigurationError(
                f"{CREDENTIALS_ENV_VAR} environment variable must be set."
            )

        return cls(project_id=project_id, credentials_path=credentials_path)

