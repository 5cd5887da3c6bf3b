"""Store configuration — env-driven.

Reads from a .env file and FORMULASTORE_* environment variables. The
backend-specific fields (bucket, region, credentials, filesystem root) are
only consulted by the backend that needs them.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from formulastore.core.hasher import DigestAlgorithm


class BackendKind(str, Enum):
    """Object backends that ``create_backend`` knows how to build."""

    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    S3 = "s3"


class ReadFailurePolicy(str, Enum):
    """How read paths treat backend errors other than a missing object.

    ``FAIL_OPEN`` logs the error and reports a cache miss, so an outage never
    breaks the rendering pipeline. ``FAIL_CLOSED`` raises it.
    """

    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


class StoreSettings(BaseSettings):
    """Storage-and-cache settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export FORMULASTORE_BACKEND=s3
        export FORMULASTORE_BUCKET_NAME=formula-cache
        export FORMULASTORE_READ_FAILURE_POLICY=fail_closed

    Or via .env file::

        FORMULASTORE_BACKEND=filesystem
        FORMULASTORE_FILESYSTEM_ROOT=/var/cache/formulas
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FORMULASTORE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: BackendKind = BackendKind.MEMORY
    digest_algorithm: DigestAlgorithm = DigestAlgorithm.MD5
    read_failure_policy: ReadFailurePolicy = ReadFailurePolicy.FAIL_OPEN
    log_level: str = "INFO"

    # Filesystem backend
    filesystem_root: Path = Path(".formulastore")

    # S3 backend
    bucket_name: str = ""
    region: str = "eu-west-1"
    endpoint_url: str | None = None
    access_key_id: str = ""
    secret_access_key: str = ""
    use_ssl: bool = True
    purge_versions: bool = False

    # Every backend call is bounded
    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 30.0
    max_attempts: int = 3

    @property
    def has_static_credentials(self) -> bool:
        """Whether an explicit access key pair is configured."""
        return bool(self.access_key_id and self.secret_access_key)


# Module-level singleton — import as `from formulastore.config import settings`
settings = StoreSettings()
