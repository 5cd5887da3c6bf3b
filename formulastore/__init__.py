"""formulastore: digest-addressed storage and cache for formula rendering.

Maps formula source to MD5 digests and ``(digest, service)`` pairs to
rendered PNG, SVG, or text output, persisted in an object store:

  - formula/{d0d1}/{d2d3}/{digest}.ini holds the original content
  - cache/{d0d1}/{d2d3}/{digest}.{png|svg|<service>.txt} holds render output
  - pluggable backends: in-memory, local filesystem, S3 (boto3)
  - fail-open reads, fail-closed writes, configurable per store
"""

__version__ = "1.0.0"
__description__ = "Digest-addressed storage and cache for formula rendering"

from formulastore.backends import ObjectBackend, create_backend
from formulastore.config import ReadFailurePolicy, StoreSettings
from formulastore.core.errors import (
    BackendError,
    BackendUnavailableError,
    ConfigurationError,
    FormulaStoreError,
    InvalidDigestError,
    InvalidServiceError,
    ObjectNotFoundError,
    StorageNotInitializedError,
)
from formulastore.core.storage_and_cache import StorageAndCache

__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "ConfigurationError",
    "FormulaStoreError",
    "InvalidDigestError",
    "InvalidServiceError",
    "ObjectBackend",
    "ObjectNotFoundError",
    "ReadFailurePolicy",
    "StorageAndCache",
    "StorageNotInitializedError",
    "StoreSettings",
    "create_backend",
    "__version__",
]
