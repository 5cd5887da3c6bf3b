"""Error taxonomy for the formula store.

``ObjectNotFoundError`` is the only backend error that means "cache miss".
Everything else under ``BackendError`` is an outage or a permission problem
and is handled according to the configured read-failure policy.
"""

from __future__ import annotations


class FormulaStoreError(RuntimeError):
    """Base class for every error raised by formulastore."""


class BackendError(FormulaStoreError):
    """Raised when an object backend operation fails."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ObjectNotFoundError(BackendError):
    """Raised by ``ObjectBackend.get`` when no object exists at the key."""


class BackendUnavailableError(BackendError):
    """Raised on transport, timeout, or permission failures."""


class StorageNotInitializedError(FormulaStoreError):
    """Raised when an operation runs before ``StorageAndCache.init``."""


class InvalidDigestError(FormulaStoreError, ValueError):
    """Raised when a digest cannot be mapped to a shard folder."""


class ConfigurationError(FormulaStoreError):
    """Raised when store settings cannot produce a working backend."""


class InvalidServiceError(FormulaStoreError, ValueError):
    """Raised when a render service name cannot be used in a cache key."""
