"""Object backend protocol and factory.

Every backend implements the ``ObjectBackend`` protocol: upsert ``put``,
``get`` that raises ``ObjectNotFoundError`` on a miss, bulk
``delete_prefix`` / ``delete_all``, and ``close``. The storage-and-cache
layer never talks to a vendor SDK directly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from formulastore.core.errors import ConfigurationError

if TYPE_CHECKING:
    from formulastore.config import StoreSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class ObjectBackend(Protocol):
    """Protocol that every object store adapter must implement.

    Implementations must be safe to call from several threads at once.
    """

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        """Store *payload* at *key*, overwriting any existing object.

        Raises
        ------
        BackendError
            If the write did not happen.
        """
        ...

    def get(self, key: str) -> bytes:
        """Return the payload stored at *key*.

        Raises
        ------
        ObjectNotFoundError
            If no object exists at *key*.
        BackendError
            On any other failure.
        """
        ...

    def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with *prefix*.

        Returns the number of objects removed.
        """
        ...

    def delete_all(self) -> int:
        """Delete every object in the backend's scope."""
        ...

    def close(self) -> None:
        """Release client resources. Safe to call more than once."""
        ...


def create_backend(settings: StoreSettings) -> ObjectBackend:
    """Build the backend selected by ``settings.backend``.

    Raises ``ConfigurationError`` for an unknown backend kind or an S3
    backend without a bucket.
    """
    from formulastore.config import BackendKind

    try:
        kind = BackendKind(settings.backend)
    except ValueError as exc:
        raise ConfigurationError(f"Unsupported backend: {settings.backend!r}") from exc
    logger.info("Creating %s object backend.", kind.value)

    if kind is BackendKind.MEMORY:
        from formulastore.backends.memory import InMemoryBackend

        return InMemoryBackend()

    if kind is BackendKind.FILESYSTEM:
        from formulastore.backends.filesystem import LocalFileBackend

        return LocalFileBackend(settings.filesystem_root)

    from formulastore.backends.s3 import S3Backend

    return S3Backend.from_settings(settings)


__all__ = ["ObjectBackend", "create_backend"]
