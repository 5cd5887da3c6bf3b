"""In-memory object backend — volatile, process-local.

Suitable for tests and single-process deployments. Objects are kept as
``StoredObject`` records so the put-time content type can be inspected.
"""

from __future__ import annotations

import logging
import threading

from formulastore.core.errors import ObjectNotFoundError
from formulastore.models.keys import StoredObject

logger = logging.getLogger(__name__)


class InMemoryBackend:
    """Dict-backed ``ObjectBackend`` guarded by a lock."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._objects

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        obj = StoredObject(key=key, payload=bytes(payload), content_type=content_type)
        with self._lock:
            self._objects[key] = obj
        logger.debug("InMemoryBackend: put %s (%d bytes)", key, obj.size_bytes)

    def get(self, key: str) -> bytes:
        with self._lock:
            obj = self._objects.get(key)
        if obj is None:
            raise ObjectNotFoundError(f"No object at {key}", key=key)
        return obj.payload

    def head(self, key: str) -> StoredObject:
        """Return the stored record (payload and content type) for *key*."""
        with self._lock:
            obj = self._objects.get(key)
        if obj is None:
            raise ObjectNotFoundError(f"No object at {key}", key=key)
        return obj

    def keys(self, prefix: str = "") -> list[str]:
        """Sorted keys starting with *prefix*."""
        with self._lock:
            return sorted(k for k in self._objects if k.startswith(prefix))

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._objects if k.startswith(prefix)]
            for key in doomed:
                del self._objects[key]
        logger.debug("InMemoryBackend: deleted %d objects under %r", len(doomed), prefix)
        return len(doomed)

    def delete_all(self) -> int:
        return self.delete_prefix("")

    def close(self) -> None:
        # Objects outlive close() so a reopened store still sees them.
        pass
