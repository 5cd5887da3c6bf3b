"""Storage-and-cache orchestrator for the formula rendering service.

Maps formula content to a digest (``code_digest``), the digest back to the
content (``decode_digest``), and ``(digest, service)`` pairs to rendered
output (``store_data`` / ``retreive_data``). Everything is persisted through
an ``ObjectBackend``.

Cache-miss contract: a read that returns ``None`` means "regenerate and call
``store_data``". Absence is never an error to the caller, and the backend may
drop any object at any time.

Failure policy:

- writes (``code_digest``, ``store_data``) always propagate backend errors;
- reads map ``ObjectNotFoundError`` to ``None`` and treat every other
  ``BackendError`` per ``ReadFailurePolicy``;
- ``delete_cache`` logs failures and reports them through its return value.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from formulastore.backends import ObjectBackend, create_backend
from formulastore.config import ReadFailurePolicy, StoreSettings
from formulastore.core.errors import (
    BackendError,
    ConfigurationError,
    ObjectNotFoundError,
    StorageNotInitializedError,
)
from formulastore.core.hasher import DigestAlgorithm, compute_digest, content_bytes
from formulastore.core.key_scheme import (
    TEXT_CONTENT_TYPE,
    cache_key,
    content_type_of,
    formula_key,
)

logger = logging.getLogger(__name__)


class StorageAndCache:
    """Digest-addressed storage and cache over an object backend.

    The instance owns its backend handle: ``init`` opens it, ``close``
    releases it. Apart from that handle the object holds no state, so one
    instance may serve many threads when the backend allows it.

    Parameters
    ----------
    backend:
        An already constructed backend. When omitted, ``init`` builds one
        from the settings via ``create_backend``.
    settings:
        Store settings. Defaults to ``StoreSettings()`` (environment driven).
    read_failure_policy:
        Overrides ``settings.read_failure_policy``.
    """

    def __init__(
        self,
        backend: ObjectBackend | None = None,
        *,
        settings: StoreSettings | None = None,
        read_failure_policy: ReadFailurePolicy | str | None = None,
    ) -> None:
        self._settings = settings or StoreSettings()
        self._injected_backend = backend
        self._backend: ObjectBackend | None = None
        self._policy_override = (
            ReadFailurePolicy(read_failure_policy) if read_failure_policy else None
        )
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(
        self, config: StoreSettings | Mapping[str, Any] | None = None
    ) -> StorageAndCache:
        """Open the backend. Calling it on an open store is a no-op.

        Parameters
        ----------
        config:
            Settings, or a plain mapping validated into ``StoreSettings``.
            Ignored when a backend was injected at construction.

        Raises
        ------
        ConfigurationError
            If the mapping does not validate or names no usable backend.
        """
        with self._lock:
            if self._backend is not None:
                return self

            if config is not None:
                if isinstance(config, StoreSettings):
                    self._settings = config
                else:
                    try:
                        self._settings = StoreSettings(**dict(config))
                    except ValidationError as exc:
                        raise ConfigurationError(f"Invalid store settings: {exc}") from exc

            if self._injected_backend is not None:
                self._backend = self._injected_backend
            else:
                self._backend = create_backend(self._settings)

        logger.info(
            "StorageAndCache: initialized (%s, digest=%s, reads=%s)",
            type(self._backend).__name__,
            self.digest_algorithm.value,
            self.read_failure_policy.value,
        )
        return self

    open = init

    def close(self) -> None:
        """Close the backend and return to the uninitialized state."""
        with self._lock:
            backend, self._backend = self._backend, None
        if backend is not None:
            backend.close()
            logger.info("StorageAndCache: closed %s", type(backend).__name__)

    def __enter__(self) -> StorageAndCache:
        return self.init()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    @property
    def backend(self) -> ObjectBackend:
        """The open backend handle."""
        return self._require_backend()

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def read_failure_policy(self) -> ReadFailurePolicy:
        return self._policy_override or ReadFailurePolicy(self._settings.read_failure_policy)

    @property
    def digest_algorithm(self) -> DigestAlgorithm:
        return DigestAlgorithm(self._settings.digest_algorithm)

    # ------------------------------------------------------------------
    # Formula namespace
    # ------------------------------------------------------------------

    def code_digest(self, content: str | bytes) -> str:
        """Compute the digest of *content* and persist digest -> content.

        Idempotent: repeating the call rewrites the same key with the same
        bytes. Backend errors propagate, because a lost write means the digest
        can never be decoded.
        """
        backend = self._require_backend()
        data = content_bytes(content)
        digest = compute_digest(data, self.digest_algorithm)
        key = formula_key(digest)
        backend.put(key, data, TEXT_CONTENT_TYPE)
        logger.debug("code_digest: %s -> %s", digest, key)
        return digest

    def decode_digest(self, digest: str) -> str | None:
        """Return the formula text stored for *digest*, or ``None``."""
        data = self.decode_digest_bytes(digest)
        if data is None:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            return self._read_failed(formula_key(digest), exc)

    def decode_digest_bytes(self, digest: str) -> bytes | None:
        """Return the raw formula bytes stored for *digest*, or ``None``."""
        return self._read(formula_key(digest))

    # ------------------------------------------------------------------
    # Cache namespace
    # ------------------------------------------------------------------

    def store_data(self, digest: str, service: str, data: bytes) -> None:
        """Cache rendered output for ``(digest, service)``.

        The pair is the primary key: output of different services for the
        same digest is stored independently. Backend errors propagate.
        """
        backend = self._require_backend()
        key = cache_key(digest, service)
        backend.put(key, bytes(data), content_type_of(service))
        logger.debug("store_data: %s (%d bytes)", key, len(data))

    def retreive_data(self, digest: str, service: str) -> bytes | None:
        """Return cached output for ``(digest, service)``, or ``None``."""
        return self._read(cache_key(digest, service))

    retrieve_data = retreive_data

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def delete_cache(self) -> bool:
        """Delete every object in the backend, formulas included.

        Offline maintenance only: objects written concurrently may or may
        not survive. Failures are logged and reported by returning
        ``False``; a partial sweep can simply be run again.
        """
        backend = self._require_backend()
        try:
            removed = backend.delete_all()
        except Exception:
            logger.exception("delete_cache: could not delete the cache")
            return False
        logger.info("delete_cache: removed %d objects", removed)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_backend(self) -> ObjectBackend:
        backend = self._backend
        if backend is None:
            raise StorageNotInitializedError(
                "StorageAndCache.init() must be called before use"
            )
        return backend

    def _read(self, key: str) -> bytes | None:
        backend = self._require_backend()
        try:
            data = backend.get(key)
        except ObjectNotFoundError:
            logger.debug("cache miss: %s", key)
            return None
        except BackendError as exc:
            return self._read_failed(key, exc)
        logger.debug("cache hit: %s (%d bytes)", key, len(data))
        return data

    def _read_failed(self, key: str, exc: Exception) -> None:
        if self.read_failure_policy is ReadFailurePolicy.FAIL_CLOSED:
            raise exc
        logger.warning("Read of %s failed, treating as a miss: %s", key, exc)
        return None


__all__ = ["ReadFailurePolicy", "StorageAndCache"]
