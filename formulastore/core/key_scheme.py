"""Digest-to-key mapping for the object backend.

Layout (must stay byte-compatible with existing buckets)::

    formula/{d[0:2]}/{d[2:4]}/{d}.ini
    cache/{d[0:2]}/{d[2:4]}/{d}.{png|svg|<service>.txt}

All functions here are pure.
"""

from __future__ import annotations

import re

from formulastore.core.errors import InvalidDigestError, InvalidServiceError
from formulastore.models.keys import ArtifactKey, KeyPurpose

FORMULA_FOLDER = KeyPurpose.FORMULA.value
CACHE_FOLDER = KeyPurpose.CACHE.value
FORMULA_EXTENSION = "ini"
SHARD_WIDTH = 2

PNG_SERVICE = "png"
SVG_SERVICE = "svg"

_IMAGE_CONTENT_TYPES = {
    PNG_SERVICE: "image/png",
    SVG_SERVICE: "image/svg+xml",
}
TEXT_CONTENT_TYPE = "text/plain"

_SERVICE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def validate_digest(digest: str) -> str:
    """Return *digest* unchanged, or raise ``InvalidDigestError``.

    A digest needs at least two shard segments' worth of characters and may
    only contain ASCII letters and digits.
    """
    if not isinstance(digest, str) or len(digest) < 2 * SHARD_WIDTH:
        raise InvalidDigestError(
            f"Digest {digest!r} is shorter than {2 * SHARD_WIDTH} characters"
        )
    if not (digest.isascii() and digest.isalnum()):
        raise InvalidDigestError(f"Digest {digest!r} contains invalid characters")
    return digest


def validate_service(service: str) -> str:
    """Return *service* unchanged, or raise ``InvalidServiceError``.

    The name becomes part of a file name, so it must be non-empty and use
    only ASCII letters, digits, ``_`` and ``-``.
    """
    if not isinstance(service, str) or not service:
        raise InvalidServiceError("A service name is required to build a cache key")
    if not _SERVICE_PATTERN.fullmatch(service):
        raise InvalidServiceError(f"Service {service!r} contains invalid characters")
    return service


def folder_of(digest: str) -> str:
    """Two-level shard folder: ``"ab12cd"`` -> ``"ab/12"``."""
    validate_digest(digest)
    return f"{digest[:SHARD_WIDTH]}/{digest[SHARD_WIDTH:2 * SHARD_WIDTH]}"


def extension_of(service: str) -> str:
    """File extension for a render service.

    Image services keep their own extension; any other service is a text
    service and gets ``<service>.txt`` so that two text services never
    collide on the same digest.
    """
    validate_service(service)
    if service in _IMAGE_CONTENT_TYPES:
        return service
    return f"{service}.txt"


def content_type_of(service: str) -> str:
    """Content-Type header sent when storing output of *service*."""
    validate_service(service)
    return _IMAGE_CONTENT_TYPES.get(service, TEXT_CONTENT_TYPE)


def formula_key(digest: str) -> str:
    return f"{FORMULA_FOLDER}/{folder_of(digest)}/{digest}.{FORMULA_EXTENSION}"


def cache_key(digest: str, service: str) -> str:
    return f"{CACHE_FOLDER}/{folder_of(digest)}/{digest}.{extension_of(service)}"


def artifact_key(
    digest: str,
    purpose: KeyPurpose | str,
    service: str | None = None,
) -> ArtifactKey:
    """Build the structured key for *digest* in the given namespace.

    ``service`` is required for the cache namespace and ignored for formulas;
    a missing or malformed one raises ``InvalidServiceError``.
    """
    purpose = KeyPurpose(purpose)
    folder = folder_of(digest)
    if purpose is KeyPurpose.FORMULA:
        return ArtifactKey(
            purpose=purpose,
            digest=digest,
            folder=folder,
            extension=FORMULA_EXTENSION,
            content_type=TEXT_CONTENT_TYPE,
        )
    validate_service(service)
    return ArtifactKey(
        purpose=purpose,
        digest=digest,
        folder=folder,
        extension=extension_of(service),
        content_type=content_type_of(service),
        service=service,
    )
