"""Digest helpers for content addressing.

MD5 is the default for compatibility with digests already issued by
existing deployments. Switching algorithms invalidates every stored key.
"""

from __future__ import annotations

import hashlib
from enum import Enum


class DigestAlgorithm(str, Enum):
    """Hash functions that may back a store's digests."""

    MD5 = "md5"
    SHA256 = "sha256"


def content_bytes(content: str | bytes) -> bytes:
    """Return the canonical byte form of formula content (UTF-8 for text)."""
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


def md5_hex(data: bytes) -> str:
    """Return the MD5 hex digest of raw bytes."""
    return hashlib.md5(data).hexdigest()


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_digest(
    content: str | bytes,
    algorithm: DigestAlgorithm | str = DigestAlgorithm.MD5,
) -> str:
    """Compute the lowercase hex digest of *content*.

    Deterministic across processes and machines: the result depends only on
    the content bytes and the algorithm.
    """
    data = content_bytes(content)
    if DigestAlgorithm(algorithm) is DigestAlgorithm.SHA256:
        return sha256_hex(data)
    return md5_hex(data)
