"""Storage key models for the formula and cache namespaces."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class KeyPurpose(str, Enum):
    """Top-level namespace an object lives under."""

    FORMULA = "formula"
    CACHE = "cache"


class ArtifactKey(BaseModel):
    """Structured form of a backend object key.

    Derived from a digest, never stored. ``key`` renders the exact string
    sent to the object backend:
    ``{purpose}/{folder}/{digest}.{extension}``.
    """

    model_config = ConfigDict(frozen=True)

    purpose: KeyPurpose
    digest: str
    folder: str  # "ab/12"
    extension: str  # "ini", "png", "svg" or "<service>.txt"
    content_type: str = "text/plain"
    service: str | None = None

    @property
    def key(self) -> str:
        return f"{self.purpose.value}/{self.folder}/{self.digest}.{self.extension}"


class StoredObject(BaseModel):
    """An object as held by a backend: payload plus put-time metadata."""

    model_config = ConfigDict(frozen=True)

    key: str
    payload: bytes
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.payload)
