"""formulastore data models — all Pydantic v2, all frozen (immutable)."""

from formulastore.models.keys import ArtifactKey, KeyPurpose, StoredObject

__all__ = [
    "ArtifactKey",
    "KeyPurpose",
    "StoredObject",
]
