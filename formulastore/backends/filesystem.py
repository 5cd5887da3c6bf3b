"""Local filesystem object backend.

Storage layout: {root}/{key}, so ``cache/ab/12/ab12....png`` becomes a file
two shard directories deep, mirroring the object-store layout exactly.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

from formulastore.core.errors import BackendUnavailableError, ObjectNotFoundError

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".tmp"


class LocalFileBackend:
    """Filesystem-backed ``ObjectBackend``.

    Writes go to a uniquely named temp file in the target directory and are
    renamed into place, so racing writers never leave a torn object.

    Parameters
    ----------
    root:
        Directory under which every key is stored.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path_for(self, key: str) -> Path:
        path = self._root / key
        if self._root.resolve() not in path.resolve().parents:
            raise BackendUnavailableError(f"Key escapes backend root: {key}", key=key)
        return path

    # ------------------------------------------------------------------
    # ObjectBackend
    # ------------------------------------------------------------------

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        path = self._path_for(key)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}{_TMP_SUFFIX}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(payload)
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise BackendUnavailableError(f"Cannot write {key}: {exc}", key=key) from exc
        logger.debug(
            "LocalFileBackend: wrote %s (%d bytes, %s)", key, len(payload), content_type
        )

    def get(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(f"No object at {key}", key=key) from exc
        except OSError as exc:
            raise BackendUnavailableError(f"Cannot read {key}: {exc}", key=key) from exc

    def keys(self, prefix: str = "") -> list[str]:
        """Sorted keys starting with *prefix* (in-flight temp files excluded)."""
        found = []
        for path in self._root.rglob("*"):
            if not path.is_file() or path.name.endswith(_TMP_SUFFIX):
                continue
            key = path.relative_to(self._root).as_posix()
            if key.startswith(prefix):
                found.append(key)
        return sorted(found)

    def delete_prefix(self, prefix: str) -> int:
        removed = 0
        try:
            for key in self.keys(prefix):
                (self._root / key).unlink(missing_ok=True)
                removed += 1
            self._prune_empty_dirs()
        except OSError as exc:
            raise BackendUnavailableError(
                f"Delete under {prefix!r} stopped after {removed} objects: {exc}"
            ) from exc
        logger.debug("LocalFileBackend: deleted %d objects under %r", removed, prefix)
        return removed

    def delete_all(self) -> int:
        return self.delete_prefix("")

    def close(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _prune_empty_dirs(self) -> None:
        # Deepest first so parents empty out before they are visited.
        dirs = sorted(
            (p for p in self._root.rglob("*") if p.is_dir()),
            key=lambda p: len(p.parts),
            reverse=True,
        )
        for directory in dirs:
            if not any(directory.iterdir()):
                directory.rmdir()
