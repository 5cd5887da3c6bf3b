"""Shared test fixtures for formulastore."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from formulastore.backends.filesystem import LocalFileBackend
from formulastore.backends.memory import InMemoryBackend
from formulastore.config import StoreSettings
from formulastore.core.errors import BackendUnavailableError
from formulastore.core.storage_and_cache import StorageAndCache


class UnavailableBackend:
    """Backend whose every call fails as if the object store were down."""

    def __init__(self) -> None:
        self.closed = False

    def put(self, key: str, payload: bytes, content_type: str) -> None:
        raise BackendUnavailableError("connection refused", key=key)

    def get(self, key: str) -> bytes:
        raise BackendUnavailableError("read timed out", key=key)

    def delete_prefix(self, prefix: str) -> int:
        raise BackendUnavailableError("access denied")

    def delete_all(self) -> int:
        return self.delete_prefix("")

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep FORMULASTORE_* variables and any local .env out of the tests."""
    for name in list(os.environ):
        if name.startswith("FORMULASTORE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    """Provide an empty in-memory backend."""
    return InMemoryBackend()


@pytest.fixture
def fs_backend(tmp_path: Path) -> LocalFileBackend:
    """Provide a filesystem backend rooted in a temp directory."""
    return LocalFileBackend(tmp_path / "objects")


@pytest.fixture
def unavailable_backend() -> UnavailableBackend:
    """Provide a backend that fails every call."""
    return UnavailableBackend()


@pytest.fixture
def store(memory_backend: InMemoryBackend) -> StorageAndCache:
    """Provide an initialized store over the in-memory backend."""
    return StorageAndCache(memory_backend, settings=StoreSettings()).init()


@pytest.fixture
def formula() -> str:
    """A small formula source used across tests."""
    return "x^2+1"


@pytest.fixture
def formula_digest() -> str:
    """MD5 of ``"x^2+1"``."""
    return "2cd3b198cc2d1805468e336d663e92cb"
