"""Tests for InMemoryBackend — upsert, miss, prefix deletes."""

from __future__ import annotations

import pytest

from formulastore.backends import ObjectBackend
from formulastore.backends.memory import InMemoryBackend
from formulastore.core.errors import ObjectNotFoundError


class TestInMemoryBackend:
    def test_satisfies_protocol(self, memory_backend: InMemoryBackend):
        assert isinstance(memory_backend, ObjectBackend)

    def test_put_and_get(self, memory_backend: InMemoryBackend):
        memory_backend.put("cache/ab/cd/abcd.png", b"\x89PNG", "image/png")
        assert memory_backend.get("cache/ab/cd/abcd.png") == b"\x89PNG"

    def test_put_overwrites(self, memory_backend: InMemoryBackend):
        memory_backend.put("k", b"one", "text/plain")
        memory_backend.put("k", b"two", "text/plain")
        assert memory_backend.get("k") == b"two"
        assert len(memory_backend) == 1

    def test_content_type_recorded(self, memory_backend: InMemoryBackend):
        memory_backend.put("k", b"<svg/>", "image/svg+xml")
        obj = memory_backend.head("k")
        assert obj.content_type == "image/svg+xml"
        assert obj.size_bytes == 6

    def test_missing_key(self, memory_backend: InMemoryBackend):
        with pytest.raises(ObjectNotFoundError) as excinfo:
            memory_backend.get("nope")
        assert excinfo.value.key == "nope"

    def test_delete_prefix(self, memory_backend: InMemoryBackend):
        memory_backend.put("cache/ab/cd/a.png", b"1", "image/png")
        memory_backend.put("cache/ab/cd/b.svg", b"2", "image/svg+xml")
        memory_backend.put("formula/ab/cd/a.ini", b"3", "text/plain")
        assert memory_backend.delete_prefix("cache/") == 2
        assert memory_backend.keys() == ["formula/ab/cd/a.ini"]

    def test_delete_all(self, memory_backend: InMemoryBackend):
        memory_backend.put("a", b"1", "text/plain")
        memory_backend.put("b", b"2", "text/plain")
        assert memory_backend.delete_all() == 2
        assert len(memory_backend) == 0

    def test_delete_all_empty(self, memory_backend: InMemoryBackend):
        assert memory_backend.delete_all() == 0

    def test_close_keeps_objects(self, memory_backend: InMemoryBackend):
        memory_backend.put("a", b"1", "text/plain")
        memory_backend.close()
        assert "a" in memory_backend
