"""Integration test — a rendering service's full cache cycle on each backend.

Simulates the caller: compute a digest for formula source, look up the
render, miss, render, store, hit; then decode the digest back to source and
finally wipe everything.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from formulastore.backends.filesystem import LocalFileBackend
from formulastore.backends.memory import InMemoryBackend
from formulastore.core.hasher import compute_digest
from formulastore.core.storage_and_cache import StorageAndCache


def _render(source: str, service: str) -> bytes:
    """Deterministic stand-in for the rendering engine."""
    return f"<{service}>{source}</{service}>".encode()


@pytest.fixture(params=["memory", "filesystem"])
def cycle_store(request, tmp_path: Path):
    if request.param == "memory":
        backend = InMemoryBackend()
    else:
        backend = LocalFileBackend(tmp_path / "bucket")
    with StorageAndCache(backend) as store:
        yield store


class TestRenderCycle:
    def test_miss_render_store_hit(self, cycle_store: StorageAndCache):
        source = "x^2+1"
        digest = cycle_store.code_digest(source)
        assert digest == compute_digest(source)

        assert cycle_store.retreive_data(digest, "png") is None
        image = _render(source, "png")
        cycle_store.store_data(digest, "png", image)

        assert cycle_store.retreive_data(digest, "png") == image
        assert cycle_store.retreive_data(digest, "svg") is None
        assert cycle_store.decode_digest(digest) == source

    def test_many_formulas_share_shards(self, cycle_store: StorageAndCache):
        sources = [f"x^{n}+{n}" for n in range(200)]
        digests = [cycle_store.code_digest(s) for s in sources]
        for source, digest in zip(sources, digests):
            cycle_store.store_data(digest, "mathml", _render(source, "mathml"))

        for source, digest in zip(sources, digests):
            assert cycle_store.decode_digest(digest) == source
            assert cycle_store.retreive_data(digest, "mathml") == _render(source, "mathml")

    def test_racing_producers_collapse(self, cycle_store: StorageAndCache):
        source = "\\int_0^1 x\\,dx"
        digest = cycle_store.code_digest(source)
        image = _render(source, "svg") * 512

        def produce(_: int) -> bytes | None:
            if cycle_store.retreive_data(digest, "svg") is None:
                cycle_store.store_data(digest, "svg", image)
            return cycle_store.retreive_data(digest, "svg")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(produce, range(32)))

        assert all(r == image for r in results)

    def test_delete_cache_forgets_everything(self, cycle_store: StorageAndCache):
        digest = cycle_store.code_digest("a/b")
        cycle_store.store_data(digest, "png", b"png")
        cycle_store.store_data(digest, "svg", b"svg")

        assert cycle_store.delete_cache() is True

        assert cycle_store.decode_digest(digest) is None
        assert cycle_store.retreive_data(digest, "png") is None
        assert cycle_store.retreive_data(digest, "svg") is None

        # The store keeps working after a sweep.
        assert cycle_store.code_digest("a/b") == digest
        assert cycle_store.decode_digest(digest) == "a/b"
