"""Digest computation, key layout, and the storage-and-cache orchestrator."""
