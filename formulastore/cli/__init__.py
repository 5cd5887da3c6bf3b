"""formulastore CLI — Typer-based command-line interface.

Provides the ``formulastore`` command with subcommands for computing and
decoding digests, storing and retrieving cached renders, inspecting the key
layout, and wiping the cache.

All output uses Rich for formatted terminal display.
"""
