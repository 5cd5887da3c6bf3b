"""Subcommand implementations for the formulastore CLI."""
