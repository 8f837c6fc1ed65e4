"""Shared utilities (file helpers, logging setup, policy file I/O)."""

__all__: list[str] = []
