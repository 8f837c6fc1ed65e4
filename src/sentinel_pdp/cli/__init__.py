"""Command-line interface for sentinel-pdp.

Provides commands for evaluating decision requests and managing the policy
file and configuration.
"""

from .main import cli, main

__all__ = ["cli", "main"]
