"""Main CLI entry point for sentinel-pdp.

Defines the CLI group and registers all subcommands.

Commands:
    config  - Configuration inspection (show, path)
    decide  - Evaluate a decision request against the policy file
    policy  - Policy file management (validate, show, path, init)

Subcommand help:
    sentinel-pdp COMMAND -h    Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from sentinel_pdp import __version__

from .commands.config import config
from .commands.decide import decide
from .commands.policy import policy


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  sentinel-pdp policy init              Create an empty policy file (deny all)
  sentinel-pdp policy validate          Check the policy file
  sentinel-pdp decide request.json      Evaluate a request

Exit codes for decide:
  0   allow
  2   deny
  1   error (invalid request, policy file or config)
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """sentinel-pdp: RBAC + ABAC Policy Decision Point."""
    if version:
        click.echo(f"sentinel-pdp {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(config)
cli.add_command(decide)
cli.add_command(policy)


def main() -> None:
    """CLI entry point."""
    cli()
