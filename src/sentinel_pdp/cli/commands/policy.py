"""Policy command group for sentinel-pdp CLI.

Provides policy file management subcommands.
"""

from __future__ import annotations

__all__ = ["policy"]

import json
import sys
from datetime import datetime
from pathlib import Path

import click

from sentinel_pdp.config import AppConfig, get_config_path
from sentinel_pdp.pdp import Policy
from sentinel_pdp.utils.policy import compute_policy_checksum, create_default_policy_file, load_policies

from ..styling import style_dim, style_error, style_label, style_success

_PATH_OPTION_HELP = "Policy file to use (default: from config, else the app directory)"


def _resolve_policy_path(path: Path | None) -> Path:
    """Explicit --path, else the configured or default location."""
    if path is not None:
        return path
    try:
        return AppConfig.load_or_default(get_config_path()).resolve_policy_path()
    except ValueError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)


def _summarize(policy_obj: Policy) -> str:
    """One-line scope summary: actions, roles, whether an ABAC clause exists."""
    parts = [f"actions={','.join(policy_obj.actions)}"]
    rbac = policy_obj.rbac
    if rbac is not None:
        if rbac.any_role:
            parts.append(f"anyRole={','.join(sorted(rbac.any_role))}")
        if rbac.all_roles:
            parts.append(f"allRoles={','.join(sorted(rbac.all_roles))}")
    if policy_obj.abac is not None:
        parts.append("abac")
    return ", ".join(parts)


@click.group()
def policy() -> None:
    """Policy management commands."""
    pass


@policy.command("validate")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=_PATH_OPTION_HELP,
)
def policy_validate(path: Path | None) -> None:
    """Validate policy file.

    Checks the policy file for:
    - Valid JSON syntax (a top-level array)
    - Schema validation of every policy (actions, rbac, abac conditions)
    - Unique policy ids

    Exit codes:
        0: Policy file is valid
        1: Policy file is invalid or not found
    """
    policy_path = _resolve_policy_path(path)

    try:
        policies = load_policies(policy_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    count = len(policies)
    click.echo(style_success(f"Policy valid: {policy_path}"))
    click.echo(f"  {count} polic{'ies' if count != 1 else 'y'} defined")
    if not policies:
        click.echo(style_dim("  Every request will be denied."))


@policy.command("path")
def policy_path_cmd() -> None:
    """Show policy file path.

    Displays the configured (or OS-default) policy file location.
    """
    path = _resolve_policy_path(None)
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - run 'sentinel-pdp policy init' to create)", err=True)


@policy.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--path",
    "-p",
    type=click.Path(dir_okay=False, path_type=Path),
    help=_PATH_OPTION_HELP,
)
def policy_show(as_json: bool, path: Path | None) -> None:
    """Display current policies in priority order.

    The first matching policy wins, so earlier entries shadow later ones.
    """
    policy_path = _resolve_policy_path(path)

    try:
        policies = load_policies(policy_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    modified = datetime.fromtimestamp(policy_path.stat().st_mtime).strftime("%Y-%m-%d %H:%M:%S")

    if as_json:
        output = {
            "policies": [p.to_wire() for p in policies],
            "_metadata": {
                "file": str(policy_path),
                "modified": modified,
                "policies_count": len(policies),
                "checksum": compute_policy_checksum(policy_path),
            },
        }
        click.echo(json.dumps(output, indent=2))
        return

    click.echo("\n" + style_label("Policy file") + f" {policy_path}")
    click.echo(f"Modified: {modified}")
    click.echo(f"Policies: {len(policies)}")
    click.echo()

    if not policies:
        click.echo("  (no policies defined - every request is denied)")
        return

    for position, item in enumerate(policies, 1):
        click.echo(f"  {position}. [{item.id}] {_summarize(item)}")
        if item.description:
            click.echo(f"     {item.description}")


@policy.command("init")
@click.option(
    "--path",
    "-p",
    type=click.Path(dir_okay=False, path_type=Path),
    help=_PATH_OPTION_HELP,
)
def policy_init(path: Path | None) -> None:
    """Create an empty policy file.

    An empty list denies every request until policies are added.

    Exit codes:
        0: File created
        1: File already exists or could not be written
    """
    policy_path = _resolve_policy_path(path)

    try:
        create_default_policy_file(policy_path)
    except FileExistsError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(style_error(f"Could not write policy file {policy_path}: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success(f"Policy file created: {policy_path}"))
