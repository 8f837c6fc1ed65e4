"""Config command group for sentinel-pdp CLI.

Provides configuration inspection subcommands.
"""

from __future__ import annotations

__all__ = ["config"]

import json
import sys

import click

from sentinel_pdp.config import AppConfig, get_config_path, get_decision_log_path, get_system_log_path

from ..styling import style_dim, style_error, style_header


@click.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display current configuration.

    Loads configuration from the OS-appropriate location. Without a config
    file, built-in defaults are shown.
    """
    config_file_path = get_config_path()

    try:
        loaded_config = AppConfig.load_or_default(config_file_path)
    except ValueError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    decision_log = get_decision_log_path(loaded_config)
    system_log = get_system_log_path(loaded_config)

    if as_json:
        config_dict = loaded_config.model_dump(mode="json")
        config_dict["_computed"] = {
            "config_file": str(config_file_path),
            "config_file_exists": config_file_path.exists(),
            "policy_file": str(loaded_config.resolve_policy_path()),
            "log_files": {
                "decisions": str(decision_log) if decision_log else None,
                "system": str(system_log) if system_log else None,
            },
        }
        click.echo(json.dumps(config_dict, indent=2))
        return

    click.echo("\nsentinel-pdp configuration:\n")
    if not config_file_path.exists():
        click.echo(style_dim(f"(no config file at {config_file_path} - using defaults)"))
        click.echo()

    click.echo(style_header("Logging"))
    click.echo(f"  log_dir: {loaded_config.logging.log_dir or '(none - decisions go to stderr)'}")
    click.echo(f"  log_level: {loaded_config.logging.log_level}")
    if decision_log is not None:
        click.echo(f"  decisions: {decision_log}")
        click.echo(f"  system: {system_log}")
    click.echo()

    click.echo(style_header("Policy"))
    click.echo(f"  path: {loaded_config.resolve_policy_path()}")
    click.echo()

    click.echo(style_header("Evaluation"))
    click.echo(f"  max_condition_depth: {loaded_config.evaluation.max_condition_depth}")


@config.command("path")
def config_path() -> None:
    """Show config file path.

    Displays the OS-appropriate config file location.
    """
    path = get_config_path()
    click.echo(str(path))

    if not path.exists():
        click.echo("(file does not exist - defaults are in use)", err=True)
