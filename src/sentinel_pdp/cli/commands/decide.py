"""Decide command for sentinel-pdp CLI.

Evaluates one decision request (JSON file or stdin) against the policy file
and prints the decision as JSON.
"""

from __future__ import annotations

__all__ = ["decide"]

import json
import sys
from pathlib import Path
from typing import TextIO

import click

from sentinel_pdp.config import AppConfig, get_config_path, get_decision_log_path, get_system_log_path
from sentinel_pdp.exceptions import SentinelError
from sentinel_pdp.pdp import PolicyDecisionPoint, PolicyEngine
from sentinel_pdp.repositories import FilePolicyRepository
from sentinel_pdp.telemetry.audit import DecisionEventLogger, create_decision_logger
from sentinel_pdp.telemetry.system import configure_system_logger_file, get_system_logger

from ..styling import style_error

EXIT_ALLOW = 0
EXIT_ERROR = 1
EXIT_DENY = 2


def _load_config() -> AppConfig:
    try:
        return AppConfig.load_or_default(get_config_path())
    except ValueError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)


def _read_request(request_file: TextIO) -> object:
    try:
        return json.load(request_file)
    except json.JSONDecodeError as e:
        click.echo(style_error(f"Invalid JSON in request: {e}"), err=True)
        sys.exit(EXIT_ERROR)


@click.command("decide")
@click.argument("request_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--policies",
    "-p",
    "policies_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Policy file to evaluate against (default: from config)",
)
@click.option("--explain", is_flag=True, help="Also list every matching policy in priority order")
@click.option(
    "--audit-log",
    "audit_log",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the decision audit event to this JSONL file (default: from config, else stderr)",
)
def decide(request_file: TextIO, policies_path: Path | None, explain: bool, audit_log: Path | None) -> None:
    """Evaluate a decision request.

    REQUEST_FILE is a JSON object with subject, action, resource and optional
    context. Use '-' to read it from stdin.

    \b
    Exit codes:
        0: Allowed
        2: Denied
        1: Error (invalid request, policy file or config)
    """
    app_config = _load_config()

    system_logger = get_system_logger()
    system_logger.setLevel(app_config.logging.log_level)
    system_log_path = get_system_log_path(app_config)
    if system_log_path is not None:
        configure_system_logger_file(system_log_path)

    request_data = _read_request(request_file)

    policy_path = policies_path or app_config.resolve_policy_path()
    audit_path = audit_log or get_decision_log_path(app_config)

    try:
        auditor = DecisionEventLogger(create_decision_logger(audit_path))
    except OSError as e:
        click.echo(style_error(f"Cannot open audit log: {e}"), err=True)
        sys.exit(EXIT_ERROR)

    engine = PolicyEngine(
        auditor=auditor,
        max_condition_depth=app_config.evaluation.max_condition_depth,
    )
    decision_point = PolicyDecisionPoint(FilePolicyRepository(policy_path), engine)

    try:
        response = decision_point.decide(request_data)  # type: ignore[arg-type]
        matches = decision_point.explain(request_data) if explain else None  # type: ignore[arg-type]
    except (FileNotFoundError, ValueError, SentinelError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    output = response.to_wire()
    if matches is not None:
        output["matchingPolicies"] = [
            {"id": m.id, "description": m.description, "position": m.position} for m in matches
        ]
    click.echo(json.dumps(output, indent=2))

    sys.exit(EXIT_ALLOW if response.allow else EXIT_DENY)
