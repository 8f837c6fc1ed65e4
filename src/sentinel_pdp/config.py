"""Application configuration for sentinel-pdp.

Defines configuration models for logging, the policy source and evaluation
limits. Config is stored at the OS-appropriate location (via
click.get_app_dir). Every section has defaults, so a missing config file
means "use defaults".

Example usage:
    # Load from config file
    config = AppConfig.load_from_file(config_path)

    # Save configuration
    config.save_to_file(config_path)
"""

from __future__ import annotations

__all__ = [
    "AppConfig",
    "EvaluationConfig",
    "LoggingConfig",
    "PolicySourceConfig",
    "get_config_path",
    "get_decision_log_path",
    "get_system_log_path",
]

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from sentinel_pdp.constants import (
    CONFIG_FILENAME,
    DECISION_LOG_RELATIVE_PATH,
    DEFAULT_MAX_CONDITION_DEPTH,
    MAX_CONDITION_DEPTH_LIMIT,
    SYSTEM_LOG_RELATIVE_PATH,
)
from sentinel_pdp.exceptions import ConfigurationError
from sentinel_pdp.utils.file_helpers import (
    atomic_write_json,
    get_app_dir,
    load_validated_json,
    require_file_exists,
)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    When log_dir is set, logs are stored with this structure:
        <log_dir>/
        ├── system/
        │   └── system.jsonl        # WARNING and above
        └── audit/                  # Always enabled (decision audit trail)
            └── decisions.jsonl

    Without log_dir, decision events are written as JSONL to stderr.

    Attributes:
        log_dir: Base directory for logs, or None for stderr only.
        log_level: Console level for the system logger.
    """

    log_dir: str | None = Field(default=None, min_length=1)
    log_level: Literal["DEBUG", "INFO", "WARNING"] = "INFO"


# =============================================================================
# Policy / Evaluation Configuration
# =============================================================================


class PolicySourceConfig(BaseModel):
    """Where the policy list is read from.

    Attributes:
        path: Path to the policy JSON file. None uses <app dir>/policies.json.
    """

    path: str | None = Field(default=None, min_length=1)


class EvaluationConfig(BaseModel):
    """Evaluation limits.

    Attributes:
        max_condition_depth: ABAC nesting beyond this depth evaluates to false.
    """

    max_condition_depth: int = Field(
        default=DEFAULT_MAX_CONDITION_DEPTH,
        ge=1,
        le=MAX_CONDITION_DEPTH_LIMIT,
    )


class AppConfig(BaseModel):
    """Main application configuration for sentinel-pdp.

    Attributes:
        logging: Logging configuration (log directory, level).
        policy: Policy source configuration.
        evaluation: Evaluation limits.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    policy: PolicySourceConfig = Field(default_factory=PolicySourceConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)

    model_config = {"extra": "ignore"}  # Ignore unknown fields for forward compat

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file atomically.

        Creates parent directories if they don't exist.
        Sets secure permissions (0o700 dir, 0o600 file).

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        atomic_write_json(self.model_dump(mode="json"), config_path, prefix=".config_")

    @classmethod
    def load_from_file(cls, config_path: Path) -> AppConfig:
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ConfigurationError: If config file is invalid (a ValueError).
        """
        require_file_exists(config_path, file_type="configuration")
        try:
            return load_validated_json(
                config_path,
                cls,
                file_type="config",
                recovery_hint=f"Fix or delete {config_path} to use defaults.",
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def load_or_default(cls, config_path: Path | None = None) -> AppConfig:
        """Load configuration, falling back to defaults if the file is absent.

        An existing but invalid file still raises.

        Args:
            config_path: Path to the config file. If None, uses get_config_path().

        Returns:
            AppConfig instance.

        Raises:
            ConfigurationError: If config file exists but is invalid.
        """
        path = config_path or get_config_path()
        if not path.exists():
            return cls()
        return cls.load_from_file(path)

    def resolve_policy_path(self) -> Path:
        """Policy file path from config, or the default location."""
        # Import here to avoid circular import
        from sentinel_pdp.utils.policy.policy_helpers import get_policy_path

        if self.policy.path:
            return Path(self.policy.path).expanduser()
        return get_policy_path()


# =============================================================================
# Paths
# =============================================================================


def get_config_path() -> Path:
    """Get the full path to the config file.

    Returns:
        Path to config.json in the application directory.
    """
    return get_app_dir() / CONFIG_FILENAME


def get_decision_log_path(config: AppConfig) -> Path | None:
    """Get the decision audit log path.

    Args:
        config: Application configuration.

    Returns:
        <log_dir>/audit/decisions.jsonl, or None when no log_dir is set.
    """
    if config.logging.log_dir is None:
        return None
    return Path(config.logging.log_dir).expanduser() / DECISION_LOG_RELATIVE_PATH


def get_system_log_path(config: AppConfig) -> Path | None:
    """Get the system log path.

    Args:
        config: Application configuration.

    Returns:
        <log_dir>/system/system.jsonl, or None when no log_dir is set.
    """
    if config.logging.log_dir is None:
        return None
    return Path(config.logging.log_dir).expanduser() / SYSTEM_LOG_RELATIVE_PATH
