"""Application-wide constants for sentinel-pdp.

Constants that define evaluation and logging behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    # Policy evaluation
    "WILDCARD_ACTION",
    "NO_MATCH_REASON",
    "MATCH_REASON_PREFIX",
    "DEFAULT_MAX_CONDITION_DEPTH",
    "MAX_CONDITION_DEPTH_LIMIT",
    # Path references
    "PATH_REFERENCE_PREFIX",
    "PATH_REFERENCE_SUFFIX",
    "PATH_SEPARATOR",
    # Audit
    "DECISION_EVENT_NAME",
    # Files
    "POLICY_FILENAME",
    "CONFIG_FILENAME",
    "DECISION_LOG_RELATIVE_PATH",
    "SYSTEM_LOG_RELATIVE_PATH",
]

APP_NAME = "sentinel-pdp"

# =============================================================================
# Policy evaluation
# =============================================================================

# A policy listing this action applies to every request action
WILDCARD_ACTION = "*"

NO_MATCH_REASON = "No matching policy"
MATCH_REASON_PREFIX = "Matched "

# Policies are operator-authored, but nesting is still bounded
DEFAULT_MAX_CONDITION_DEPTH = 32
MAX_CONDITION_DEPTH_LIMIT = 256

# =============================================================================
# Path references: "${resource.ownerId}"
# =============================================================================

PATH_REFERENCE_PREFIX = "${"
PATH_REFERENCE_SUFFIX = "}"
PATH_SEPARATOR = "."

# =============================================================================
# Audit / files
# =============================================================================

DECISION_EVENT_NAME = "authorization.decision"

POLICY_FILENAME = "policies.json"
CONFIG_FILENAME = "config.json"

# Relative to LoggingConfig.log_dir
DECISION_LOG_RELATIVE_PATH = "audit/decisions.jsonl"
SYSTEM_LOG_RELATIVE_PATH = "system/system.jsonl"
