"""Policy utilities for sentinel-pdp.

Provides helper functions for policy file management.
"""

from sentinel_pdp.pdp.policy import validate_policies
from sentinel_pdp.utils.policy.policy_helpers import (
    compute_policy_checksum,
    create_default_policy_file,
    get_policy_path,
    load_policies,
    policy_exists,
    save_policies,
)

__all__ = [
    "compute_policy_checksum",
    "create_default_policy_file",
    "get_policy_path",
    "load_policies",
    "policy_exists",
    "save_policies",
    "validate_policies",
]
