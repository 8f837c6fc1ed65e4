"""Policy storage backends.

Provides:
- PolicyRepository: protocol every backend satisfies
- InMemoryPolicyRepository: lock-guarded list (tests, embedding)
- FilePolicyRepository: JSON array on disk
"""

from sentinel_pdp.repositories.base import PolicyRepository
from sentinel_pdp.repositories.file import FilePolicyRepository
from sentinel_pdp.repositories.memory import InMemoryPolicyRepository

__all__ = [
    "FilePolicyRepository",
    "InMemoryPolicyRepository",
    "PolicyRepository",
]
