"""Custom exceptions for sentinel-pdp.

Exceptions are organized by the boundary that raises them:

Contract defects (caller bug, raised from PolicyEngine.evaluate):
    - InvalidRequestError: request or policy list is not usable at all

Policy configuration (raised when loading or storing policies):
    - PolicyValidationError: one or more policy records are malformed
    - PolicyNotFoundError: no policy with the given id
    - PolicyAlreadyExistsError: a policy with the given id already exists

Application configuration:
    - ConfigurationError: config file invalid or unusable

A deny decision is never an exception; it is a normal DecisionResponse.

Usage:
    from sentinel_pdp.exceptions import PolicyValidationError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "InvalidRequestError",
    "PolicyAlreadyExistsError",
    "PolicyNotFoundError",
    "PolicyValidationError",
    "SentinelError",
]


class SentinelError(Exception):
    """Base exception for all sentinel-pdp errors."""


class InvalidRequestError(SentinelError, TypeError):
    """The evaluate() contract was violated by the caller.

    Raised when:
    - request is None or cannot be interpreted as a DecisionRequest
    - policies is None or not an iterable of policies

    Structural validation of inputs is the caller's responsibility; this
    only guards the boundary so the engine can assume well-typed values.
    """


class PolicyValidationError(SentinelError, ValueError):
    """One or more policy records failed validation.

    Attributes:
        errors: Human-readable problems, one per offending field.
        source: Where the policies came from (file path, "request"), if known.
    """

    def __init__(self, message: str, *, errors: list[str] | None = None, source: str | None = None) -> None:
        self.errors = errors or []
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        details = "\n".join(f"  - {e}" for e in self.errors)
        return f"{super().__str__()}\n{details}"


class PolicyNotFoundError(SentinelError, LookupError):
    """No policy exists with the requested id."""

    def __init__(self, policy_id: str) -> None:
        self.policy_id = policy_id
        super().__init__(f"Policy '{policy_id}' not found")


class PolicyAlreadyExistsError(SentinelError):
    """A policy with the same id is already stored."""

    def __init__(self, policy_id: str) -> None:
        self.policy_id = policy_id
        super().__init__(f"Policy '{policy_id}' already exists")


class ConfigurationError(SentinelError, ValueError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    """
