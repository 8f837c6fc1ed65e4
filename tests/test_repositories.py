"""Unit tests for policy repositories and the decision point host.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sentinel_pdp.context import DecisionRequest
from sentinel_pdp.exceptions import PolicyAlreadyExistsError, PolicyNotFoundError, PolicyValidationError
from sentinel_pdp.pdp import Policy, PolicyDecisionPoint, PolicyEngine
from sentinel_pdp.repositories import FilePolicyRepository, InMemoryPolicyRepository, PolicyRepository


def _policy(policy_id: str, *actions: str, description: str = "") -> Policy:
    return Policy(id=policy_id, description=description, actions=list(actions) or ["*"])


@pytest.fixture
def policy_file(tmp_path: Path) -> Path:
    path = tmp_path / "policies.json"
    path.write_text(
        json.dumps(
            [
                {"id": "a", "actions": ["doc:read"]},
                {"id": "b", "actions": ["doc:write"]},
            ]
        )
    )
    return path


@pytest.fixture(params=["memory", "file"])
def repository(request: pytest.FixtureRequest, tmp_path: Path) -> PolicyRepository:
    """Each backend, pre-loaded with policies a and b."""
    seed = [_policy("a", "doc:read"), _policy("b", "doc:write")]
    if request.param == "memory":
        return InMemoryPolicyRepository(seed)

    path = tmp_path / "repo" / "policies.json"
    path.parent.mkdir()
    path.write_text(json.dumps([p.to_wire() for p in seed]))
    return FilePolicyRepository(path, system_logger=MagicMock())


# ============================================================================
# Shared CRUD behavior
# ============================================================================


class TestRepositoryContract:
    """Behavior every backend provides."""

    def test_satisfies_protocol(self, repository: PolicyRepository) -> None:
        assert isinstance(repository, PolicyRepository)

    def test_get_all_in_order(self, repository: PolicyRepository) -> None:
        assert [p.id for p in repository.get_all()] == ["a", "b"]

    def test_get_all_returns_snapshot(self, repository: PolicyRepository) -> None:
        # Arrange
        snapshot = repository.get_all()

        # Act
        repository.create(_policy("c"))

        # Assert
        assert [p.id for p in snapshot] == ["a", "b"]

    def test_get_by_id(self, repository: PolicyRepository) -> None:
        found = repository.get_by_id("b")

        assert found is not None
        assert found.actions == ["doc:write"]
        assert repository.get_by_id("zzz") is None

    def test_create_appends(self, repository: PolicyRepository) -> None:
        repository.create(_policy("c"))

        assert [p.id for p in repository.get_all()] == ["a", "b", "c"]

    def test_create_duplicate_raises(self, repository: PolicyRepository) -> None:
        with pytest.raises(PolicyAlreadyExistsError, match="Policy 'a' already exists"):
            repository.create(_policy("a"))

    def test_update_keeps_position(self, repository: PolicyRepository) -> None:
        # Act
        repository.update(_policy("a", "doc:admin", description="changed"))

        # Assert
        policies = repository.get_all()
        assert [p.id for p in policies] == ["a", "b"]
        assert policies[0].description == "changed"

    def test_update_missing_raises(self, repository: PolicyRepository) -> None:
        with pytest.raises(PolicyNotFoundError, match="Policy 'zzz' not found"):
            repository.update(_policy("zzz"))

    def test_delete_removes(self, repository: PolicyRepository) -> None:
        repository.delete("a")

        assert [p.id for p in repository.get_all()] == ["b"]

    def test_delete_missing_raises(self, repository: PolicyRepository) -> None:
        with pytest.raises(PolicyNotFoundError):
            repository.delete("zzz")

    def test_not_found_is_lookup_error(self, repository: PolicyRepository) -> None:
        with pytest.raises(LookupError):
            repository.delete("zzz")


# ============================================================================
# Backend specifics
# ============================================================================


class TestInMemoryRepository:
    """Tests specific to InMemoryPolicyRepository."""

    def test_rejects_duplicate_seed(self) -> None:
        with pytest.raises(PolicyValidationError):
            InMemoryPolicyRepository([_policy("a"), _policy("a")])

    def test_concurrent_creates(self) -> None:
        # Arrange
        repository = InMemoryPolicyRepository()

        def worker(offset: int) -> None:
            for i in range(50):
                repository.create(_policy(f"p{offset}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]

        # Act
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Assert
        assert len(repository) == 200


class TestFileRepository:
    """Tests specific to FilePolicyRepository."""

    def test_mutation_persists_to_disk(self, policy_file: Path) -> None:
        # Arrange
        repository = FilePolicyRepository(policy_file, system_logger=MagicMock())

        # Act
        repository.create(_policy("c", "doc:delete", description="deleters"))

        # Assert
        on_disk = json.loads(policy_file.read_text())
        assert [p["id"] for p in on_disk] == ["a", "b", "c"]
        assert on_disk[2] == {"id": "c", "description": "deleters", "actions": ["doc:delete"]}

    def test_invalid_file_fails_loudly(self, tmp_path: Path) -> None:
        # Arrange
        path = tmp_path / "policies.json"
        path.write_text(json.dumps([{"id": "a", "actions": ["*"]}, {"id": "bad", "actions": []}]))
        repository = FilePolicyRepository(path, system_logger=MagicMock())

        # Act / Assert
        with pytest.raises(PolicyValidationError, match="bad"):
            repository.get_all()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        repository = FilePolicyRepository(tmp_path / "nope.json", system_logger=MagicMock())

        with pytest.raises(FileNotFoundError):
            repository.get_all()

    def test_picks_up_external_edits(self, policy_file: Path) -> None:
        # Arrange
        repository = FilePolicyRepository(policy_file, system_logger=MagicMock())
        assert len(repository.get_all()) == 2

        # Act
        policy_file.write_text(json.dumps([{"id": "only", "actions": ["*"], "description": "replaced"}]))
        stat = policy_file.stat()
        os.utime(policy_file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        # Assert
        assert [p.id for p in repository.get_all()] == ["only"]

    def test_mutations_are_logged(self, policy_file: Path) -> None:
        # Arrange
        system_logger = MagicMock()
        repository = FilePolicyRepository(policy_file, system_logger=system_logger)

        # Act
        repository.create(_policy("c"))
        repository.update(_policy("c", "x"))
        repository.delete("c")

        # Assert
        events = [c[0][0]["event"] for c in system_logger.info.call_args_list]
        assert events == ["policy_created", "policy_updated", "policy_deleted"]

    def test_failed_mutation_does_not_log(self, policy_file: Path) -> None:
        system_logger = MagicMock()
        repository = FilePolicyRepository(policy_file, system_logger=system_logger)

        with pytest.raises(PolicyNotFoundError):
            repository.delete("zzz")

        system_logger.info.assert_not_called()


# ============================================================================
# Decision point host
# ============================================================================


class RecordingAuditor:
    def __init__(self) -> None:
        self.events: list = []

    def log(self, event) -> None:
        self.events.append(event)


class TestPolicyDecisionPoint:
    """Tests for PolicyDecisionPoint."""

    @pytest.fixture
    def request_obj(self) -> DecisionRequest:
        return DecisionRequest.model_validate(
            {"subject": {"sub": "u1"}, "action": "doc:write", "resource": {"type": "doc"}}
        )

    def test_decides_with_repository_policies(self, request_obj: DecisionRequest) -> None:
        # Arrange
        repository = InMemoryPolicyRepository([_policy("a", "doc:read"), _policy("b", "doc:write")])
        decision_point = PolicyDecisionPoint(repository, PolicyEngine(auditor=RecordingAuditor()))

        # Act
        response = decision_point.decide(request_obj)

        # Assert
        assert response.matched_policy_id == "b"

    def test_sees_repository_changes(self, request_obj: DecisionRequest) -> None:
        # Arrange
        repository = InMemoryPolicyRepository()
        decision_point = PolicyDecisionPoint(repository, PolicyEngine(auditor=RecordingAuditor()))
        assert decision_point.decide(request_obj).allow is False

        # Act
        repository.create(_policy("w", "doc:write"))

        # Assert
        assert decision_point.decide(request_obj).matched_policy_id == "w"

    def test_repository_errors_propagate(self, request_obj: DecisionRequest) -> None:
        # Arrange
        repository = MagicMock()
        repository.get_all.side_effect = PolicyValidationError("broken store")
        engine = MagicMock()
        decision_point = PolicyDecisionPoint(repository, engine)

        # Act / Assert
        with pytest.raises(PolicyValidationError):
            decision_point.decide(request_obj)
        engine.evaluate.assert_not_called()

    def test_explain_lists_matches(self, request_obj: DecisionRequest) -> None:
        repository = InMemoryPolicyRepository([_policy("any"), _policy("b", "doc:write")])
        decision_point = PolicyDecisionPoint(repository, PolicyEngine(auditor=RecordingAuditor()))

        assert [m.id for m in decision_point.explain(request_obj)] == ["any", "b"]

    def test_explain_requires_capable_engine(self, request_obj: DecisionRequest) -> None:
        class MinimalEngine:
            def evaluate(self, request, policies):
                raise AssertionError("not called")

        decision_point = PolicyDecisionPoint(InMemoryPolicyRepository(), MinimalEngine())

        with pytest.raises(TypeError):
            decision_point.explain(request_obj)
