"""Pytest configuration for Mutation Guard tests.

Ensures the project root is in sys.path so imports work without an install.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from mutation_guard.services.patch_engine import PatchEngine  # noqa: E402
from mutation_guard.services.policy_loader import PolicyLoader  # noqa: E402
from mutation_guard.services.snapshot_store import SnapshotStore  # noqa: E402
from mutation_guard.services.workspace import Workspace  # noqa: E402



@pytest.fixture
def workspace(tmp_path):
    return Workspace.from_path(tmp_path)


@pytest.fixture
def store(workspace):
    return SnapshotStore(workspace)


@pytest.fixture
def engine(workspace, store):
    return PatchEngine(workspace, store)


@pytest.fixture
def ten_line_file(workspace):
    """A 10-line file L1..L10 without trailing newline."""
    (workspace.root / "sample.txt").write_text("\n".join(f"L{i}" for i in range(1, 11)), encoding="utf-8")
    return "sample.txt"


@pytest.fixture
def make_policy():
    """Build a validated policy from a partial document."""

    def _make(doc: str):
        result = PolicyLoader().parse_content(doc)
        assert result.success, result.errors
        return result.policy

    return _make
