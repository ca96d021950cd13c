"""Services module - Business logic layer"""

from .config_manager import ConfigManager
from .constraint_validator import ConstraintValidator, validate_mutation
from .diff_generator import DiffGenerator
from .gateway import MutationGateway
from .patch_engine import EditRangeError, PatchEngine
from .policy_loader import PolicyLoader, PolicyParseResult
from .prompt_generator import PromptGenerator
from .snapshot_store import SnapshotContractError, SnapshotStore, SnapshotStoreError
from .workspace import Workspace, WorkspaceViolation

__all__ = [
    "ConfigManager",
    "ConstraintValidator",
    "validate_mutation",
    "DiffGenerator",
    "MutationGateway",
    "EditRangeError",
    "PatchEngine",
    "PolicyLoader",
    "PolicyParseResult",
    "PromptGenerator",
    "SnapshotContractError",
    "SnapshotStore",
    "SnapshotStoreError",
    "Workspace",
    "WorkspaceViolation",
]
