"""Models module - Pydantic data models"""

from .diff import DiffHunk, DiffResult
from .mutation import (
    ApplyPatch,
    CreateFile,
    DeleteFile,
    InstallDependency,
    MoveFile,
    ProposedMutation,
    ReadFile,
    WriteFile,
    parse_mutation,
)
from .patch import (
    CreateFileResult,
    EditKind,
    EditOperation,
    LintError,
    PatchResult,
    PatchValidation,
)
from .policy import DEFAULT_POLICY, PolicyObject
from .snapshot import RollbackResult, Snapshot, SnapshotInfo
from .tools import ToolName, ToolResponse
from .validation import ValidationOutcome, Violation

__all__ = [
    # Diff models
    "DiffHunk",
    "DiffResult",
    # Mutation models
    "ApplyPatch",
    "CreateFile",
    "DeleteFile",
    "InstallDependency",
    "MoveFile",
    "ProposedMutation",
    "ReadFile",
    "WriteFile",
    "parse_mutation",
    # Patch models
    "CreateFileResult",
    "EditKind",
    "EditOperation",
    "LintError",
    "PatchResult",
    "PatchValidation",
    # Policy models
    "DEFAULT_POLICY",
    "PolicyObject",
    # Snapshot models
    "RollbackResult",
    "Snapshot",
    "SnapshotInfo",
    # Tool models
    "ToolName",
    "ToolResponse",
    # Validation models
    "ValidationOutcome",
    "Violation",
]
