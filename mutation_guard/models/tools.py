"""Gateway tool data models"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator

from .base import RequestModel
from .patch import EditOperation
from .validation import ValidationOutcome


class ToolName(str, Enum):
    """Operations the mutation gateway can dispatch"""

    APPLY_PATCH = "apply_patch"
    CREATE_FILE = "create_file"
    ROLLBACK = "rollback"
    GET_SNAPSHOTS = "get_snapshots"
    VALIDATE = "validate"
    PRUNE_SNAPSHOTS = "prune_snapshots"


class ApplyPatchRequest(RequestModel):
    """Arguments for apply_patch"""

    path: str
    patches: list[EditOperation]
    dry_run: bool = False


class CreateFileRequest(RequestModel):
    """Arguments for create_file"""

    path: str
    content: str
    overwrite: bool = False


class RollbackRequest(RequestModel):
    """Arguments for rollback: one snapshot, or the latest snapshot of a file"""

    snapshot_id: str | None = None
    file_path: str | None = None

    @model_validator(mode="after")
    def _one_target(self) -> "RollbackRequest":
        if (self.snapshot_id is None) == (self.file_path is None):
            raise ValueError("exactly one of snapshot_id or file_path is required")
        return self


class GetSnapshotsRequest(RequestModel):
    """Arguments for get_snapshots"""

    file_path: str | None = None


class ValidateRequest(RequestModel):
    """Arguments for validate"""

    action: dict[str, Any]


class PruneSnapshotsRequest(RequestModel):
    """Arguments for prune_snapshots"""

    file_path: str
    keep: int = 10


class ToolResponse(BaseModel):
    """Uniform envelope for dispatched tool calls"""

    tool: ToolName
    success: bool
    result: dict[str, Any] | None = None
    validation: ValidationOutcome | None = None
    blocked: bool = False  # policy stopped the write
    error: str | None = None


class ToolInfo(BaseModel):
    """Description of one registered tool"""

    name: ToolName
    description: str
    mutating: bool
