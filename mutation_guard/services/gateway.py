"""
Mutation Gateway - Route tool calls to the patch engine, snapshot store and
constraint validator

Mutating tools validate before they write: the change is computed as a dry
run, checked against the policy, and only written when no error-level
violation is found. A blocked change writes nothing and records no snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from mutation_guard.models.mutation import ApplyPatch, CreateFile, ProposedMutation, parse_mutation
from mutation_guard.models.policy import PolicyObject
from mutation_guard.models.snapshot import SnapshotListResponse
from mutation_guard.models.tools import (
    ApplyPatchRequest,
    CreateFileRequest,
    GetSnapshotsRequest,
    PruneSnapshotsRequest,
    RollbackRequest,
    ToolInfo,
    ToolName,
    ToolResponse,
    ValidateRequest,
)
from mutation_guard.models.validation import ValidationOutcome, Violation

from .constraint_validator import validate_mutation
from .import_scanner import extract_imports
from .patch_engine import PatchEngine
from .policy_loader import PolicyLoader
from .snapshot_store import SnapshotStore
from .workspace import Workspace, WorkspaceViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    handler: Callable[[Any], ToolResponse]
    request_model: type[BaseModel]
    description: str
    mutating: bool = False


def format_validation_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = "/".join(str(p) for p in err["loc"]) or "root"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class MutationGateway:
    """Closed registry of guarded file operations"""

    def __init__(
        self,
        engine: PatchEngine,
        policy: PolicyObject | None = None,
        validate_before_write: bool = True,
        snapshot_keep: int = 0,
    ):
        self.engine = engine
        self.snapshots: SnapshotStore = engine.snapshots
        self.workspace: Workspace = engine.workspace
        self.policy = policy
        self.policy_errors: list[str] = []
        self.policy_file: str | Path | None = None  # operator-configured, may be absolute
        self.validate_before_write = validate_before_write
        self.snapshot_keep = snapshot_keep

        self._registry: dict[ToolName, ToolSpec] = {
            ToolName.APPLY_PATCH: ToolSpec(
                self.apply_patch, ApplyPatchRequest, "Apply line-range edits to a file", mutating=True
            ),
            ToolName.CREATE_FILE: ToolSpec(
                self.create_file, CreateFileRequest, "Create a new file", mutating=True
            ),
            ToolName.ROLLBACK: ToolSpec(
                self.rollback, RollbackRequest, "Restore a file to a snapshot's pre-image", mutating=True
            ),
            ToolName.GET_SNAPSHOTS: ToolSpec(
                self.get_snapshots, GetSnapshotsRequest, "List snapshots, optionally for one file"
            ),
            ToolName.VALIDATE: ToolSpec(
                self.validate, ValidateRequest, "Check a proposed mutation against the policy"
            ),
            ToolName.PRUNE_SNAPSHOTS: ToolSpec(
                self.prune_snapshots, PruneSnapshotsRequest, "Drop old snapshots of a file", mutating=True
            ),
        }
        missing = set(ToolName) - set(self._registry)
        if missing:
            raise RuntimeError(f"No handler registered for: {sorted(m.value for m in missing)}")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "MutationGateway":
        """Build a gateway for the configured project root"""
        workspace = Workspace.from_path(config.get("project_root") or ".")
        snapshots = SnapshotStore(workspace, config.get("snapshot_dir"))
        snapshots.load()

        gateway = cls(
            PatchEngine(workspace, snapshots),
            validate_before_write=config.get("validate_before_write", True),
            snapshot_keep=int(config.get("snapshot_keep") or 0),
        )
        gateway.policy_file = config.get("policy_file")
        gateway.reload_policy()
        return gateway

    # ========== Policy ==========

    def reload_policy(self, policy_file: str | Path | None = None) -> list[str]:
        """(Re)load the project policy. Falls back to the default policy on any error."""
        policy_file = policy_file or self.policy_file
        loader = PolicyLoader()
        path = loader.find_policy_file(self.workspace.root, str(policy_file) if policy_file else None)

        if path is None:
            logger.info("No policy file found in %s, using default policy", self.workspace.root)
            self.policy, self.policy_errors = loader.default_policy(), []
            return []

        result = loader.parse_file(path)
        if result.success:
            self.policy, self.policy_errors = result.policy, []
        else:
            for error in result.errors:
                logger.error("Policy %s: %s", path, error)
            self.policy, self.policy_errors = loader.default_policy(), result.errors
        return self.policy_errors

    def check(self, mutation: ProposedMutation) -> ValidationOutcome:
        if self.policy is None:
            return ValidationOutcome(valid=True)
        return validate_mutation(self.policy, mutation)

    # ========== Dispatch ==========

    def tools(self) -> list[ToolInfo]:
        return [
            ToolInfo(name=name, description=spec.description, mutating=spec.mutating)
            for name, spec in self._registry.items()
        ]

    def dispatch(self, name: ToolName | str, arguments: dict[str, Any] | None = None) -> ToolResponse:
        """Run a tool by name. Raises ValueError for names outside ToolName."""
        tool = ToolName(name)
        spec = self._registry[tool]
        try:
            request = spec.request_model.model_validate(arguments or {})
        except ValidationError as e:
            return ToolResponse(tool=tool, success=False, error=f"Invalid arguments: {format_validation_errors(e)}")
        return spec.handler(request)

    # ========== Handlers ==========

    def apply_patch(self, request: ApplyPatchRequest) -> ToolResponse:
        preview = self.engine.apply_patch(request.path, request.patches, dry_run=True)
        if not preview.success:
            return ToolResponse(
                tool=ToolName.APPLY_PATCH,
                success=False,
                result=preview.model_dump(mode="json"),
                error=preview.error,
            )

        outcome = None
        if self.validate_before_write or request.dry_run:
            outcome = self.check(
                ApplyPatch(
                    target_path=preview.file_path,
                    content=preview.new_content,
                    imports=extract_imports(preview.new_content or "", preview.file_path),
                )
            )

        if request.dry_run:
            return ToolResponse(
                tool=ToolName.APPLY_PATCH,
                success=True,
                result=preview.model_dump(mode="json"),
                validation=outcome,
            )

        if outcome is not None and not outcome.valid:
            return self._blocked(ToolName.APPLY_PATCH, preview.file_path, outcome, preview.model_dump(mode="json"))

        result = self.engine.apply_patch(request.path, request.patches)
        if result.success:
            self._retain(result.file_path)
        return ToolResponse(
            tool=ToolName.APPLY_PATCH,
            success=result.success,
            result=result.model_dump(mode="json"),
            validation=outcome,
            error=result.error,
        )

    def create_file(self, request: CreateFileRequest) -> ToolResponse:
        try:
            file_key = self.workspace.relative(request.path)
        except WorkspaceViolation as e:
            logger.warning("Rejected create for %s: %s", request.path, e)
            return ToolResponse(tool=ToolName.CREATE_FILE, success=False, error=str(e))

        outcome = None
        if self.validate_before_write:
            outcome = self.check(
                CreateFile(
                    target_path=file_key,
                    content=request.content,
                    imports=extract_imports(request.content, file_key),
                )
            )
            if not outcome.valid:
                return self._blocked(ToolName.CREATE_FILE, file_key, outcome)

        result = self.engine.create_file(request.path, request.content, overwrite=request.overwrite)
        if result.success:
            self._retain(result.file_path)
        return ToolResponse(
            tool=ToolName.CREATE_FILE,
            success=result.success,
            result=result.model_dump(mode="json"),
            validation=outcome,
            error=result.error,
        )

    def rollback(self, request: RollbackRequest) -> ToolResponse:
        if request.file_path is not None:
            result = self.snapshots.rollback_file(request.file_path)
        else:
            result = self.snapshots.rollback(request.snapshot_id)
        return ToolResponse(
            tool=ToolName.ROLLBACK,
            success=result.success,
            result=result.model_dump(mode="json"),
            error=None if result.success else result.message,
        )

    def get_snapshots(self, request: GetSnapshotsRequest) -> ToolResponse:
        if request.file_path:
            infos = list(self.snapshots.list_by_file(request.file_path))
        else:
            infos = list(self.snapshots.list_all())
        listing = SnapshotListResponse(snapshots=infos)
        return ToolResponse(tool=ToolName.GET_SNAPSHOTS, success=True, result=listing.model_dump(mode="json"))

    def validate(self, request: ValidateRequest) -> ToolResponse:
        try:
            mutation = parse_mutation(request.action)
        except ValidationError as e:
            return ToolResponse(
                tool=ToolName.VALIDATE,
                success=False,
                error=f"Invalid action: {format_validation_errors(e)}",
            )
        try:
            mutation = self._confine(mutation)
        except WorkspaceViolation as e:
            outcome = ValidationOutcome(
                valid=False,
                violations=[Violation(severity="error", rule="outside_workspace", message=str(e))],
            )
        else:
            outcome = self.check(mutation)
        return ToolResponse(tool=ToolName.VALIDATE, success=True, validation=outcome)

    def prune_snapshots(self, request: PruneSnapshotsRequest) -> ToolResponse:
        result = self.snapshots.prune(request.file_path, request.keep)
        return ToolResponse(tool=ToolName.PRUNE_SNAPSHOTS, success=True, result=result.model_dump(mode="json"))

    # ========== Helpers ==========

    def _blocked(
        self,
        tool: ToolName,
        file_path: str,
        outcome: ValidationOutcome,
        result: dict[str, Any] | None = None,
    ) -> ToolResponse:
        rules = sorted({v.rule for v in outcome.errors})
        logger.warning("Blocked %s on %s: %s", tool.value, file_path, ", ".join(rules))
        return ToolResponse(
            tool=tool,
            success=False,
            blocked=True,
            result=result,
            validation=outcome,
            error=f"Blocked by policy: {', '.join(rules)}",
        )

    def _confine(self, mutation: ProposedMutation) -> ProposedMutation:
        """Rewrite the mutation's paths as project-relative keys. Raises WorkspaceViolation."""
        update = {
            field: self.workspace.relative(getattr(mutation, field))
            for field in ("target_path", "source_path")
            if getattr(mutation, field, None)
        }
        return mutation.model_copy(update=update)

    def _retain(self, file_path: str) -> None:
        if self.snapshot_keep > 0:
            self.snapshots.prune(file_path, self.snapshot_keep)
