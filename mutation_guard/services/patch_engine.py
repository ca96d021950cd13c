"""
Patch Engine - Apply line-range edits with snapshot-backed rollback

Edits in one batch are expressed against the original file's line numbers
and applied bottom-to-top, so an edit never shifts the lines of an edit that
is still pending above it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from mutation_guard.models.patch import (
    CreateFileResult,
    EditKind,
    EditOperation,
    PatchResult,
    PatchValidation,
)

from .diff_generator import DiffGenerator
from .snapshot_store import SnapshotStore, SnapshotStoreError
from .syntax_check import check_brackets
from .workspace import Workspace, WorkspaceViolation

logger = logging.getLogger(__name__)


class EditRangeError(ValueError):
    """An edit's line numbers fall outside the file"""


def apply_edits(lines: list[str], edits: Sequence[EditOperation]) -> list[str]:
    """Apply a batch of edits to `lines` and return the new line list.

    Edits are sorted by descending start line; ties keep their batch order.
    """
    new_lines = list(lines)
    for edit in sorted(edits, key=lambda e: e.start_line, reverse=True):
        start_idx = edit.start_line - 1  # 0-based
        end_idx = (edit.end_line or edit.start_line) - 1

        if edit.operation == EditKind.REPLACE:
            new_lines[start_idx : end_idx + 1] = (edit.content or "").split("\n")
        elif edit.operation == EditKind.INSERT:
            new_lines[start_idx:start_idx] = (edit.content or "").split("\n")
        elif edit.operation == EditKind.DELETE:
            del new_lines[start_idx : end_idx + 1]
    return new_lines


def check_ranges(line_count: int, edits: Sequence[EditOperation]) -> None:
    """Raise EditRangeError for edits outside the original file."""
    for edit in edits:
        end_line = edit.end_line or edit.start_line
        # insert may target one past the last line (append)
        limit = line_count + 1 if edit.operation == EditKind.INSERT else line_count
        if edit.start_line > limit:
            raise EditRangeError(
                f"{edit.operation.value} start_line {edit.start_line} is out of range "
                f"(file has {line_count} lines)"
            )
        if edit.operation != EditKind.INSERT and end_line > line_count:
            raise EditRangeError(
                f"{edit.operation.value} end_line {end_line} is out of range "
                f"(file has {line_count} lines)"
            )


class PatchEngine:
    """Apply edit batches to files inside a workspace"""

    def __init__(
        self,
        workspace: Workspace,
        snapshots: SnapshotStore,
        diff_generator: DiffGenerator | None = None,
    ):
        self.workspace = workspace
        self.snapshots = snapshots
        self.diff_generator = diff_generator or DiffGenerator()

    def apply_patch(
        self,
        path: str | Path,
        patches: Sequence[EditOperation],
        dry_run: bool = False,
    ) -> PatchResult:
        """Apply `patches` to `path`; with dry_run nothing is written or snapshotted."""
        display_path = str(path)
        try:
            full_path = self._resolve_target(path)
            display_path = self.workspace.relative(full_path)
        except WorkspaceViolation as e:
            logger.warning("Rejected patch for %s: %s", path, e)
            return self._failed(display_path, str(e), dry_run)

        try:
            original_content = self.workspace.read_text(full_path)
        except (OSError, UnicodeDecodeError) as e:
            return self._failed(display_path, f"Failed to read file: {e}", dry_run)

        lines = original_content.split("\n")
        try:
            check_ranges(len(lines), patches)
        except EditRangeError as e:
            return self._failed(display_path, str(e), dry_run)

        snapshot_id = None
        if not dry_run:
            kind = "modify" if full_path.exists() else "create"
            try:
                snapshot_id = self.snapshots.create(full_path, kind)
            except SnapshotStoreError as e:
                return self._failed(display_path, str(e), dry_run)

        new_content = "\n".join(apply_edits(lines, patches))
        diff = self.diff_generator.generate_diff(original_content, new_content, display_path)
        validation = self.validate_syntax(new_content, display_path)

        if not dry_run:
            try:
                self.workspace.write_text(full_path, new_content)
                self.snapshots.attach_post_image(snapshot_id, new_content)
            except (OSError, SnapshotStoreError) as e:
                logger.error("Write of %s failed (snapshot %s kept): %s", display_path, snapshot_id, e)
                return PatchResult(
                    success=False,
                    file_path=display_path,
                    diff_text=diff.unified_diff,
                    hunks=diff.hunks,
                    validation=validation,
                    snapshot_id=snapshot_id,
                    error=f"Failed to write file: {e}",
                )
            logger.info(
                "Patched %s (+%d/-%d, snapshot %s)",
                display_path,
                diff.additions,
                diff.deletions,
                snapshot_id,
            )

        return PatchResult(
            success=True,
            file_path=display_path,
            diff_text=diff.unified_diff,
            hunks=diff.hunks,
            validation=validation,
            snapshot_id=snapshot_id,
            dry_run=dry_run,
            new_content=new_content,
        )

    def create_file(
        self,
        path: str | Path,
        content: str,
        overwrite: bool = False,
    ) -> CreateFileResult:
        """Create a new file (or overwrite one when allowed)."""
        display_path = str(path)
        try:
            full_path = self._resolve_target(path)
            display_path = self.workspace.relative(full_path)
        except WorkspaceViolation as e:
            logger.warning("Rejected create for %s: %s", path, e)
            return CreateFileResult(success=False, file_path=display_path, error=str(e))

        exists = full_path.exists()
        if exists and not overwrite:
            return CreateFileResult(
                success=False,
                file_path=display_path,
                error=f"File already exists: {display_path}. Set overwrite=true to overwrite.",
            )

        try:
            snapshot_id = self.snapshots.create(full_path, "modify" if exists else "create")
        except SnapshotStoreError as e:
            return CreateFileResult(success=False, file_path=display_path, error=str(e))

        try:
            self.workspace.write_text(full_path, content)
            self.snapshots.attach_post_image(snapshot_id, content)
        except (OSError, SnapshotStoreError) as e:
            self.snapshots.rollback(snapshot_id)
            return CreateFileResult(
                success=False,
                file_path=display_path,
                error=f"Failed to create file: {e}",
            )

        logger.info("Created %s (snapshot %s)", display_path, snapshot_id)
        return CreateFileResult(
            success=True,
            file_path=display_path,
            snapshot_id=snapshot_id,
            validation=self.validate_syntax(content, display_path),
        )

    def _resolve_target(self, path: str | Path) -> Path:
        """Resolve a write target; snapshot history is never a target."""
        full_path = self.workspace.resolve_rel(path)
        if self.snapshots.owns(full_path):
            raise WorkspaceViolation(f"Access denied: path is inside the snapshot directory: {path}")
        return full_path

    @staticmethod
    def validate_syntax(content: str, file_path: str) -> PatchValidation:
        lint_errors = check_brackets(content, file_path)
        return PatchValidation(
            syntax_valid=not any(e.severity == "error" for e in lint_errors),
            lint_errors=lint_errors,
        )

    @staticmethod
    def _failed(file_path: str, error: str, dry_run: bool) -> PatchResult:
        return PatchResult(
            success=False,
            file_path=file_path,
            validation=PatchValidation(syntax_valid=False),
            dry_run=dry_run,
            error=error,
        )
