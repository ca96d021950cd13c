"""
Snapshot Store - Versioned per-file history for rollback

Each mutating call captures the file's pre-image before the write and the
post-image after it. Snapshots are kept in memory and persisted as one JSON
document per snapshot, so history survives restarts.
"""

from __future__ import annotations

import itertools
import logging
import time
import uuid
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from mutation_guard.models.snapshot import (
    PruneResult,
    RollbackResult,
    Snapshot,
    SnapshotInfo,
    SnapshotKind,
)

from .workspace import Workspace, WorkspaceViolation

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_DIR = Path(".mutation_guard") / "snapshots"


class SnapshotStoreError(RuntimeError):
    """Snapshot could not be captured or persisted"""


class SnapshotContractError(RuntimeError):
    """Snapshot API used out of order"""


class SnapshotStore:
    """Per-file snapshot history keyed by opaque ids"""

    def __init__(self, workspace: Workspace, snapshot_dir: str | Path | None = None):
        self.workspace = workspace
        directory = Path(snapshot_dir) if snapshot_dir else DEFAULT_SNAPSHOT_DIR
        self.snapshot_dir = directory if directory.is_absolute() else workspace.root / directory
        self._snapshots: dict[str, Snapshot] = {}
        self._by_file: dict[str, list[str]] = {}
        self._seq = itertools.count()

    # ========== Lifecycle ==========

    def create(self, path: str | Path, kind: SnapshotKind) -> str:
        """Capture the current content of `path` as a new snapshot's pre-image."""
        full_path = self.workspace.resolve_rel(path)
        file_key = self.workspace.relative(full_path)

        try:
            pre_image = self.workspace.read_text(full_path)
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotStoreError(f"Failed to read {file_key}: {e}") from e

        snapshot = Snapshot(
            id=f"snap_{uuid.uuid4().hex[:12]}",
            file_path=file_key,
            kind=kind,
            pre_image=pre_image,
            created_at=time.time(),
            sequence=next(self._seq),
        )
        self._persist(snapshot)
        self._register(snapshot)
        logger.debug("Created snapshot %s for %s (%s)", snapshot.id, file_key, kind)
        return snapshot.id

    def attach_post_image(self, snapshot_id: str, content: str) -> None:
        """Record the content written after a successful mutation."""
        snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            raise SnapshotContractError(f"attach_post_image without create: {snapshot_id}")
        if snapshot.post_image is not None:
            raise SnapshotContractError(f"Post-image already attached: {snapshot_id}")

        updated = snapshot.model_copy(update={"post_image": content})
        self._persist(updated)
        self._snapshots[snapshot_id] = updated

    def rollback(self, snapshot_id: str) -> RollbackResult:
        """Restore a snapshot's file to its pre-image."""
        snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            return RollbackResult(
                success=False,
                message=f"Snapshot not found: {snapshot_id}",
                snapshot_id=snapshot_id,
            )

        try:
            if snapshot.kind == "create":
                # The file did not exist before; undoing the creation removes it.
                self.workspace.remove(snapshot.file_path)
            else:
                self.workspace.write_text(snapshot.file_path, snapshot.pre_image)
        except (OSError, WorkspaceViolation) as e:
            logger.error("Rollback of %s failed: %s", snapshot_id, e)
            return RollbackResult(
                success=False,
                message=f"Failed to rollback: {e}",
                snapshot_id=snapshot_id,
                file_path=snapshot.file_path,
            )

        logger.info("Rolled back %s to snapshot %s", snapshot.file_path, snapshot_id)
        return RollbackResult(
            success=True,
            message=f"Rolled back to snapshot {snapshot_id}",
            snapshot_id=snapshot_id,
            file_path=snapshot.file_path,
        )

    def rollback_file(self, path: str | Path) -> RollbackResult:
        """Roll a file back to its most recent snapshot."""
        history = self._by_file.get(self._key(path), [])
        if not history:
            return RollbackResult(
                success=False,
                message=f"No snapshots found for file: {path}",
                snapshot_id="",
                file_path=str(path),
            )
        return self.rollback(history[-1])

    # ========== Queries ==========

    def owns(self, path: Path) -> bool:
        """True if `path` (already resolved) lies in the snapshot directory"""
        directory = self.snapshot_dir.resolve()
        return path == directory or path.is_relative_to(directory)

    def get(self, snapshot_id: str) -> Snapshot | None:
        return self._snapshots.get(snapshot_id)

    def list_by_file(self, path: str | Path) -> Iterator[SnapshotInfo]:
        """Snapshot metadata for one file, oldest first."""
        for snapshot_id in list(self._by_file.get(self._key(path), [])):
            yield SnapshotInfo.from_snapshot(self._snapshots[snapshot_id])

    def list_all(self) -> Iterator[SnapshotInfo]:
        ordered = sorted(self._snapshots.values(), key=lambda s: (s.created_at, s.sequence))
        for snapshot in ordered:
            yield SnapshotInfo.from_snapshot(snapshot)

    # ========== Persistence / retention ==========

    def load(self) -> int:
        """Reload persisted snapshots from disk. Returns the number loaded."""
        if not self.snapshot_dir.exists():
            return 0

        loaded: list[Snapshot] = []
        for snapshot_file in self.snapshot_dir.glob("*.json"):
            try:
                loaded.append(Snapshot.model_validate_json(snapshot_file.read_text(encoding="utf-8")))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable snapshot %s: %s", snapshot_file.name, e)

        self._snapshots.clear()
        self._by_file.clear()
        loaded.sort(key=lambda s: (s.created_at, s.sequence))
        for snapshot in loaded:
            self._register(snapshot)

        next_seq = max((s.sequence for s in loaded), default=-1) + 1
        self._seq = itertools.count(next_seq)
        logger.info("Loaded %d snapshots from %s", len(loaded), self.snapshot_dir)
        return len(loaded)

    def prune(self, path: str | Path, keep: int) -> PruneResult:
        """Drop all but the newest `keep` snapshots of a file."""
        file_key = self._key(path)
        history = self._by_file.get(file_key, [])
        keep = max(keep, 0)
        cutoff = len(history) - keep
        if cutoff <= 0:
            return PruneResult(file_path=file_key, removed=[], kept=len(history))

        removed, remaining = history[:cutoff], history[cutoff:]
        for snapshot_id in removed:
            self._snapshots.pop(snapshot_id, None)
            (self.snapshot_dir / f"{snapshot_id}.json").unlink(missing_ok=True)
        self._by_file[file_key] = remaining

        logger.info("Pruned %d snapshots of %s", len(removed), file_key)
        return PruneResult(file_path=file_key, removed=removed, kept=len(remaining))

    def _persist(self, snapshot: Snapshot) -> None:
        try:
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)
            (self.snapshot_dir / f"{snapshot.id}.json").write_text(
                snapshot.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise SnapshotStoreError(f"Failed to persist snapshot {snapshot.id}: {e}") from e

    def _register(self, snapshot: Snapshot) -> None:
        self._snapshots[snapshot.id] = snapshot
        self._by_file.setdefault(snapshot.file_path, []).append(snapshot.id)

    def _key(self, path: str | Path) -> str:
        try:
            return self.workspace.relative(path)
        except WorkspaceViolation:
            return str(path)
