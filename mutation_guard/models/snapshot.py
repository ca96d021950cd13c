"""Snapshot data models"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

SnapshotKind = Literal["create", "modify"]


class Snapshot(BaseModel):
    """Stored pre/post content pair for one file"""

    id: str
    file_path: str  # project-relative, posix separators
    kind: SnapshotKind
    pre_image: str
    post_image: str | None = None
    created_at: float
    sequence: int = 0  # tie-breaker for equal timestamps


class SnapshotInfo(BaseModel):
    """Snapshot metadata without file contents"""

    id: str
    file_path: str
    kind: SnapshotKind
    created_at: float
    applied: bool  # post-image attached

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotInfo":
        return cls(
            id=snapshot.id,
            file_path=snapshot.file_path,
            kind=snapshot.kind,
            created_at=snapshot.created_at,
            applied=snapshot.post_image is not None,
        )


class RollbackResult(BaseModel):
    """Result of a rollback"""

    success: bool
    message: str
    snapshot_id: str
    file_path: str | None = None


class SnapshotListResponse(BaseModel):
    """Snapshot listing"""

    snapshots: list[SnapshotInfo]


class PruneResult(BaseModel):
    """Result of an explicit retention prune"""

    file_path: str
    removed: list[str]
    kept: int
