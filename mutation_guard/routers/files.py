"""File mutation and snapshot API endpoints"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from mutation_guard.models.tools import (
    ApplyPatchRequest,
    CreateFileRequest,
    GetSnapshotsRequest,
    PruneSnapshotsRequest,
    RollbackRequest,
    ToolResponse,
)
from mutation_guard.services.gateway import MutationGateway

from .deps import get_gateway

router = APIRouter()


@router.post("/files/apply-patch", response_model=ToolResponse)
async def apply_patch(
    request: ApplyPatchRequest,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Apply line-range edits to a file (validated before write)"""
    return gateway.apply_patch(request)


@router.post("/files/create", response_model=ToolResponse)
async def create_file(
    request: CreateFileRequest,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Create a new file (validated before write)"""
    return gateway.create_file(request)


# ========== Snapshots ==========


@router.get("/snapshots", response_model=ToolResponse)
async def list_snapshots(
    file_path: str | None = None,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """List snapshots, optionally filtered to one file"""
    return gateway.get_snapshots(GetSnapshotsRequest(file_path=file_path))


@router.post("/snapshots/prune", response_model=ToolResponse)
async def prune_snapshots(
    request: PruneSnapshotsRequest,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Keep only the newest snapshots of a file"""
    return gateway.prune_snapshots(request)


@router.post("/snapshots/{snapshot_id}/rollback", response_model=ToolResponse)
async def rollback_snapshot(
    snapshot_id: str,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Restore a file to the state before the given snapshot"""
    return gateway.rollback(RollbackRequest(snapshot_id=snapshot_id))
