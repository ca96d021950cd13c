"""Policy API endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from mutation_guard.models.base import RequestModel
from mutation_guard.models.tools import ToolResponse, ValidateRequest
from mutation_guard.services.gateway import MutationGateway
from mutation_guard.services.prompt_generator import PromptGenerator
from mutation_guard.services.workspace import WorkspaceViolation

from .deps import get_gateway

router = APIRouter()


class PolicyResponse(BaseModel):
    """Currently loaded policy"""

    policy: dict[str, Any] | None
    errors: list[str]


class PromptResponse(BaseModel):
    """Policy rendered as agent prompt constraints"""

    prompt: str


class ReloadRequest(RequestModel):
    """Request to reload the policy, optionally from another file"""

    policy_file: str | None = None


@router.get("", response_model=PolicyResponse)
async def get_policy(gateway: MutationGateway = Depends(get_gateway)) -> PolicyResponse:
    """Get the active policy and any errors from its last load"""
    policy = gateway.policy.model_dump(mode="json", by_alias=True) if gateway.policy else None
    return PolicyResponse(policy=policy, errors=gateway.policy_errors)


@router.post("/validate", response_model=ToolResponse)
async def validate_action(
    request: ValidateRequest,
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Check a proposed mutation without applying it"""
    return gateway.validate(request)


@router.get("/prompt", response_model=PromptResponse)
async def get_prompt(gateway: MutationGateway = Depends(get_gateway)) -> PromptResponse:
    """Render the active policy as a system prompt section"""
    if gateway.policy is None:
        raise HTTPException(status_code=404, detail="No policy loaded")
    return PromptResponse(prompt=PromptGenerator(gateway.policy).generate())


@router.post("/reload", response_model=PolicyResponse)
async def reload_policy(
    request: ReloadRequest | None = None,
    gateway: MutationGateway = Depends(get_gateway),
) -> PolicyResponse:
    """Reload the policy from disk; a requested file must lie inside the project"""
    policy_file = None
    if request and request.policy_file:
        try:
            policy_file = gateway.workspace.resolve_rel(request.policy_file)
        except WorkspaceViolation as e:
            current = gateway.policy.model_dump(mode="json", by_alias=True) if gateway.policy else None
            return PolicyResponse(policy=current, errors=[str(e)])
    errors = gateway.reload_policy(policy_file)
    policy = gateway.policy.model_dump(mode="json", by_alias=True) if gateway.policy else None
    return PolicyResponse(policy=policy, errors=errors)
