"""Generic tool dispatch endpoints"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from mutation_guard.models.tools import ToolInfo, ToolName, ToolResponse
from mutation_guard.services.gateway import MutationGateway

from .deps import get_gateway

router = APIRouter()


@router.get("", response_model=list[ToolInfo])
async def list_tools(gateway: MutationGateway = Depends(get_gateway)) -> list[ToolInfo]:
    """List the registered tools"""
    return gateway.tools()


@router.post("/{tool_name}", response_model=ToolResponse)
async def call_tool(
    tool_name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    gateway: MutationGateway = Depends(get_gateway),
) -> ToolResponse:
    """Dispatch a tool call by name"""
    try:
        tool = ToolName(tool_name)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {tool_name}")
    return gateway.dispatch(tool, arguments or {})
