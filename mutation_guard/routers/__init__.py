"""Routers module - FastAPI route handlers"""

from . import files, policy, tools

__all__ = ["files", "policy", "tools"]
