"""Diff-related data models"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class DiffHunk(BaseModel):
    """A single change hunk between original and patched content"""

    start_line: int  # 1-indexed, original numbering
    end_line: int
    original_content: str
    new_content: str
    change_type: Literal["add", "modify", "delete"]


class DiffResult(BaseModel):
    """Complete diff result for a file"""

    file_path: str
    hunks: list[DiffHunk]
    unified_diff: str  # Standard unified diff format
    additions: int = 0
    deletions: int = 0
