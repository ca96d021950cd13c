"""Patch engine data models"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, model_validator

from .base import RequestModel
from .diff import DiffHunk


class EditKind(str, Enum):
    """Line-level edit operations"""

    REPLACE = "replace"
    INSERT = "insert"
    DELETE = "delete"


class EditOperation(RequestModel):
    """A single line-range edit.

    Line numbers are 1-based, inclusive, and always refer to the original
    file's numbering, never to the numbering after earlier edits.
    """

    operation: EditKind
    start_line: int
    end_line: int | None = None  # defaults to start_line
    content: str | None = None  # required for replace / insert

    @model_validator(mode="after")
    def _check_fields(self) -> "EditOperation":
        if self.start_line < 1:
            raise ValueError("start_line must be >= 1")
        if self.end_line is None:
            self.end_line = self.start_line
        if self.end_line < self.start_line:
            raise ValueError("end_line must be >= start_line")
        if self.operation in (EditKind.REPLACE, EditKind.INSERT) and self.content is None:
            raise ValueError(f"content is required for {self.operation.value}")
        return self


class LintError(BaseModel):
    """A lint finding from the syntax sanity check"""

    line: int
    column: int
    message: str
    rule: str
    severity: Literal["error", "warning"] = "error"


class TypeCheckError(BaseModel):
    """A type checker finding"""

    line: int
    column: int
    message: str
    code: int


class PatchValidation(BaseModel):
    """Post-patch sanity results"""

    syntax_valid: bool = True
    lint_errors: list[LintError] = []
    type_errors: list[TypeCheckError] = []


class PatchResult(BaseModel):
    """Result of an apply_patch call"""

    success: bool
    file_path: str
    diff_text: str = ""
    hunks: list[DiffHunk] = []
    validation: PatchValidation = PatchValidation()
    snapshot_id: str | None = None  # None for dry runs and rejected calls
    dry_run: bool = False
    new_content: str | None = None
    error: str | None = None


class CreateFileResult(BaseModel):
    """Result of a create_file call"""

    success: bool
    file_path: str
    snapshot_id: str | None = None
    validation: PatchValidation = PatchValidation()
    error: str | None = None
