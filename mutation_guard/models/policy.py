"""Policy (SDD) schema using Pydantic.

The policy document describes what an autonomous agent may change in a
project:
- Project metadata and tech stack allow/deny lists
- Per-directory rules and module import boundaries
- Naming conventions and code quality thresholds
- Modification safety rules (protected paths, approval-required patterns)

Models are frozen and reject unknown keys. Field names are the canonical
snake_case spellings; alternate spellings are rewritten by the loader before
validation.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _PolicyModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


def _as_text(v: Any) -> Any:
    # YAML reads unquoted `version: 1.0` as a number
    return str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v


# ============================================================================
# Project / Tech stack
# ============================================================================


class ProjectInfo(_PolicyModel):
    """Project metadata."""

    name: str = Field(..., description="Project name")
    type: str = Field(..., description="Project type (spa, library, service...)")
    description: str | None = Field(None, description="Free-form description")


class TechStack(_PolicyModel):
    """Tech stack and dependency allow/deny lists."""

    framework: str
    version: str
    language: str
    styling: str | None = None
    state_management: str | None = None
    allowed_packages: list[str] = Field(default_factory=list, description="Empty = any package")
    forbidden_packages: list[str] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        return _as_text(v)


# ============================================================================
# Structure rules
# ============================================================================


class DirectoryRule(_PolicyModel):
    """Rules for files inside one directory."""

    pattern: str | None = Field(None, description="Expected file name pattern")
    max_lines: int | None = Field(None, gt=0)
    required_exports: list[str] | None = None
    forbidden: list[str] | None = Field(None, description="Literal substrings not allowed in files")
    must_be_pure: bool | None = None


class ModuleBoundary(_PolicyModel):
    """Import boundary for files matching `from`."""

    from_: str = Field(..., alias="from", description="Glob of importing files")
    can_import: list[str] = Field(default_factory=list, description="Empty = no allow-list")
    cannot_import: list[str] = Field(default_factory=list)


class NamingConventions(_PolicyModel):
    """Naming convention per file category."""

    components: str = "PascalCase"
    hooks: str = "camelCase with use prefix"
    utils: str = "camelCase"
    constants: str = "SCREAMING_SNAKE_CASE"
    types: str = "PascalCase"


class CodeQuality(_PolicyModel):
    """Global quality thresholds."""

    max_function_lines: int = Field(50, gt=0)
    max_file_lines: int = Field(300, gt=0)
    max_parameters: int = Field(4, gt=0)
    require_docstrings: bool = False
    forbidden_patterns: list[str] = Field(default_factory=list, description="Regular expressions")

    @field_validator("forbidden_patterns")
    @classmethod
    def compile_patterns(cls, v: list[str]) -> list[str]:
        """Reject patterns that are not valid regular expressions."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid regular expression {pattern!r}: {e}") from e
        return v


# ============================================================================
# Modification safety
# ============================================================================


class ApprovalRule(_PolicyModel):
    """Changes matching `pattern` need human review."""

    pattern: str
    reason: str


class ModificationRules(_PolicyModel):
    """Protected paths and approval-required patterns."""

    protected_files: list[str] = Field(default_factory=list)
    protected_directories: list[str] = Field(default_factory=list)
    require_approval: list[ApprovalRule] = Field(default_factory=list)


# ============================================================================
# Root
# ============================================================================


class PolicyObject(_PolicyModel):
    """Fully-defaulted, validated policy."""

    version: str
    project: ProjectInfo
    tech_stack: TechStack
    directory_structure: dict[str, DirectoryRule]
    module_boundaries: list[ModuleBoundary]
    naming_conventions: NamingConventions
    code_quality: CodeQuality
    modification_rules: ModificationRules

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("directory_structure", mode="before")
    @classmethod
    def empty_rules(cls, v: Any) -> Any:
        """A directory listed without rules gets an empty rule set."""
        if isinstance(v, dict):
            return {k: ({} if rule is None else rule) for k, rule in v.items()}
        return v


DEFAULT_POLICY: dict[str, Any] = {
    "version": "1.0",
    "project": {
        "name": "unnamed-project",
        "type": "generic",
    },
    "tech_stack": {
        "framework": "react",
        "version": "^18.0.0",
        "language": "typescript",
        "allowed_packages": [],
        "forbidden_packages": [],
    },
    "directory_structure": {},
    "module_boundaries": [],
    "naming_conventions": {
        "components": "PascalCase",
        "hooks": "camelCase with use prefix",
        "utils": "camelCase",
        "constants": "SCREAMING_SNAKE_CASE",
        "types": "PascalCase",
    },
    "code_quality": {
        "max_function_lines": 50,
        "max_file_lines": 300,
        "max_parameters": 4,
        "require_docstrings": False,
        "forbidden_patterns": [],
    },
    "modification_rules": {
        "protected_files": [],
        "protected_directories": ["node_modules", ".git"],
        "require_approval": [],
    },
}
