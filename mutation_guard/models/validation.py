"""Constraint validation result models"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Violation(BaseModel):
    """A single policy rule violation"""

    severity: Literal["error", "warning"]
    rule: str  # protected_directory, module_boundary, forbidden_pattern, ...
    message: str
    location: str | None = None
    suggestion: str | None = None
    line: int | None = None
    matched: str | None = None


class ValidationOutcome(BaseModel):
    """Aggregated result of validating one proposed mutation"""

    valid: bool
    violations: list[Violation] = []
    requires_approval: bool = False
    approval_reasons: list[str] = []

    @property
    def errors(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == "warning"]
