"""
Constraint Validator - Check proposed mutations against an SDD policy

`validate_mutation(policy, mutation)` is a pure function. The six rule
categories below read only the policy and the mutation; their results are
unioned:

1. Path protection (protected directories/files, approval-required patterns)
2. Import boundaries
3. Forbidden dependencies
4. Code quality (file length, forbidden patterns)
5. Naming conventions
6. Directory rules
"""

from __future__ import annotations

import posixpath
import re
from pathlib import PurePosixPath
from typing import Callable

from mutation_guard.models.mutation import MoveFile, ProposedMutation
from mutation_guard.models.policy import PolicyObject
from mutation_guard.models.validation import ValidationOutcome, Violation

from .import_scanner import extract_imports
from .pathmatch import glob_match
from .workspace import normalize_path

HOOK_PREFIX = "use"


# ========== Field access across mutation variants ==========


def _target(mutation: ProposedMutation) -> str | None:
    return getattr(mutation, "target_path", None)


def _content(mutation: ProposedMutation) -> str | None:
    return getattr(mutation, "content", None)


def _imports(mutation: ProposedMutation) -> list[str]:
    declared = getattr(mutation, "imports", None) or []
    content = _content(mutation)
    if not declared and content:
        return extract_imports(content, _target(mutation) or "")
    return list(declared)


def _dependencies(mutation: ProposedMutation) -> list[str]:
    return list(getattr(mutation, "dependencies", None) or [])


def _path_key(path: str) -> str:
    """Separator-normalized path with `.` and `..` segments collapsed"""
    key = posixpath.normpath(normalize_path(path))
    return "" if key == "." else key


# ========== 1. Path protection ==========


def _has_suffix(path: str, pattern: str) -> bool:
    suffix = normalize_path(pattern).strip("/")
    return bool(suffix) and (path == suffix or path.endswith("/" + suffix))


def _is_under(path: str, directory: str) -> bool:
    prefix = normalize_path(directory).strip("/")
    if not prefix:
        return False
    return path == prefix or path.startswith(prefix + "/")


def check_path_protection(policy: PolicyObject, mutation: ProposedMutation) -> tuple[list[Violation], list[str]]:
    violations: list[Violation] = []
    approval_reasons: list[str] = []
    rules = policy.modification_rules

    paths = [_target(mutation)]
    if isinstance(mutation, MoveFile):
        paths.append(mutation.source_path)

    for raw_path in filter(None, paths):
        path = _path_key(raw_path)

        for directory in rules.protected_directories:
            if _is_under(path, directory):
                violations.append(
                    Violation(
                        severity="error",
                        rule="protected_directory",
                        message=f"Cannot modify files in protected directory: {directory}",
                        location=raw_path,
                        suggestion="This directory is protected by the project policy",
                    )
                )

        for pattern in rules.protected_files:
            if glob_match(path, pattern) or _has_suffix(path, pattern):
                violations.append(
                    Violation(
                        severity="error",
                        rule="protected_file",
                        message=f"Cannot modify protected file: {pattern}",
                        location=raw_path,
                        suggestion="This file is protected and requires manual modification",
                    )
                )

        for rule in rules.require_approval:
            if glob_match(path, rule.pattern):
                approval_reasons.append(f"{rule.reason} (pattern: {rule.pattern})")

    return violations, approval_reasons


# ========== 2. Import boundaries ==========


def _is_relative(import_path: str) -> bool:
    return import_path.startswith(".")


def check_module_boundaries(policy: PolicyObject, mutation: ProposedMutation) -> list[Violation]:
    source = _target(mutation)
    if not source or not policy.module_boundaries:
        return []

    imports = _imports(mutation)
    if not imports:
        return []

    violations: list[Violation] = []
    normalized_source = _path_key(source)

    for boundary in policy.module_boundaries:
        if not glob_match(normalized_source, boundary.from_):
            continue

        for import_path in imports:
            normalized_import = normalize_path(import_path)

            for forbidden in boundary.cannot_import:
                if glob_match(normalized_import, forbidden):
                    violations.append(
                        Violation(
                            severity="error",
                            rule="module_boundary",
                            message=f"Module {source} cannot import from {import_path}",
                            location=source,
                            suggestion=f"Files in {boundary.from_} cannot import from {forbidden}",
                        )
                    )

            # Only relative imports are held to the allow-list; packages and node: builtins are exempt
            if boundary.can_import and _is_relative(normalized_import):
                if not any(glob_match(normalized_import, allowed) for allowed in boundary.can_import):
                    violations.append(
                        Violation(
                            severity="warning",
                            rule="module_boundary",
                            message=f"Import {import_path} is not in allowed list for {source}",
                            location=source,
                            suggestion=f"Allowed imports: {', '.join(boundary.can_import)}",
                        )
                    )

    return violations


# ========== 3. Dependencies ==========


def check_dependencies(policy: PolicyObject, mutation: ProposedMutation) -> list[Violation]:
    violations: list[Violation] = []
    forbidden = set(policy.tech_stack.forbidden_packages)
    allowed = set(policy.tech_stack.allowed_packages)

    for dep in _dependencies(mutation):
        if dep in forbidden:
            violations.append(
                Violation(
                    severity="error",
                    rule="forbidden_package",
                    message=f'Package "{dep}" is forbidden by the project policy',
                    suggestion="Please use an alternative package allowed by the project",
                )
            )
        elif allowed and dep not in allowed:
            violations.append(
                Violation(
                    severity="warning",
                    rule="unlisted_package",
                    message=f'Package "{dep}" is not in the allowed package list',
                    suggestion=f"Allowed packages: {', '.join(sorted(allowed))}",
                )
            )

    return violations


# ========== 4. Code quality ==========


def check_code_quality(policy: PolicyObject, mutation: ProposedMutation) -> list[Violation]:
    content = _content(mutation)
    if content is None:
        return []

    violations: list[Violation] = []
    target = _target(mutation)
    quality = policy.code_quality
    lines = content.splitlines()

    if len(lines) > quality.max_file_lines:
        violations.append(
            Violation(
                severity="warning",
                rule="max_file_lines",
                message=f"File exceeds maximum lines ({len(lines)} > {quality.max_file_lines})",
                location=target,
                suggestion="Consider splitting this file into smaller modules",
            )
        )

    for pattern in quality.forbidden_patterns:
        regex = re.compile(pattern)
        for line_no, line in enumerate(lines, start=1):
            match = regex.search(line)
            if match is None:
                continue
            violations.append(
                Violation(
                    severity="error",
                    rule="forbidden_pattern",
                    message=f'Forbidden pattern "{pattern}" found',
                    location=f"{target}:{line_no}" if target else f"line {line_no}",
                    suggestion=f"Remove or replace the forbidden pattern: {match.group(0)}",
                    line=line_no,
                    matched=match.group(0),
                )
            )

    return violations


# ========== 5. Naming conventions ==========


def to_pascal_case(name: str) -> str:
    name = re.sub(r"[-_\s]+(.)", lambda m: m.group(1).upper(), name)
    return name[:1].upper() + name[1:]


def to_camel_case(name: str) -> str:
    name = re.sub(r"[-_\s]+(.)", lambda m: m.group(1).upper(), name)
    return name[:1].lower() + name[1:]


def _to_separated(name: str, sep: str) -> str:
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name)
    return re.sub(r"[-_\s]+", sep, name).lower()


NAMING_STYLES: dict[str, tuple[re.Pattern[str], Callable[[str], str]]] = {
    "pascalcase": (re.compile(r"^[A-Z][a-zA-Z0-9]*$"), to_pascal_case),
    "camelcase": (re.compile(r"^[a-z][a-zA-Z0-9]*$"), to_camel_case),
    "kebab-case": (re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$"), lambda n: _to_separated(n, "-")),
    "snake_case": (re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$"), lambda n: _to_separated(n, "_")),
}


def _style(convention: str) -> tuple[re.Pattern[str], Callable[[str], str]] | None:
    words = convention.split()
    return NAMING_STYLES.get(words[0].lower()) if words else None


def check_naming_conventions(policy: PolicyObject, mutation: ProposedMutation) -> list[Violation]:
    target = _target(mutation)
    if not target:
        return []

    path = PurePosixPath(_path_key(target))
    directories = set(path.parts[:-1])
    file_name = path.name
    stem = file_name.split(".", 1)[0]
    suffix = file_name[len(stem):]
    if not stem:
        return []

    conventions = policy.naming_conventions
    violations: list[Violation] = []

    def warn(message: str, suggested: str) -> None:
        violations.append(
            Violation(
                severity="warning",
                rule="naming_convention",
                message=message,
                location=target,
                suggestion=f"Rename to {suggested}{suffix}",
            )
        )

    if "components" in directories:
        style = _style(conventions.components)
        if style and not style[0].match(stem):
            warn(f'Component file "{file_name}" should be {conventions.components}', style[1](stem))

    if "hooks" in directories and not stem.startswith(HOOK_PREFIX):
        warn(f'Hook file "{file_name}" should start with "{HOOK_PREFIX}"', HOOK_PREFIX + to_pascal_case(stem))

    if "utils" in directories:
        style = _style(conventions.utils)
        if style and not style[0].match(stem):
            warn(f'Utility file "{file_name}" should be {conventions.utils}', style[1](stem))

    return violations


# ========== 6. Directory rules ==========


def check_directory_rules(policy: PolicyObject, mutation: ProposedMutation) -> list[Violation]:
    target = _target(mutation)
    content = _content(mutation)
    if not target or content is None:
        return []

    wrapped = "/" + _path_key(target).strip("/")
    line_count = len(content.splitlines())
    violations: list[Violation] = []

    for dir_path, rules in policy.directory_structure.items():
        directory = normalize_path(dir_path).strip("/")
        if not directory or f"/{directory}/" not in wrapped:
            continue

        if rules.max_lines and line_count > rules.max_lines:
            violations.append(
                Violation(
                    severity="warning",
                    rule="directory_max_lines",
                    message=f"File in {directory}/ exceeds max lines ({line_count} > {rules.max_lines})",
                    location=target,
                )
            )

        for forbidden in rules.forbidden or []:
            if forbidden in content:
                violations.append(
                    Violation(
                        severity="warning",
                        rule="directory_forbidden",
                        message=f"Files in {directory}/ should not contain: {forbidden}",
                        location=target,
                    )
                )

    return violations


# ========== Entry points ==========

_VIOLATION_CHECKS: tuple[Callable[[PolicyObject, ProposedMutation], list[Violation]], ...] = (
    check_module_boundaries,
    check_dependencies,
    check_code_quality,
    check_naming_conventions,
    check_directory_rules,
)


def validate_mutation(policy: PolicyObject, mutation: ProposedMutation) -> ValidationOutcome:
    """Evaluate every rule category and aggregate the outcome."""
    violations, approval_reasons = check_path_protection(policy, mutation)
    for check in _VIOLATION_CHECKS:
        violations.extend(check(policy, mutation))

    return ValidationOutcome(
        valid=not any(v.severity == "error" for v in violations),
        violations=violations,
        requires_approval=bool(approval_reasons),
        approval_reasons=approval_reasons,
    )


class ConstraintValidator:
    """Holds one immutable policy and validates mutations against it"""

    def __init__(self, policy: PolicyObject):
        self.policy = policy

    def validate(self, mutation: ProposedMutation) -> ValidationOutcome:
        return validate_mutation(self.policy, mutation)
