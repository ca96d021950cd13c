"""
Policy Loader - Parse, normalize, default and validate SDD policy documents

Pipeline: text -> YAML (JSON fallback) -> key normalization -> deep merge onto
defaults -> schema validation. Every failure is returned as a structured
result; nothing raises past this module.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, ValidationError

from mutation_guard.models.policy import DEFAULT_POLICY, PolicyObject

logger = logging.getLogger(__name__)

DEFAULT_POLICY_FILENAMES = ("sdd.yaml", "sdd.yml", "sdd.json")


# canonical name -> alternate spellings accepted in documents
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "tech_stack": ("techStack", "tech-stack"),
    "directory_structure": ("directoryStructure", "directory-structure"),
    "module_boundaries": ("moduleBoundaries", "module-boundaries"),
    "naming_conventions": ("namingConventions", "naming-conventions"),
    "code_quality": ("codeQuality", "code-quality"),
    "modification_rules": ("modificationRules", "modification-rules"),
    "allowed_packages": ("allowedPackages", "allowed-packages"),
    "forbidden_packages": ("forbiddenPackages", "forbidden-packages"),
    "state_management": ("stateManagement", "state-management"),
    "max_lines": ("maxLines", "max-lines"),
    "required_exports": ("requiredExports", "required-exports"),
    "must_be_pure": ("mustBePure", "must-be-pure"),
    "can_import": ("canImport", "can-import"),
    "cannot_import": ("cannotImport", "cannot-import"),
    "max_function_lines": ("maxFunctionLines", "max-function-lines"),
    "max_file_lines": ("maxFileLines", "max-file-lines"),
    "max_parameters": ("maxParameters", "max-parameters"),
    "require_docstrings": ("requireDocstrings", "require-docstrings", "requireJsdoc", "require_jsdoc"),
    "forbidden_patterns": ("forbiddenPatterns", "forbidden-patterns"),
    "protected_files": ("protectedFiles", "protected-files"),
    "protected_directories": ("protectedDirectories", "protected-directories"),
    "require_approval": ("requireApproval", "require-approval"),
}

KEY_ALIASES: dict[str, str] = {
    alias: canonical for canonical, aliases in FIELD_ALIASES.items() for alias in aliases
}


class PolicyParseError(ValueError):
    """Policy text is neither YAML nor JSON, or not a mapping"""


class PolicyParseResult(BaseModel):
    """Outcome of loading a policy document"""

    success: bool
    policy: PolicyObject | None = None
    errors: list[str] = []
    source: str = "inline"


def parse_text(text: str, source: str = "inline") -> dict[str, Any]:
    """Parse YAML, falling back to JSON. Raises PolicyParseError."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as yaml_error:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as json_error:
            raise PolicyParseError(
                f"Failed to parse policy from {source}: invalid YAML ({yaml_error}) "
                f"and invalid JSON ({json_error})"
            ) from json_error

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PolicyParseError(
            f"Failed to parse policy from {source}: top level must be a mapping, "
            f"got {type(data).__name__}"
        )
    return data


def _deep_map_keys(value: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(value, dict):
        return {rename(k) if isinstance(k, str) else k: _deep_map_keys(v, rename) for k, v in value.items()}
    if isinstance(value, list):
        return [_deep_map_keys(item, rename) for item in value]
    return value


def normalize_keys(obj: dict[str, Any]) -> dict[str, Any]:
    """Rewrite alternate key spellings to canonical names, at any depth."""
    return _deep_map_keys(obj, lambda key: KEY_ALIASES.get(key, key))


def merge_with_defaults(normalized: dict[str, Any], defaults: dict[str, Any] | None = None) -> dict[str, Any]:
    """Deep merge `normalized` onto the defaults. Lists replace, never concatenate."""
    return _deep_merge(copy.deepcopy(DEFAULT_POLICY if defaults is None else defaults), normalized)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _pointer(loc: tuple[Any, ...]) -> str:
    if not loc:
        return "root"
    return "/" + "/".join(str(part) for part in loc)


def validate_policy(merged: dict[str, Any]) -> PolicyObject | list[str]:
    """Validate a merged document. Returns the policy or `<pointer>: <message>` errors."""
    try:
        return PolicyObject.model_validate(merged)
    except ValidationError as e:
        return [f"{_pointer(err['loc'])}: {err['msg']}" for err in e.errors()]


class PolicyLoader:
    """Load SDD policy documents from text or files"""

    def parse_content(self, content: str, source: str = "inline") -> PolicyParseResult:
        try:
            raw = parse_text(content, source)
        except PolicyParseError as e:
            return PolicyParseResult(success=False, errors=[str(e)], source=source)

        merged = merge_with_defaults(normalize_keys(raw))
        validated = validate_policy(merged)
        if isinstance(validated, list):
            logger.warning("Policy from %s is invalid: %d errors", source, len(validated))
            return PolicyParseResult(success=False, errors=validated, source=source)

        logger.info("Loaded policy for project %s from %s", validated.project.name, source)
        return PolicyParseResult(success=True, policy=validated, source=source)

    def parse_file(self, file_path: str | Path) -> PolicyParseResult:
        path = Path(file_path)
        if not path.exists():
            return PolicyParseResult(
                success=False,
                errors=[f"Policy file not found: {path}"],
                source=str(path),
            )
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return PolicyParseResult(
                success=False,
                errors=[f"Failed to read policy file: {e}"],
                source=str(path),
            )
        return self.parse_content(content, str(path))

    def find_policy_file(self, project_root: str | Path, configured: str | None = None) -> Path | None:
        """Locate the policy file for a project."""
        root = Path(project_root)
        candidates = (configured,) if configured else DEFAULT_POLICY_FILENAMES
        for name in candidates:
            candidate = Path(name) if Path(name).is_absolute() else root / name
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def default_policy() -> PolicyObject:
        return PolicyObject.model_validate(copy.deepcopy(DEFAULT_POLICY))
