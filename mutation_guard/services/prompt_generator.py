"""
Prompt Generator - Render a policy as system prompt constraints for the agent
"""

from __future__ import annotations

from mutation_guard.models.policy import PolicyObject


class PromptGenerator:
    """Turn a policy into a markdown constraints section"""

    def __init__(self, policy: PolicyObject, prefix: str = "", suffix: str = ""):
        self.policy = policy
        self.prefix = prefix
        self.suffix = suffix

    def generate(self) -> str:
        """Generate the full constraints section"""
        sections = [
            "## Project Constraints",
            "The following constraints are **mandatory**. All your actions must strictly comply:",
            self._project_section(),
            self._tech_stack_section(),
            self._directory_section(),
            self._module_boundary_section(),
            self._naming_section(),
            self._code_quality_section(),
            self._modification_section(),
            self._reminders(),
        ]
        body = "\n\n".join(s for s in sections if s)
        return "\n\n".join(part for part in (self.prefix, body, self.suffix) if part)

    def _project_section(self) -> str:
        project = self.policy.project
        lines = [
            "### Project Info",
            f"- **Name**: {project.name}",
            f"- **Type**: {project.type}",
        ]
        if project.description:
            lines.append(f"- **Description**: {project.description}")
        return "\n".join(lines)

    def _tech_stack_section(self) -> str:
        stack = self.policy.tech_stack
        lines = [
            "### Tech Stack Constraints",
            f"- **Framework**: {stack.framework} {stack.version}",
            f"- **Language**: {stack.language}",
        ]
        if stack.styling:
            lines.append(f"- **Styling**: {stack.styling}")
        if stack.state_management:
            lines.append(f"- **State Management**: {stack.state_management}")
        if stack.allowed_packages:
            lines.append(f"- **Allowed packages only**: {', '.join(stack.allowed_packages)}")
        if stack.forbidden_packages:
            lines.append(f"- **Forbidden packages** (never install or import): {', '.join(stack.forbidden_packages)}")
        return "\n".join(lines)

    def _directory_section(self) -> str:
        if not self.policy.directory_structure:
            return ""
        lines = ["### Directory Rules"]
        for directory, rule in self.policy.directory_structure.items():
            details = []
            if rule.pattern:
                details.append(f"file names match `{rule.pattern}`")
            if rule.max_lines:
                details.append(f"at most {rule.max_lines} lines")
            if rule.required_exports:
                details.append(f"must export {', '.join(rule.required_exports)}")
            if rule.forbidden:
                details.append(f"must not contain {', '.join(f'`{f}`' for f in rule.forbidden)}")
            if rule.must_be_pure:
                details.append("must be pure (no side effects)")
            lines.append(f"- `{directory}/`: {'; '.join(details) if details else 'no extra rules'}")
        return "\n".join(lines)

    def _module_boundary_section(self) -> str:
        if not self.policy.module_boundaries:
            return ""
        lines = ["### Module Boundaries"]
        for boundary in self.policy.module_boundaries:
            lines.append(f"- Files in `{boundary.from_}`:")
            if boundary.can_import:
                lines.append(f"  - may import: {', '.join(boundary.can_import)}")
            if boundary.cannot_import:
                lines.append(f"  - must NOT import: {', '.join(boundary.cannot_import)}")
        return "\n".join(lines)

    def _naming_section(self) -> str:
        naming = self.policy.naming_conventions
        return "\n".join(
            [
                "### Naming Conventions",
                f"- Components: {naming.components}",
                f"- Hooks: {naming.hooks}",
                f"- Utils: {naming.utils}",
                f"- Constants: {naming.constants}",
                f"- Types: {naming.types}",
            ]
        )

    def _code_quality_section(self) -> str:
        quality = self.policy.code_quality
        lines = [
            "### Code Quality",
            f"- Max function length: {quality.max_function_lines} lines",
            f"- Max file length: {quality.max_file_lines} lines",
            f"- Max parameters per function: {quality.max_parameters}",
        ]
        if quality.require_docstrings:
            lines.append("- Every exported function needs a doc comment")
        if quality.forbidden_patterns:
            lines.append(f"- Forbidden patterns: {', '.join(f'`{p}`' for p in quality.forbidden_patterns)}")
        return "\n".join(lines)

    def _modification_section(self) -> str:
        rules = self.policy.modification_rules
        lines = ["### Modification Safety"]
        if rules.protected_directories:
            lines.append(f"- Never modify files under: {', '.join(rules.protected_directories)}")
        if rules.protected_files:
            lines.append(f"- Never modify: {', '.join(rules.protected_files)}")
        for rule in rules.require_approval:
            lines.append(f"- Changes to `{rule.pattern}` need human approval: {rule.reason}")
        if len(lines) == 1:
            lines.append("- No protected paths configured")
        return "\n".join(lines)

    def _reminders(self) -> str:
        return "\n".join(
            [
                "### Reminders",
                "- Prefer minimal line-range patches over rewriting whole files",
                "- Line numbers in a patch always refer to the file before the patch",
                "- Every write is snapshotted and can be rolled back",
            ]
        )
