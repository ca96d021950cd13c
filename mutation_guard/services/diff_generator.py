"""
Diff Generator Service - Unified diffs and change hunks for patched files

One SequenceMatcher pass yields both the hunks and the added/removed line
counts; the unified text is rendered from the same line lists.
"""

from __future__ import annotations

from difflib import SequenceMatcher, unified_diff

from mutation_guard.models.diff import DiffHunk, DiffResult

CHANGE_TYPES = {"insert": "add", "delete": "delete", "replace": "modify"}


def _diff_lines(content: str) -> list[str]:
    """Split into newline-terminated lines so a missing final newline is not a change"""
    lines = content.splitlines(keepends=True)
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    return lines


class DiffGenerator:
    """Generate unified diffs between original and patched content"""

    def __init__(self, context_lines: int = 3):
        self.context_lines = context_lines

    def generate_diff(
        self,
        original_content: str,
        new_content: str,
        file_path: str,
    ) -> DiffResult:
        """Generate structured diff from original and new content"""
        original = _diff_lines(original_content)
        modified = _diff_lines(new_content)

        hunks = self._extract_hunks(original, modified)
        unified = unified_diff(
            original,
            modified,
            fromfile=f"a/{file_path}",
            tofile=f"b/{file_path}",
            n=self.context_lines,
        )

        return DiffResult(
            file_path=file_path,
            hunks=hunks,
            unified_diff="".join(unified),
            additions=sum(h.new_content.count("\n") for h in hunks),
            deletions=sum(h.original_content.count("\n") for h in hunks),
        )

    def _extract_hunks(
        self,
        original: list[str],
        modified: list[str],
    ) -> list[DiffHunk]:
        """One hunk per non-equal opcode, numbered against the original"""
        matcher = SequenceMatcher(None, original, modified, autojunk=False)
        return [
            DiffHunk(
                start_line=i1 + 1,
                end_line=i2,
                original_content="".join(original[i1:i2]),
                new_content="".join(modified[j1:j2]),
                change_type=CHANGE_TYPES[tag],
            )
            for tag, i1, i2, j1, j2 in matcher.get_opcodes()
            if tag != "equal"
        ]
