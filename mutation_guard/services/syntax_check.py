"""
Syntax sanity check - best-effort bracket balance scan

Not a parser. Brackets inside strings and comments are ignored; everything
else must nest. The scan prefers missing an error over reporting a false
one.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from mutation_guard.models.patch import LintError

RULE = "syntax/brackets"

PAIRS = {"(": ")", "[": "]", "{": "}"}
OPENER_FOR = {close: open_ for open_, close in PAIRS.items()}

HASH_COMMENT_SUFFIXES = {".py", ".pyi", ".sh", ".bash", ".zsh", ".rb", ".yaml", ".yml", ".toml"}
BLOCK_COMMENT_ONLY_SUFFIXES = {".css"}
UNCHECKED_SUFFIXES = {".md", ".markdown", ".txt", ".rst"}

# a `/` after one of these (or at line start) opens a regex literal, not a division
REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")


def _comment_markers(file_path: str) -> tuple[str | None, str | None, str | None]:
    """(line marker, block open, block close) for a file type"""
    suffix = PurePosixPath(file_path).suffix.lower()
    if suffix in HASH_COMMENT_SUFFIXES:
        return "#", None, None
    if suffix in BLOCK_COMMENT_ONLY_SUFFIXES:
        return None, "/*", "*/"
    return "//", "/*", "*/"


def should_check(file_path: str) -> bool:
    return PurePosixPath(file_path).suffix.lower() not in UNCHECKED_SUFFIXES


def check_brackets(content: str, file_path: str = "") -> list[LintError]:
    """Scan `content` and report unbalanced brackets."""
    if file_path and not should_check(file_path):
        return []

    line_marker, block_open, block_close = _comment_markers(file_path)
    regex_literals = line_marker == "//"
    stack: list[tuple[str, int, int]] = []  # (bracket, line, column)
    errors: list[LintError] = []

    quote: str | None = None  # active string delimiter
    escaped = False
    in_block = False

    for line_no, line in enumerate(content.split("\n"), start=1):
        col = 0
        while col < len(line):
            ch = line[col]

            if in_block:
                if line.startswith(block_close, col):
                    in_block = False
                    col += len(block_close)
                else:
                    col += 1
                continue

            if quote is not None:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif line.startswith(quote, col):
                    col += len(quote)
                    quote = None
                    continue
                col += 1
                continue

            if line_marker and line.startswith(line_marker, col):
                break
            if block_open and line.startswith(block_open, col):
                in_block = True
                col += len(block_open)
                continue

            if regex_literals and ch == "/" and _opens_regex(line, col):
                end = _regex_end(line, col)
                if end is None:
                    break  # unterminated: give up on the rest of the line
                col = end
                continue

            if ch in "'\"`":
                triple = ch * 3
                quote = triple if ch != "`" and line.startswith(triple, col) else ch
                col += len(quote)
                continue

            if ch in PAIRS:
                stack.append((ch, line_no, col + 1))
            elif ch in OPENER_FOR:
                _close(ch, line_no, col + 1, stack, errors)
            col += 1

        escaped = False
        # plain quotes cannot span lines; template literals and triple quotes can
        if quote in ("'", '"'):
            quote = None

    for bracket, line_no, column in stack:
        errors.append(
            LintError(
                line=line_no,
                column=column,
                message=f"Unclosed bracket: {bracket}",
                rule=RULE,
            )
        )

    return errors


def _opens_regex(line: str, col: int) -> bool:
    before = line[:col].rstrip()
    return not before or before[-1] in REGEX_PRECEDERS or before.endswith("return")


def _regex_end(line: str, col: int) -> int | None:
    """Index just past the regex literal starting at `col`, or None if it is not closed on this line"""
    in_class = False
    i = col + 1
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            in_class = ch != "]"
        elif ch == "[":
            in_class = True
        elif ch == "/":
            return i + 1
        i += 1
    return None


def _close(
    closer: str,
    line_no: int,
    column: int,
    stack: list[tuple[str, int, int]],
    errors: list[LintError],
) -> None:
    opener = OPENER_FOR[closer]

    if stack and stack[-1][0] == opener:
        stack.pop()
        return

    if any(b == opener for b, _, _ in stack):
        # Unwind to the matching opener; the skipped ones are this one error.
        skipped = []
        while stack[-1][0] != opener:
            skipped.append(stack.pop())
        stack.pop()
        inner, inner_line, inner_col = skipped[0]
        errors.append(
            LintError(
                line=line_no,
                column=column,
                message=(
                    f"Mismatched bracket: {closer} closes {opener} but {inner} "
                    f"opened at {inner_line}:{inner_col} is still open"
                ),
                rule=RULE,
            )
        )
        return

    errors.append(
        LintError(
            line=line_no,
            column=column,
            message=f"Unmatched bracket: {closer}",
            rule=RULE,
        )
    )
