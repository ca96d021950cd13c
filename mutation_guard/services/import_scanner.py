"""Import specifier extraction for proposed file content"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

# ES modules, dynamic import(), CommonJS require()
_JS_PATTERNS = (
    re.compile(r"""import\s+(?:[\w\s{},*$]+\s+from\s+)?['"]([^'"]+)['"]"""),
    re.compile(r"""export\s+(?:[\w\s{},*$]+\s+)?from\s+['"]([^'"]+)['"]"""),
    re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
)

_PY_FROM = re.compile(r"^\s*from\s+(\.*[\w.]*)\s+import\s", re.MULTILINE)
_PY_IMPORT = re.compile(r"^\s*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)


def extract_imports(content: str, file_path: str = "") -> list[str]:
    """Return the unique import specifiers in `content`, in order of appearance."""
    found: list[tuple[int, str]] = []
    if PurePosixPath(file_path).suffix.lower() in (".py", ".pyi"):
        for match in _PY_FROM.finditer(content):
            found.append((match.start(), match.group(1)))
        for match in _PY_IMPORT.finditer(content):
            for name in match.group(1).split(","):
                found.append((match.start(), name.strip()))
    else:
        for pattern in _JS_PATTERNS:
            for match in pattern.finditer(content):
                found.append((match.start(), match.group(1)))

    seen: dict[str, None] = {}
    for _, spec in sorted(found, key=lambda item: item[0]):
        seen.setdefault(spec, None)
    return list(seen)
