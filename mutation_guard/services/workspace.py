"""
Workspace - Project-root scoped path resolution

Every raw path handed to the engine goes through `Workspace.resolve_rel`
before any filesystem access.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class WorkspaceViolation(ValueError):
    """A path resolves outside the project root"""


def normalize_path(path: str) -> str:
    """Use forward slashes and collapse repeated separators."""
    parts = path.replace("\\", "/").split("/")
    return "/".join(p for i, p in enumerate(parts) if p or i == 0)


@dataclass(frozen=True)
class Workspace:
    root: Path

    @classmethod
    def from_path(cls, root: str | Path) -> "Workspace":
        p = Path(root).expanduser()
        try:
            p = p.resolve()
        except OSError:
            # If resolve fails, normalize as absolute.
            p = p.absolute()
        return cls(root=p)

    def resolve_rel(self, rel: str | Path) -> Path:
        """Resolve a caller-provided path within the workspace."""
        raw = str(rel).strip()
        if not raw:
            raise WorkspaceViolation("Empty path")
        try:
            rp = Path(normalize_path(raw))
            candidate = (rp if rp.is_absolute() else self.root / rp).resolve()
        except (ValueError, OSError) as e:
            # e.g. embedded NUL bytes, symlink loops
            raise WorkspaceViolation(f"Invalid path {rel!r}: {e}") from e
        if candidate != self.root and not candidate.is_relative_to(self.root):
            raise WorkspaceViolation(f"Access denied: path is outside project root: {rel}")
        return candidate

    def relative(self, path: str | Path) -> str:
        """Project-relative posix key for a path inside the workspace."""
        resolved = self.resolve_rel(path)
        return resolved.relative_to(self.root).as_posix()

    def ensure_parent_dirs(self, rel: str | Path) -> Path:
        p = self.resolve_rel(rel)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p

    def read_text(self, rel: str | Path) -> str:
        """Read a file; missing files read as empty."""
        p = self.resolve_rel(rel)
        if not p.exists():
            return ""
        with p.open("r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, rel: str | Path, content: str) -> None:
        p = self.ensure_parent_dirs(rel)
        # newline="" keeps "\n" as written on every platform
        with p.open("w", encoding="utf-8", newline="") as f:
            f.write(content)

    def exists(self, rel: str | Path) -> bool:
        return self.resolve_rel(rel).exists()

    def remove(self, rel: str | Path) -> None:
        p = self.resolve_rel(rel)
        if p.exists():
            p.unlink()
