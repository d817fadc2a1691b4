"""Safe path helpers — resolve artifact paths without escaping the project root."""

from __future__ import annotations

import os
from pathlib import Path

from reviewgate.config import WORKFLOW_DIR
from reviewgate.errors import ValidationError

_SYSTEM_DIRS = ("/etc", "/usr", "/bin", "/sbin", "/var", "/sys", "/proc")


def safe_join(root: Path, relative: str) -> Path:
    """Join *relative* onto *root*, rejecting anything that lands outside it."""
    if not relative or not isinstance(relative, str):
        raise ValidationError("File path must be a non-empty string")

    rel = Path(relative)
    if rel.is_absolute() or ".." in rel.parts:
        raise ValidationError(f"Invalid path segment: {relative}")

    base = root.resolve()
    full = (base / rel).resolve()
    try:
        full.relative_to(base)
    except ValueError:
        raise ValidationError(f"Path traversal detected: {relative}") from None
    return full


def validate_project_path(project_path: str | Path) -> Path:
    """Resolve a project root and make sure it is a usable, non-system directory."""
    if not str(project_path):
        raise ValidationError("Invalid project path: path must be a non-empty string")

    absolute = Path(project_path).expanduser().resolve()
    if os.name != "nt":
        for sys_dir in _SYSTEM_DIRS:
            if absolute == Path(sys_dir) or Path(sys_dir) in absolute.parents:
                raise ValidationError(f"Access to system directory not allowed: {absolute}")

    if not absolute.exists():
        raise ValidationError(f"Project path does not exist: {project_path}")
    if not absolute.is_dir():
        raise ValidationError(f"Project path is not a directory: {absolute}")
    return absolute


def workflow_root(project_root: Path) -> Path:
    return project_root / WORKFLOW_DIR
