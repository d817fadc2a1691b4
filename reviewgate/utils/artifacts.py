"""Artifact reader — live content of files under review."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from reviewgate.errors import IOFailure


@dataclass(frozen=True)
class ArtifactContent:
    path: Path
    content: str
    last_modified: datetime

    @property
    def size(self) -> int:
        return len(self.content.encode("utf-8"))

    @property
    def lines(self) -> int:
        return len(self.content.split("\n"))


def read_artifact(path: Path) -> ArtifactContent:
    """Read *path* as UTF-8 text; any failure surfaces as :class:`IOFailure`."""
    try:
        content = path.read_text(encoding="utf-8")
        mtime = path.stat().st_mtime
    except (OSError, UnicodeDecodeError) as exc:
        raise IOFailure(f"Cannot read artifact {path}: {exc}") from exc
    return ArtifactContent(
        path=path,
        content=content,
        last_modified=datetime.fromtimestamp(mtime),
    )
