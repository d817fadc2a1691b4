"""Diff result schemas — unified-diff style hunks over lines."""

from typing import Literal

from pydantic import BaseModel


class DiffLine(BaseModel):
    type: Literal["add", "delete", "normal"]
    old_line_number: int | None = None
    new_line_number: int | None = None
    content: str
    # last line of its text without a trailing newline
    no_eol: bool = False


class DiffChunk(BaseModel):
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[DiffLine]


class DiffResult(BaseModel):
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    chunks: list[DiffChunk] = []
