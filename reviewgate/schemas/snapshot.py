"""Snapshot response schemas."""

import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, field_validator

from reviewgate.schemas.approval import ApprovalStatus, CommentResponse

SnapshotTrigger = Literal["initial", "revision_requested", "approved", "manual"]


class FileStats(BaseModel):
    size: int
    lines: int
    last_modified: datetime


class SnapshotSummary(BaseModel):
    """Version metadata without the captured content."""

    id: str
    approval_id: str
    approval_title: str
    version: int
    timestamp: datetime
    trigger: SnapshotTrigger
    status: ApprovalStatus
    file_stats: FileStats

    model_config = {"from_attributes": True}


class SnapshotResponse(SnapshotSummary):
    content: str
    comments: list[CommentResponse]
    annotations: str | None = None

    @field_validator("comments", mode="before")
    @classmethod
    def parse_comments(cls, v: Any) -> list[Any]:
        if isinstance(v, str):
            return json.loads(v)
        return v


class SnapshotCaptureResponse(BaseModel):
    success: bool
    message: str
    snapshot: SnapshotSummary
