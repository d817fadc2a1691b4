"""Approval request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ApprovalStatus = Literal["pending", "approved", "rejected", "needs-revision"]
Outcome = Literal["approved", "rejected", "needs-revision"]


class CommentCreate(BaseModel):
    type: Literal["selection", "general"] = "general"
    selected_text: str | None = None
    comment: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_selection(self) -> "CommentCreate":
        if self.type == "selection" and not self.selected_text:
            raise ValueError("selection comments require selected_text")
        return self


class CommentResponse(BaseModel):
    type: str
    selected_text: str | None = None
    comment: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ApprovalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    file_path: str = Field(..., min_length=1, max_length=512)  # relative to project root
    type: Literal["document", "action"] = "document"
    category: str = Field(..., pattern=r"^(spec|steering)$")
    category_name: str = Field(..., min_length=1, max_length=128)


class ApprovalDecision(BaseModel):
    response: str | None = None
    annotations: str | None = None
    comments: list[CommentCreate] = []


class ApprovalResponse(BaseModel):
    id: str
    title: str
    file_path: str
    type: str
    category: str
    category_name: str
    status: ApprovalStatus
    response: str | None
    annotations: str | None
    comments: list[CommentResponse]
    created_at: datetime
    responded_at: datetime | None

    model_config = {"from_attributes": True}


class ApprovalCreated(BaseModel):
    approval_id: str
    title: str
    file_path: str
    type: str
    status: ApprovalStatus = "pending"


class AnchoredComment(CommentResponse):
    """Comment as displayed next to live content; orphaned selections fall back to general."""

    anchored: bool
    display_type: Literal["selection", "general"]


class ApprovalContentResponse(BaseModel):
    approval_id: str
    file_path: str
    content: str
    comments: list[AnchoredComment]


class ApprovalStatusReport(BaseModel):
    approval_id: str
    title: str
    type: str
    status: ApprovalStatus
    message: str
    created_at: datetime
    responded_at: datetime | None
    response: str | None
    annotations: str | None
    comments: list[CommentResponse]
    is_completed: bool
    can_proceed: bool
    must_wait: bool
    block_next: bool
    next_steps: list[str]
